"""Workbooks for the leaderboard and tournament team sheets.

Both sheets share one layout: a few caption lines, a styled column header,
then one row per record. The winning team's rows are set in bold.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from acs.domain.models import RankingEntry

RANKING_COLUMNS = ("Place", "Name", "Total score", "Games")
TEAM_COLUMNS = ("Team", "Name", "Tier", "Score")

_HEADER_FONT = Font(bold=True, color="FFFFFF")
_HEADER_FILL = PatternFill(start_color="1F4E78", end_color="1F4E78", fill_type="solid")
_WINNER_FONT = Font(bold=True)
_MAX_COLUMN_WIDTH = 60


def write_ranking(
    path: str | Path,
    entries: Iterable[RankingEntry],
    generated_on: date | None = None,
) -> Path:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Ranking"
    captions = ["Ranking", f"Date: {(generated_on or date.today()).isoformat()}"]
    header_row = _start_table(sheet, captions, RANKING_COLUMNS)
    for place, entry in enumerate(entries, start=1):
        sheet.append([place, entry.name, entry.total_score, entry.games_count])
    _fit_columns(sheet, header_row)
    workbook.save(path)
    return Path(path)


def write_team_sheet(
    path: str | Path,
    tournament: Mapping[str, object],
    game_name: str | None,
    members: Sequence[Mapping[str, object]],
) -> Path:
    """Write one row per team member, ordered as ``members`` is.

    ``tournament`` is a tournaments row; ``members`` are rows of
    ``TournamentRepository.list_team_members``.
    """
    winner = tournament.get("winner_team_number") if tournament.get("is_finished") else None
    status = "open" if not tournament.get("is_finished") else f"finished, won by team {winner}"

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Teams"
    header_row = _start_table(
        sheet,
        [
            f"Tournament: {tournament.get('name')}",
            f"Game: {game_name or 'not set'}",
            f"Status: {status}",
        ],
        TEAM_COLUMNS,
    )
    for member in members:
        sheet.append([member["team_number"], member["name"], member["tier"], member["score"]])
        if winner is not None and member["team_number"] == winner:
            for cell in sheet[sheet.max_row]:
                cell.font = _WINNER_FONT
    _fit_columns(sheet, header_row)
    workbook.save(path)
    return Path(path)


def _start_table(sheet: Worksheet, captions: Sequence[str], columns: Sequence[str]) -> int:
    for caption in captions:
        sheet.append([caption])
    sheet.append(list(columns))
    header_row = sheet.max_row
    for cell in sheet[header_row]:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
    sheet.freeze_panes = sheet.cell(row=header_row + 1, column=1)
    return header_row


def _fit_columns(sheet: Worksheet, header_row: int) -> None:
    # captions above the header would widen column A for nothing
    for column in sheet.iter_cols(min_row=header_row):
        width = max(len(str(cell.value)) for cell in column if cell.value is not None)
        sheet.column_dimensions[get_column_letter(column[0].column)].width = min(width + 2, _MAX_COLUMN_WIDTH)
