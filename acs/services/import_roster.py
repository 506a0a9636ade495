from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from acs.errors import AcsError, InvalidInputError
from acs.services.audit_log import IMPORT_ROSTER, AuditLogService
from acs.services.roster import RosterService, parse_tier

HEADER_SYNONYMS = {
    "name": ["name", "player", "nickname", "pseudo", "joueur", "nom"],
    "tier": ["tier", "level", "rank", "niveau"],
    "game": ["game", "jeu", "title"],
}


@dataclass
class RosterImportReport:
    players_created: list[int] = field(default_factory=list)
    games_created: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def _normalize_header(value: object) -> str:
    if value is None:
        return ""
    text = str(value).strip().lower()
    return "".join(ch for ch in text if ch.isalnum())


def detect_headers(row_values: Iterable[object]) -> dict[str, int]:
    normalized_synonyms = {
        key: {_normalize_header(item) for item in values}
        for key, values in HEADER_SYNONYMS.items()
    }
    mapping: dict[str, int] = {}
    for idx, cell_value in enumerate(row_values):
        normalized = _normalize_header(cell_value)
        if not normalized:
            continue
        for key, options in normalized_synonyms.items():
            if normalized in options and key not in mapping:
                mapping[key] = idx
                break
    return mapping


def _is_row_empty(row_values: Iterable[object]) -> bool:
    for value in row_values:
        if value is None:
            continue
        if str(value).strip() != "":
            return False
    return True


def parse_roster_xlsx(path: str | Path) -> list[dict[str, object]]:
    """Read the first roster table of the active sheet.

    The header row is the first one holding both a name and a tier column.
    Reading stops at the first empty row after it.
    """
    try:
        workbook = load_workbook(str(path), data_only=True)
    except (InvalidFileException, OSError) as exc:
        raise InvalidInputError(f"Cannot read roster file: {path}", {"error": str(exc)}) from exc
    sheet = workbook.active

    mapping: dict[str, int] = {}
    rows: list[dict[str, object]] = []
    for line_number, row in enumerate(sheet.iter_rows(values_only=True), start=1):
        row_values = list(row)
        if not mapping:
            candidate = detect_headers(row_values)
            if "name" in candidate and "tier" in candidate:
                mapping = candidate
            continue
        if _is_row_empty(row_values):
            break
        entry: dict[str, object] = {"line": line_number}
        for key in HEADER_SYNONYMS:
            index = mapping.get(key)
            entry[key] = row_values[index] if index is not None and index < len(row_values) else None
        rows.append(entry)

    if not mapping:
        raise InvalidInputError("No roster table (name and tier columns) found.", {"path": str(path)})
    return rows


def import_roster(
    *,
    connection: sqlite3.Connection,
    file_path: str | Path,
    default_game: str | None = None,
) -> RosterImportReport:
    rows = parse_roster_xlsx(file_path)
    roster = RosterService(connection)
    report = RosterImportReport()
    known_games = {str(game["name"]).strip().lower() for game in roster.list_games()}

    for row in rows:
        try:
            name = str(row.get("name") or "").strip()
            if not name:
                continue
            tier = parse_tier(row.get("tier"))
            game_name = str(row.get("game") or default_game or "").strip()
            game_id = None
            if game_name:
                if game_name.lower() not in known_games:
                    known_games.add(game_name.lower())
                    report.games_created.append(game_name)
                game_id = roster.get_or_create_game(game_name)
            player = roster.add_player(name, tier, game_id=game_id)
            report.players_created.append(int(player.id))
        except AcsError as exc:
            report.errors.append(f"line {row.get('line')}: {exc}")

    AuditLogService(connection).record(
        IMPORT_ROSTER,
        f"{Path(file_path).name}: {len(report.players_created)} players, {len(report.errors)} errors",
        level="warning" if report.errors else "info",
        path=str(file_path),
        games_created=report.games_created,
        errors=report.errors,
    )
    return report
