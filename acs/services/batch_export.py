from __future__ import annotations

import re
import sqlite3
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from acs.db.repositories import GameRepository, TournamentRepository
from acs.errors import TournamentNotFoundError
from acs.services.audit_log import EXPORT_BATCH, AuditLogService
from acs.services.ranking import RankingService
from acs.services.xlsx_export import write_ranking, write_team_sheet


@dataclass
class BatchExportResult:
    run_directory: Path
    files_created: list[Path]


class BatchExportService:
    """Writes the leaderboard and every tournament's team sheet into a dated run folder."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._tournament_repo = TournamentRepository(connection)
        self._game_repo = GameRepository(connection)
        self._ranking_service = RankingService(connection)
        self._audit_log = AuditLogService(connection)

    def export_all(self, base_directory: str | Path, group_by: str | None = None) -> BatchExportResult:
        run_directory = Path(base_directory) / "exports" / f"{date.today().isoformat()}_run"
        tournaments_dir = run_directory / "tournaments"
        tournaments_dir.mkdir(parents=True, exist_ok=True)

        files_created = [self.export_ranking(run_directory / "ranking.xlsx", group_by=group_by)]
        for tournament in self._tournament_repo.list():
            tournament_id = int(tournament["id"])
            target = tournaments_dir / f"teams_{self._slug(str(tournament['name']))}_{tournament_id}.xlsx"
            files_created.append(self.export_teams(tournament_id, target))

        self._audit_log.record(
            EXPORT_BATCH,
            f"{len(files_created)} workbooks written to {run_directory}",
            files=[str(path) for path in files_created],
        )
        return BatchExportResult(run_directory=run_directory, files_created=files_created)

    def export_ranking(self, path: str | Path, group_by: str | None = None) -> Path:
        return write_ranking(path, self._ranking_service.ranking(group_by=group_by))

    def export_teams(self, tournament_id: int, path: str | Path) -> Path:
        tournament = self._tournament_repo.get(tournament_id)
        if tournament is None:
            raise TournamentNotFoundError(tournament_id)
        game = self._game_repo.get(tournament["game_id"]) if tournament["game_id"] else None
        return write_team_sheet(
            path,
            tournament,
            game["name"] if game else None,
            self._tournament_repo.list_team_members(tournament_id),
        )

    @staticmethod
    def _slug(value: str) -> str:
        normalized = re.sub(r"[^\w\-]+", "_", value.strip().lower())
        return normalized.strip("_") or "tournament"
