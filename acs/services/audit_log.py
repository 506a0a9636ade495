"""Durable history of changes made through the services.

Each mutating call leaves one event. An event may point at the tournament and
the player it concerns, so the history of either can be read back later.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from acs.errors import InvalidInputError

logger = logging.getLogger(__name__)

GENERATE_TEAMS = "GENERATE_TEAMS"
UPDATE_TEAMS = "UPDATE_TEAMS"
RECORD_SCORES = "RECORD_SCORES"
ADJUST_SCORE = "ADJUST_SCORE"
FINISH_TOURNAMENT = "FINISH_TOURNAMENT"
DELETE_TOURNAMENT = "DELETE_TOURNAMENT"
IMPORT_ROSTER = "IMPORT_ROSTER"
EXPORT_BATCH = "EXPORT_BATCH"

LEVELS = {
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass(frozen=True)
class AuditEvent:
    id: int
    event_type: str
    summary: str
    level: str = "info"
    tournament_id: int | None = None
    player_id: int | None = None
    context: dict[str, object] = field(default_factory=dict)
    created_at: str = ""

    def format_line(self) -> str:
        subjects = []
        if self.tournament_id is not None:
            subjects.append(f"tournament #{self.tournament_id}")
        if self.player_id is not None:
            subjects.append(f"player #{self.player_id}")
        about = f" ({', '.join(subjects)})" if subjects else ""
        return f"[{self.created_at}] {self.level.upper()} {self.event_type}{about}: {self.summary}"


class AuditLogService:
    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def record(
        self,
        event_type: str,
        summary: str,
        *,
        level: str = "info",
        tournament_id: int | None = None,
        player_id: int | None = None,
        **context: object,
    ) -> int:
        """Store one event and mirror it to the module logger.

        Extra keyword arguments are kept as the event's JSON context.
        """
        if level not in LEVELS:
            raise InvalidInputError(f"Unknown audit level: {level}", {"levels": list(LEVELS)})
        logger.log(LEVELS[level], "%s %s", event_type, summary)
        with self._connection:
            cursor = self._connection.execute(
                """
                INSERT INTO audit_log (event_type, summary, level, tournament_id, player_id, context_json)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    event_type,
                    summary,
                    level,
                    tournament_id,
                    player_id,
                    json.dumps(context, ensure_ascii=False, default=str) if context else None,
                ),
            )
        return int(cursor.lastrowid)

    def history(
        self,
        event_type: str | None = None,
        tournament_id: int | None = None,
        player_id: int | None = None,
        limit: int | None = None,
    ) -> list[AuditEvent]:
        """Newest events first, narrowed by any filter that is given."""
        filters = {
            "event_type": event_type,
            "tournament_id": tournament_id,
            "player_id": player_id,
        }
        clauses = [f"{column} = ?" for column, value in filters.items() if value is not None]
        params: list[object] = [value for value in filters.values() if value is not None]
        sql = "SELECT * FROM audit_log"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY id DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        return [_event_from_row(row) for row in self._connection.execute(sql, params).fetchall()]

    @staticmethod
    def write_report(path: str | Path, events: Iterable[AuditEvent]) -> Path:
        output_path = Path(path)
        output_path.write_text(
            "".join(f"{event.format_line()}\n" for event in events), encoding="utf-8"
        )
        return output_path


def _event_from_row(row: sqlite3.Row) -> AuditEvent:
    return AuditEvent(
        id=int(row["id"]),
        event_type=row["event_type"],
        summary=row["summary"],
        level=row["level"],
        tournament_id=row["tournament_id"],
        player_id=row["player_id"],
        context=json.loads(row["context_json"]) if row["context_json"] else {},
        created_at=row["created_at"],
    )
