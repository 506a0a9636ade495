from __future__ import annotations

import sqlite3
from typing import Iterable

from acs.db.repositories import PlayerRepository, TournamentRepository
from acs.domain.models import Player, Tournament
from acs.domain.scoring import (
    ScoreApplication,
    adjust_player_score,
    parse_score,
    record_team_scores,
)
from acs.errors import PlayerNotFoundError, TournamentNotFoundError
from acs.services.audit_log import ADJUST_SCORE, RECORD_SCORES, AuditLogService
from acs.services.locks import TournamentLocks, default_locks


class ScoreService:
    def __init__(self, connection: sqlite3.Connection, locks: TournamentLocks | None = None) -> None:
        self._connection = connection
        self._locks = locks or default_locks
        self._player_repo = PlayerRepository(connection)
        self._tournament_repo = TournamentRepository(connection)
        self._audit_log = AuditLogService(connection)

    def record_team_scores(self, tournament_id: int, team_scores: Iterable[object]) -> ScoreApplication:
        """Add each reported team score to all members of that team.

        Not idempotent: recording the same round twice counts it twice.
        Entries for unknown team numbers are skipped and reported back.
        """
        with self._locks.hold(tournament_id):
            row = self._tournament_repo.get(tournament_id)
            if row is None:
                raise TournamentNotFoundError(tournament_id)
            tournament = Tournament.from_row(
                row,
                player_ids=self._tournament_repo.list_player_ids(tournament_id),
                teams=self._tournament_repo.list_teams(tournament_id),
            )
            members = [pid for team in tournament.teams for pid in team.player_ids]
            players = {
                member["id"]: Player.from_row(member)
                for member in self._player_repo.list_by_ids(members)
            }
            application = record_team_scores(tournament, team_scores, players)
            self._player_repo.add_scores(application.deltas)

        self._audit_log.record(
            RECORD_SCORES,
            f"Teams {application.applied_team_numbers} scored, {len(application.deltas)} players updated",
            level="warning" if application.skipped_team_numbers else "info",
            tournament_id=tournament_id,
            applied_team_numbers=application.applied_team_numbers,
            skipped_team_numbers=application.skipped_team_numbers,
        )
        return application

    def adjust_player_score(self, player_id: int, delta: object) -> Player:
        amount = parse_score(delta)
        row = self._player_repo.get(player_id)
        if row is None:
            raise PlayerNotFoundError(player_id)
        player = Player.from_row(row)
        previous = player.score
        adjust_player_score(player, amount)
        self._player_repo.add_score(player_id, amount)
        self._audit_log.record(
            ADJUST_SCORE,
            f"{player.name}: {previous} -> {player.score}",
            player_id=player_id,
            delta=amount,
        )
        return Player.from_row(self._player_repo.get(player_id))
