from __future__ import annotations

import logging
import random
import sqlite3
from dataclasses import dataclass
from typing import Iterable

from acs.db.repositories import GameRepository, PlayerRepository, TournamentRepository
from acs.domain.models import Player, Team, Tournament
from acs.domain.teams import generate_teams, parse_team_count, replace_teams
from acs.domain.tournament import ensure_editable, finish_tournament, register_players, winning_team
from acs.errors import (
    GameNotFoundError,
    InvalidInputError,
    PlayerNotFoundError,
    TournamentNotFoundError,
)
from acs.services.audit_log import (
    DELETE_TOURNAMENT,
    FINISH_TOURNAMENT,
    GENERATE_TEAMS,
    UPDATE_TEAMS,
    AuditLogService,
)
from acs.services.locks import TournamentLocks, default_locks
from acs.settings import get_default_team_count

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FinishedTournament:
    tournament: Tournament
    game_name: str | None
    winning_team: Team | None
    winning_score: float


class TournamentService:
    def __init__(
        self,
        connection: sqlite3.Connection,
        rng: random.Random | None = None,
        locks: TournamentLocks | None = None,
    ) -> None:
        self._connection = connection
        self._rng = rng
        self._locks = locks or default_locks
        self._tournament_repo = TournamentRepository(connection)
        self._player_repo = PlayerRepository(connection)
        self._game_repo = GameRepository(connection)
        self._audit_log = AuditLogService(connection)

    def create(self, name: str, game_id: int | None = None, player_ids: Iterable[int] = ()) -> Tournament:
        name = str(name or "").strip()
        if not name:
            raise InvalidInputError("Tournament name is required.")
        self._check_game(game_id)
        registered = self._check_players(player_ids)
        tournament_id = self._tournament_repo.create(
            {"name": name, "game_id": game_id, "player_ids": registered}
        )
        logger.info("Created tournament %s (%s) with %d players", tournament_id, name, len(registered))
        return self.get(tournament_id)

    def get(self, tournament_id: int) -> Tournament:
        row = self._tournament_repo.get(tournament_id)
        if row is None:
            raise TournamentNotFoundError(tournament_id)
        return Tournament.from_row(
            row,
            player_ids=self._tournament_repo.list_player_ids(tournament_id),
            teams=self._tournament_repo.list_teams(tournament_id),
        )

    def list(self) -> list[Tournament]:
        return [self.get(int(row["id"])) for row in self._tournament_repo.list()]

    def register_players(self, tournament_id: int, player_ids: Iterable[int]) -> Tournament:
        return self.update(tournament_id, player_ids=player_ids)

    def update(
        self,
        tournament_id: int,
        name: str | None = None,
        game_id: int | None = None,
        player_ids: Iterable[int] | None = None,
    ) -> Tournament:
        """Change the name, game or registrations of an open tournament.

        Everything is validated before the first write, and all changes are
        stored in one transaction.
        """
        with self._locks.hold(tournament_id):
            tournament = self.get(tournament_id)
            ensure_editable(tournament)
            self._check_game(game_id)
            data: dict[str, object] = {
                "name": name.strip() if name and name.strip() else tournament.name,
                "game_id": game_id if game_id is not None else tournament.game_id,
            }
            if player_ids is not None:
                updated = register_players(tournament, self._check_players(player_ids))
                data["player_ids"] = updated.player_ids
                if updated.teams != tournament.teams:
                    data["teams"] = self._team_rows(updated.teams)
            self._tournament_repo.update(tournament_id, data)
            return self.get(tournament_id)

    def delete(self, tournament_id: int) -> None:
        with self._locks.hold(tournament_id):
            tournament = self.get(tournament_id)
            ensure_editable(tournament)
            self._tournament_repo.delete(tournament_id)
        self._locks.discard(tournament_id)
        self._audit_log.record(
            DELETE_TOURNAMENT,
            f"Deleted {tournament.name!r}",
            tournament_id=tournament_id,
        )

    def generate_teams(self, tournament_id: int, team_count: object = None) -> Tournament:
        count = parse_team_count(team_count, default=get_default_team_count())
        with self._locks.hold(tournament_id):
            tournament = self.get(tournament_id)
            ensure_editable(tournament)
            players = [
                Player.from_row(row)
                for row in self._player_repo.list_by_ids(tournament.player_ids)
            ]
            updated = generate_teams(tournament, players, count, rng=self._rng)
            self._store_teams(tournament_id, updated.teams)
        self._audit_log.record(
            GENERATE_TEAMS,
            f"{len(players)} players dealt into {count} teams",
            tournament_id=tournament_id,
            team_sizes=[len(team) for team in updated.teams],
        )
        return self.get(tournament_id)

    def update_teams(self, tournament_id: int, teams: Iterable[object]) -> Tournament:
        with self._locks.hold(tournament_id):
            tournament = self.get(tournament_id)
            updated = replace_teams(tournament, teams)
            self._store_teams(tournament_id, updated.teams)
        self._audit_log.record(
            UPDATE_TEAMS,
            f"{len(updated.teams)} teams replaced by hand",
            tournament_id=tournament_id,
        )
        return self.get(tournament_id)

    def finish(self, tournament_id: int, winning_team_number: object) -> Tournament:
        with self._locks.hold(tournament_id):
            tournament = finish_tournament(self.get(tournament_id), winning_team_number)
            self._tournament_repo.mark_finished(tournament_id, int(tournament.winner_team_number))
        self._audit_log.record(
            FINISH_TOURNAMENT,
            f"Won by team {tournament.winner_team_number}",
            tournament_id=tournament_id,
            winner_team_number=tournament.winner_team_number,
        )
        return self.get(tournament_id)

    def list_finished(self) -> list[FinishedTournament]:
        finished: list[FinishedTournament] = []
        for row in self._tournament_repo.list_finished():
            tournament = self.get(int(row["id"]))
            team = winning_team(tournament)
            score = 0
            if team is not None:
                score = sum(
                    member.get("score") or 0
                    for member in self._player_repo.list_by_ids(list(team.player_ids))
                )
            finished.append(
                FinishedTournament(
                    tournament=tournament,
                    game_name=row.get("game_name"),
                    winning_team=team,
                    winning_score=score,
                )
            )
        return finished

    def team_rosters(self, tournament_id: int) -> list[dict[str, object]]:
        if self._tournament_repo.get(tournament_id) is None:
            raise TournamentNotFoundError(tournament_id)
        return self._tournament_repo.list_team_members(tournament_id)

    def _store_teams(self, tournament_id: int, teams: Iterable[Team]) -> None:
        self._tournament_repo.replace_teams(tournament_id, self._team_rows(teams))

    @staticmethod
    def _team_rows(teams: Iterable[Team]) -> list[dict[str, object]]:
        return [{"team_number": team.team_number, "player_ids": list(team.player_ids)} for team in teams]

    def _check_game(self, game_id: int | None) -> None:
        if game_id is not None and self._game_repo.get(game_id) is None:
            raise GameNotFoundError(game_id)

    def _check_players(self, player_ids: Iterable[int]) -> list[int]:
        requested: list[int] = []
        for player_id in player_ids:
            if player_id not in requested:
                requested.append(player_id)
        found = {row["id"] for row in self._player_repo.list_by_ids(requested)}
        for player_id in requested:
            if player_id not in found:
                raise PlayerNotFoundError(player_id)
        return requested
