from __future__ import annotations

import sqlite3

from acs.db.repositories import PlayerRepository
from acs.domain.models import Player, RankingEntry
from acs.domain.ranking import rank_players
from acs.settings import get_ranking_group_by


class RankingService:
    def __init__(self, connection: sqlite3.Connection) -> None:
        self._player_repo = PlayerRepository(connection)

    def ranking(self, group_by: str | None = None) -> list[RankingEntry]:
        players = [Player.from_row(row) for row in self._player_repo.list()]
        return rank_players(players, group_by=group_by or get_ranking_group_by())
