from __future__ import annotations

from typing import Iterable

from acs.domain.models import Player, RankingEntry
from acs.errors import InvalidInputError

GROUP_BY_NAME = "name"
GROUP_BY_ID = "id"


def rank_players(players: Iterable[Player], group_by: str = GROUP_BY_NAME) -> list[RankingEntry]:
    """Build the leaderboard over every player record.

    Records are merged by display name (or by id with ``group_by="id"``).
    Each entry carries the summed score and the number of distinct games its
    records belong to. Sorted by total score descending, then name.
    """
    if group_by not in (GROUP_BY_NAME, GROUP_BY_ID):
        raise InvalidInputError("Unknown ranking grouping.", {"group_by": group_by})

    totals: dict[object, float] = {}
    names: dict[object, str] = {}
    games: dict[object, set[object]] = {}
    for player in players:
        key = player.name if group_by == GROUP_BY_NAME else player.id
        totals[key] = totals.get(key, 0) + (player.score or 0)
        names.setdefault(key, player.name)
        game_ids = games.setdefault(key, set())
        if player.game_id is not None:
            game_ids.add(player.game_id)

    entries = [
        RankingEntry(key=key, name=names[key], total_score=total, games_count=len(games[key]))
        for key, total in totals.items()
    ]
    entries.sort(key=lambda entry: (-entry.total_score, entry.name, str(entry.key)))
    return entries
