from __future__ import annotations

import random
from typing import Iterable

from acs.db.repositories import PlayerRepository
from acs.domain.models import Player


class NoShuffle(random.Random):
    """Random source that leaves sequences in their original order."""

    def shuffle(self, x) -> None:
        return None


def make_players(tiers: Iterable[int], prefix: str = "P") -> list[Player]:
    return [
        Player(id=f"{prefix}{index}", name=f"{prefix}{index}", tier=tier)
        for index, tier in enumerate(tiers, start=1)
    ]


def random_tiers(rng: random.Random, count: int, tier_count: int = 5) -> list[int]:
    return [rng.randint(1, tier_count) for _ in range(count)]


def seed_players(connection, players: Iterable[tuple[str, int]], game_id: int | None = None) -> list[int]:
    repo = PlayerRepository(connection)
    return [
        repo.create({"name": name, "tier": tier, "score": 0, "game_id": game_id})
        for name, tier in players
    ]


SEVEN_PLAYER_POOL = [
    ("A1", 1),
    ("A2", 1),
    ("B1", 2),
    ("C1", 3),
    ("C2", 3),
    ("D1", 4),
    ("D2", 4),
]
