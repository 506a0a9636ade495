from __future__ import annotations

import random
from typing import Sequence

from acs.domain.models import Player, Tier
from acs.errors import InvalidInputError

TierQueues = dict[Tier, tuple[Player, ...]]


def group_by_tier(
    players: Sequence[Player],
    rng: random.Random | None = None,
) -> tuple[TierQueues, list[Tier]]:
    """Split players into per-tier queues, each independently shuffled.

    Returns the queues keyed by tier in ascending order together with the
    sorted list of tiers present. The input sequence is left untouched.
    """
    if not players:
        raise InvalidInputError("No players registered for this tournament.")

    grouped: dict[Tier, list[Player]] = {}
    for player in players:
        if player.tier is None:
            raise InvalidInputError(
                f"Player {player.id} has no tier.", {"player_id": player.id}
            )
        grouped.setdefault(player.tier, []).append(player)

    shuffler = rng or random
    queues: TierQueues = {}
    for tier in sorted(grouped):
        members = list(grouped[tier])
        shuffler.shuffle(members)
        queues[tier] = tuple(members)
    return queues, list(queues)
