from __future__ import annotations

import math
import random
from collections import deque
from dataclasses import replace
from typing import Iterable, Mapping, Sequence

from acs.domain.models import Player, PlayerId, Team, Tier, Tournament
from acs.domain.tiers import group_by_tier
from acs.domain.tournament import ensure_editable, parse_team_number
from acs.errors import InvalidInputError

DEFAULT_TEAM_COUNT = 2


def parse_team_count(value: object, default: int = DEFAULT_TEAM_COUNT) -> int:
    """Parse a requested team count.

    Missing or non-numeric values fall back to ``default``; fractional
    values are truncated. Counts below one are rejected.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        count = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            return default
        count = int(value)
    else:
        text = str(value).strip()
        try:
            count = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return default
            if not math.isfinite(number):
                return default
            count = int(number)
    if count < 1:
        raise InvalidInputError("Team count must be at least 1.", {"team_count": value})
    return count


def team_size_targets(total_players: int, team_count: int) -> list[int]:
    """Sizes each team is filled up to: ceil(T/N) for the first T mod N teams, floor for the rest."""
    base, extra = divmod(total_players, team_count)
    return [base + 1 if index < extra else base for index in range(team_count)]


def split_tiers(tiers: Sequence[Tier]) -> tuple[list[Tier], list[Tier]]:
    """Return (high, low) draw orders: strongest half ascending, weakest half descending."""
    ordered = sorted(tiers)
    middle = math.ceil(len(ordered) / 2)
    return ordered[:middle], list(reversed(ordered[middle:]))


def _draw(
    pending: Mapping[Tier, deque[Player]],
    tier_order: Sequence[Tier],
    roster: list[PlayerId],
    target: int,
) -> bool:
    if len(roster) >= target:
        return False
    for tier in tier_order:
        queue = pending[tier]
        if queue:
            roster.append(queue.popleft().id)
            return True
    return False


def balance_teams(
    queues: Mapping[Tier, Sequence[Player]],
    tiers: Sequence[Tier],
    team_count: int,
    total_players: int,
) -> list[Team]:
    """Deal players from tier queues into ``team_count`` teams.

    Teams are visited round-robin. On each visit a team draws one player from
    the first non-empty high tier (strongest first) and then one from the
    first non-empty low tier (weakest first), never growing past its size
    target. Sizes never differ by more than one and none exceeds
    ceil(total_players / team_count). The queues passed in are not consumed.
    """
    if team_count < 1:
        raise InvalidInputError("Team count must be at least 1.", {"team_count": team_count})
    queued = sum(len(queues.get(tier, ())) for tier in tiers)
    if total_players < 0 or total_players > queued:
        raise InvalidInputError(
            "Total player count does not match the tier queues.",
            {"total_players": total_players, "queued": queued},
        )

    pending = {tier: deque(queues.get(tier, ())) for tier in tiers}
    high_tiers, low_tiers = split_tiers(tiers)
    targets = team_size_targets(total_players, team_count)
    rosters: list[list[PlayerId]] = [[] for _ in range(team_count)]

    placed = 0
    while placed < total_players:
        placed_before = placed
        for roster, target in zip(rosters, targets):
            if placed >= total_players:
                break
            if _draw(pending, high_tiers, roster, target):
                placed += 1
            if placed >= total_players:
                break
            if _draw(pending, low_tiers, roster, target):
                placed += 1
        if placed == placed_before:
            # unreachable while targets sum to total_players
            raise RuntimeError("Team balancing made no progress.")

    return [
        Team(team_number=index, player_ids=tuple(roster))
        for index, roster in enumerate(rosters, start=1)
    ]


def _player_ref(entry: object) -> PlayerId:
    if isinstance(entry, Player):
        return entry.id
    if isinstance(entry, Mapping):
        ref = entry.get("id", entry.get("_id"))
        if ref is None:
            raise InvalidInputError("Team member has no player id.", {"player": dict(entry)})
        return ref
    if entry is None or isinstance(entry, bool):
        raise InvalidInputError("Team member has no player id.", {"player": entry})
    return entry  # type: ignore[return-value]


def normalize_teams(teams: Iterable[object]) -> list[Team]:
    """Validate a caller-supplied team structure and reduce members to bare ids.

    Each team is a ``Team`` or a mapping with ``team_number`` (or
    ``teamNumber``) and ``players`` (or ``player_ids``). Members may be ids,
    ``Player`` objects or mappings holding ``id``/``_id``.
    """
    normalized: list[Team] = []
    seen_numbers: set[int] = set()
    seen_players: set[PlayerId] = set()
    for team in teams:
        if isinstance(team, Team):
            number, members = team.team_number, list(team.player_ids)
        elif isinstance(team, Mapping):
            number = parse_team_number(team.get("team_number", team.get("teamNumber")))
            members = team.get("players", team.get("player_ids"))
            if not isinstance(members, (list, tuple)):
                raise InvalidInputError(
                    "Team players must be a list.", {"team_number": number}
                )
        else:
            raise InvalidInputError("Malformed team entry.", {"team": repr(team)})

        if number < 1:
            raise InvalidInputError("Team number must be positive.", {"team_number": number})
        if number in seen_numbers:
            raise InvalidInputError("Duplicate team number.", {"team_number": number})
        seen_numbers.add(number)

        player_ids: list[PlayerId] = []
        for member in members:
            ref = _player_ref(member)
            if ref in seen_players:
                raise InvalidInputError(
                    "Player is assigned to more than one team.", {"player_id": ref}
                )
            seen_players.add(ref)
            player_ids.append(ref)
        normalized.append(Team(team_number=number, player_ids=tuple(player_ids)))
    return normalized


def replace_teams(tournament: Tournament, teams: Iterable[object]) -> Tournament:
    ensure_editable(tournament)
    normalized = normalize_teams(teams)
    registered = set(tournament.player_ids)
    for team in normalized:
        unknown = [pid for pid in team.player_ids if pid not in registered]
        if unknown:
            raise InvalidInputError(
                "Team contains players not registered in the tournament.",
                {"team_number": team.team_number, "player_ids": unknown},
            )
    return replace(tournament, teams=normalized)


def generate_teams(
    tournament: Tournament,
    players: Sequence[Player],
    team_count: int,
    rng: random.Random | None = None,
) -> Tournament:
    """Group, shuffle and balance ``players`` into fresh teams for ``tournament``."""
    ensure_editable(tournament)
    queues, tiers = group_by_tier(players, rng=rng)
    teams = balance_teams(queues, tiers, team_count, len(players))
    return replace(tournament, teams=teams)
