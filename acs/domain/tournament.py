"""Tournament lifecycle rules.

A tournament is created without teams, can have its teams generated or edited
and its rounds scored any number of times while open, and is finished exactly
once. After that nothing about it may change.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from acs.domain.models import PlayerId, Team, Tournament
from acs.errors import InvalidInputError, StateConflictError, WinningTeamNotFoundError


def ensure_editable(tournament: Tournament) -> None:
    if tournament.is_finished:
        raise StateConflictError(
            "Tournament is finished and can no longer be modified.",
            {"tournament_id": tournament.id},
        )


def parse_team_number(value: object) -> int:
    if isinstance(value, bool) or value is None:
        raise InvalidInputError("Team number is required.", {"team_number": value})
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidInputError("Team number must be an integer.", {"team_number": value}) from None
    if isinstance(value, float) and not value.is_integer():
        raise InvalidInputError("Team number must be an integer.", {"team_number": value})
    return number


def finish_tournament(tournament: Tournament, winning_team_number: object) -> Tournament:
    ensure_editable(tournament)
    try:
        number = parse_team_number(winning_team_number)
    except InvalidInputError:
        raise WinningTeamNotFoundError(winning_team_number) from None
    if tournament.find_team(number) is None:
        raise WinningTeamNotFoundError(number)
    return replace(tournament, is_finished=True, winner_team_number=number)


def winning_team(tournament: Tournament) -> Team | None:
    if not tournament.is_finished or tournament.winner_team_number is None:
        return None
    return tournament.find_team(tournament.winner_team_number)


def register_players(tournament: Tournament, player_ids: Iterable[PlayerId]) -> Tournament:
    """Replace the registered players.

    Team members who are no longer registered are dropped from their teams.
    """
    ensure_editable(tournament)
    registered: list[PlayerId] = []
    for player_id in player_ids:
        if player_id not in registered:
            registered.append(player_id)
    keep = set(registered)
    teams = [
        Team(
            team_number=team.team_number,
            player_ids=tuple(pid for pid in team.player_ids if pid in keep),
        )
        for team in tournament.teams
    ]
    return replace(tournament, player_ids=registered, teams=teams)
