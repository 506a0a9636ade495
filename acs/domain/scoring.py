"""Round score propagation from teams to their members."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from acs.domain.models import Player, PlayerId, Team, TeamScore, Tournament
from acs.domain.tournament import ensure_editable, parse_team_number
from acs.errors import InvalidInputError, PlayerNotFoundError


@dataclass
class ScoreApplication:
    deltas: dict[PlayerId, float] = field(default_factory=dict)
    applied_team_numbers: list[int] = field(default_factory=list)
    skipped_team_numbers: list[int] = field(default_factory=list)


def parse_score(value: object) -> float:
    if value is None or isinstance(value, bool):
        raise InvalidInputError("Score is required.", {"score": value})
    if isinstance(value, (int, float)):
        number = value
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            raise InvalidInputError("Score must be a number.", {"score": value}) from None
        if number.is_integer():
            number = int(number)
    if isinstance(number, float) and not math.isfinite(number):
        raise InvalidInputError("Score must be a finite number.", {"score": value})
    return number


def normalize_team_scores(entries: Iterable[object]) -> list[TeamScore]:
    """Accept ``TeamScore`` objects, ``(team_number, score)`` pairs or mappings."""
    scores: list[TeamScore] = []
    for entry in entries:
        if isinstance(entry, TeamScore):
            scores.append(entry)
            continue
        if isinstance(entry, Mapping):
            number = entry.get("team_number", entry.get("teamNumber"))
            score = entry.get("score")
        elif isinstance(entry, (tuple, list)) and len(entry) == 2:
            number, score = entry
        else:
            raise InvalidInputError("Malformed team score entry.", {"entry": repr(entry)})
        scores.append(TeamScore(team_number=parse_team_number(number), score=parse_score(score)))
    return scores


def team_score_deltas(teams: Iterable[Team], team_scores: Iterable[object]) -> ScoreApplication:
    """Work out how much each player's score moves for a set of team results.

    Entries naming a team that does not exist are skipped and listed in
    ``skipped_team_numbers``. A team reported twice is counted twice.
    """
    by_number = {team.team_number: team for team in teams}
    application = ScoreApplication()
    for entry in normalize_team_scores(team_scores):
        team = by_number.get(entry.team_number)
        if team is None:
            application.skipped_team_numbers.append(entry.team_number)
            continue
        application.applied_team_numbers.append(entry.team_number)
        for player_id in team.player_ids:
            application.deltas[player_id] = application.deltas.get(player_id, 0) + entry.score
    return application


def record_team_scores(
    tournament: Tournament,
    team_scores: Iterable[object],
    players: Mapping[PlayerId, Player],
) -> ScoreApplication:
    """Add each team's round score to every member in ``players``."""
    ensure_editable(tournament)
    if not tournament.teams:
        raise InvalidInputError(
            "Tournament has no teams.", {"tournament_id": tournament.id}
        )
    application = team_score_deltas(tournament.teams, team_scores)
    for player_id in application.deltas:
        if player_id not in players:
            raise PlayerNotFoundError(player_id)
    for player_id, delta in application.deltas.items():
        players[player_id].score += delta
    return application


def adjust_player_score(player: Player, delta: object) -> Player:
    player.score += parse_score(delta)
    return player
