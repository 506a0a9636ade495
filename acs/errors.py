"""Exception hierarchy for the tournament engine."""

from __future__ import annotations

from typing import Any


class AcsError(Exception):
    """Base class for every error raised by the engine and its services."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class InvalidInputError(AcsError, ValueError):
    """Rejected input; raised before anything is mutated."""


class NotFoundError(AcsError, LookupError):
    """A referenced entity does not exist."""


class PlayerNotFoundError(NotFoundError):
    def __init__(self, player_id: object) -> None:
        super().__init__(f"Player not found: {player_id}", {"player_id": player_id})
        self.player_id = player_id


class TournamentNotFoundError(NotFoundError):
    def __init__(self, tournament_id: object) -> None:
        super().__init__(
            f"Tournament not found: {tournament_id}", {"tournament_id": tournament_id}
        )
        self.tournament_id = tournament_id


class GameNotFoundError(NotFoundError):
    def __init__(self, game_id: object) -> None:
        super().__init__(f"Game not found: {game_id}", {"game_id": game_id})
        self.game_id = game_id


class WinningTeamNotFoundError(NotFoundError, InvalidInputError):
    def __init__(self, team_number: object) -> None:
        super().__init__(
            "Winning team not found in this tournament.", {"team_number": team_number}
        )
        self.team_number = team_number


class StateConflictError(AcsError):
    """The tournament is finished and can no longer change."""
