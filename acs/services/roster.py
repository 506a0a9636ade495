from __future__ import annotations

import sqlite3

from acs.db.repositories import GameRepository, PlayerRepository
from acs.domain.models import Player
from acs.errors import GameNotFoundError, InvalidInputError, PlayerNotFoundError


def parse_tier(value: object) -> int:
    if value is None or isinstance(value, bool) or str(value).strip() == "":
        raise InvalidInputError("Tier is required.", {"tier": value})
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidInputError("Tier must be an integer.", {"tier": value})
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidInputError("Tier must be an integer.", {"tier": value}) from None


def _require_name(value: object, label: str) -> str:
    name = str(value or "").strip()
    if not name:
        raise InvalidInputError(f"{label} name is required.")
    return name


class RosterService:
    """Games and the players registered for them."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._game_repo = GameRepository(connection)
        self._player_repo = PlayerRepository(connection)

    def add_game(self, name: str, description: str | None = None) -> int:
        return self._game_repo.create(
            {"name": _require_name(name, "Game"), "description": description}
        )

    def list_games(self) -> list[dict[str, object]]:
        return self._game_repo.list()

    def get_or_create_game(self, name: str) -> int:
        existing = self._game_repo.find_by_name(name)
        if existing is not None:
            return int(existing["id"])
        return self.add_game(name)

    def add_player(self, name: str, tier: object, game_id: int | None = None) -> Player:
        if game_id is not None and self._game_repo.get(game_id) is None:
            raise GameNotFoundError(game_id)
        player_id = self._player_repo.create(
            {
                "name": _require_name(name, "Player"),
                "tier": parse_tier(tier),
                "score": 0,
                "game_id": game_id,
            }
        )
        return self.get_player(player_id)

    def get_player(self, player_id: int) -> Player:
        row = self._player_repo.get(player_id)
        if row is None:
            raise PlayerNotFoundError(player_id)
        return Player.from_row(row)

    def list_players(self, game_id: int | None = None) -> list[Player]:
        rows = self._player_repo.list() if game_id is None else self._player_repo.list_by_game(game_id)
        return [Player.from_row(row) for row in rows]

    def update_player(self, player_id: int, name: str | None = None, tier: object = None) -> Player:
        if not (name and name.strip()) and tier is None:
            raise InvalidInputError("At least one field (name or tier) must be provided.")
        row = self._player_repo.get(player_id)
        if row is None:
            raise PlayerNotFoundError(player_id)
        patch = dict(row)
        if name and name.strip():
            patch["name"] = name.strip()
        if tier is not None:
            patch["tier"] = parse_tier(tier)
        self._player_repo.update(player_id, patch)
        return self.get_player(player_id)
