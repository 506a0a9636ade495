from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence, Union

PlayerId = Union[int, str]
Tier = int


@dataclass
class Player:
    id: PlayerId
    name: str
    tier: Tier
    score: float = 0
    game_id: int | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Player":
        return cls(
            id=row["id"],
            name=str(row.get("name") or ""),
            tier=int(row["tier"]),
            score=row.get("score") or 0,
            game_id=row.get("game_id"),
        )


@dataclass(frozen=True)
class Team:
    team_number: int
    player_ids: tuple[PlayerId, ...] = ()

    def __len__(self) -> int:
        return len(self.player_ids)


@dataclass(frozen=True)
class TeamScore:
    team_number: int
    score: float


@dataclass
class Tournament:
    id: int | None
    name: str
    game_id: int | None = None
    player_ids: list[PlayerId] = field(default_factory=list)
    teams: list[Team] = field(default_factory=list)
    is_finished: bool = False
    winner_team_number: int | None = None

    @classmethod
    def from_row(
        cls,
        row: Mapping[str, Any],
        player_ids: Sequence[PlayerId] = (),
        teams: Sequence[Mapping[str, Any]] = (),
    ) -> "Tournament":
        return cls(
            id=row["id"],
            name=str(row.get("name") or ""),
            game_id=row.get("game_id"),
            player_ids=list(player_ids),
            teams=[
                Team(team_number=int(team["team_number"]), player_ids=tuple(team["player_ids"]))
                for team in teams
            ],
            is_finished=bool(row.get("is_finished")),
            winner_team_number=row.get("winner_team_number"),
        )

    def find_team(self, team_number: int) -> Team | None:
        for team in self.teams:
            if team.team_number == team_number:
                return team
        return None


@dataclass(frozen=True)
class RankingEntry:
    key: object
    name: str
    total_score: float
    games_count: int
