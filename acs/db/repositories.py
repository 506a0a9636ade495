"""SQLite repositories for core entities."""

from __future__ import annotations

import sqlite3
from typing import Any, Iterable, Mapping, Sequence


def _row_to_dict(row: sqlite3.Row | None) -> dict[str, Any] | None:
    if row is None:
        return None
    return dict(row)


class GameRepository:
    """Repository for game data access."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def create(self, data: dict[str, Any]) -> int:
        cursor = self._connection.execute(
            "INSERT INTO games (name, description) VALUES (?, ?)",
            (data.get("name"), data.get("description")),
        )
        self._connection.commit()
        return int(cursor.lastrowid)

    def get(self, game_id: int) -> dict[str, Any] | None:
        row = self._connection.execute(
            "SELECT * FROM games WHERE id = ?", (game_id,)
        ).fetchone()
        return _row_to_dict(row)

    def find_by_name(self, name: str) -> dict[str, Any] | None:
        row = self._connection.execute(
            "SELECT * FROM games WHERE LOWER(name) = LOWER(?) ORDER BY id LIMIT 1",
            (name.strip(),),
        ).fetchone()
        return _row_to_dict(row)

    def list(self) -> list[dict[str, Any]]:
        rows = self._connection.execute("SELECT * FROM games ORDER BY name, id").fetchall()
        return [dict(row) for row in rows]


class PlayerRepository:
    """Repository for player data access."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def create(self, data: dict[str, Any]) -> int:
        cursor = self._connection.execute(
            """
            INSERT INTO players (name, tier, score, game_id)
            VALUES (?, ?, ?, ?)
            """,
            (
                data.get("name"),
                data.get("tier"),
                data.get("score") or 0,
                data.get("game_id"),
            ),
        )
        self._connection.commit()
        return int(cursor.lastrowid)

    def get(self, player_id: int) -> dict[str, Any] | None:
        row = self._connection.execute(
            "SELECT * FROM players WHERE id = ?", (player_id,)
        ).fetchone()
        return _row_to_dict(row)

    def update(self, player_id: int, data: dict[str, Any]) -> None:
        self._connection.execute(
            """
            UPDATE players
            SET name = ?,
                tier = ?,
                game_id = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            (data.get("name"), data.get("tier"), data.get("game_id"), player_id),
        )
        self._connection.commit()

    def list(self) -> list[dict[str, Any]]:
        rows = self._connection.execute("SELECT * FROM players ORDER BY name, id").fetchall()
        return [dict(row) for row in rows]

    def list_by_game(self, game_id: int) -> list[dict[str, Any]]:
        rows = self._connection.execute(
            "SELECT * FROM players WHERE game_id = ? ORDER BY name, id", (game_id,)
        ).fetchall()
        return [dict(row) for row in rows]

    def list_by_ids(self, player_ids: Sequence[int]) -> list[dict[str, Any]]:
        """Return the players in the order of ``player_ids``; unknown ids are omitted."""
        if not player_ids:
            return []
        placeholders = ", ".join("?" for _ in player_ids)
        rows = self._connection.execute(
            f"SELECT * FROM players WHERE id IN ({placeholders})", list(player_ids)
        ).fetchall()
        by_id = {row["id"]: dict(row) for row in rows}
        return [by_id[player_id] for player_id in player_ids if player_id in by_id]

    def add_score(self, player_id: int, delta: float) -> None:
        self._connection.execute(
            """
            UPDATE players
            SET score = score + ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            (delta, player_id),
        )
        self._connection.commit()

    def add_scores(self, deltas: Mapping[int, float]) -> None:
        with self._connection:
            self._connection.executemany(
                """
                UPDATE players
                SET score = score + ?,
                    updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                [(delta, player_id) for player_id, delta in deltas.items()],
            )


class TournamentRepository:
    """Repository for tournaments, their registrations and teams."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def create(self, data: dict[str, Any]) -> int:
        with self._connection:
            cursor = self._connection.execute(
                "INSERT INTO tournaments (name, game_id) VALUES (?, ?)",
                (data.get("name"), data.get("game_id")),
            )
            tournament_id = int(cursor.lastrowid)
            self._insert_players(tournament_id, data.get("player_ids") or [])
        return tournament_id

    def get(self, tournament_id: int) -> dict[str, Any] | None:
        row = self._connection.execute(
            "SELECT * FROM tournaments WHERE id = ?", (tournament_id,)
        ).fetchone()
        return _row_to_dict(row)

    def update(self, tournament_id: int, data: dict[str, Any]) -> None:
        """Write name and game, plus ``player_ids`` and ``teams`` when given, in one transaction."""
        with self._connection:
            self._connection.execute(
                """
                UPDATE tournaments
                SET name = ?,
                    game_id = ?,
                    updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (data.get("name"), data.get("game_id"), tournament_id),
            )
            if data.get("player_ids") is not None:
                self._write_players(tournament_id, data["player_ids"])
            if data.get("teams") is not None:
                self._write_teams(tournament_id, data["teams"])

    def delete(self, tournament_id: int) -> None:
        self._connection.execute("DELETE FROM tournaments WHERE id = ?", (tournament_id,))
        self._connection.commit()

    def list(self) -> list[dict[str, Any]]:
        rows = self._connection.execute(
            "SELECT * FROM tournaments ORDER BY created_at DESC, id DESC"
        ).fetchall()
        return [dict(row) for row in rows]

    def list_finished(self) -> list[dict[str, Any]]:
        rows = self._connection.execute(
            """
            SELECT tournaments.*, games.name AS game_name
            FROM tournaments
            LEFT JOIN games ON games.id = tournaments.game_id
            WHERE tournaments.is_finished = 1
            ORDER BY tournaments.updated_at DESC, tournaments.id DESC
            """
        ).fetchall()
        return [dict(row) for row in rows]

    def list_player_ids(self, tournament_id: int) -> list[int]:
        rows = self._connection.execute(
            """
            SELECT player_id FROM tournament_players
            WHERE tournament_id = ?
            ORDER BY position
            """,
            (tournament_id,),
        ).fetchall()
        return [int(row["player_id"]) for row in rows]

    def _write_players(self, tournament_id: int, player_ids: Iterable[int]) -> None:
        self._connection.execute(
            "DELETE FROM tournament_players WHERE tournament_id = ?", (tournament_id,)
        )
        self._insert_players(tournament_id, player_ids)

    def _insert_players(self, tournament_id: int, player_ids: Iterable[int]) -> None:
        self._connection.executemany(
            """
            INSERT INTO tournament_players (tournament_id, player_id, position)
            VALUES (?, ?, ?)
            """,
            [(tournament_id, player_id, index) for index, player_id in enumerate(player_ids)],
        )

    def list_teams(self, tournament_id: int) -> list[dict[str, Any]]:
        teams = {
            int(row["team_number"]): []
            for row in self._connection.execute(
                "SELECT team_number FROM teams WHERE tournament_id = ? ORDER BY team_number",
                (tournament_id,),
            ).fetchall()
        }
        members = self._connection.execute(
            """
            SELECT team_number, player_id FROM team_members
            WHERE tournament_id = ?
            ORDER BY team_number, position
            """,
            (tournament_id,),
        ).fetchall()
        for row in members:
            teams.setdefault(int(row["team_number"]), []).append(int(row["player_id"]))
        return [
            {"team_number": number, "player_ids": player_ids}
            for number, player_ids in teams.items()
        ]

    def list_team_members(self, tournament_id: int) -> list[dict[str, Any]]:
        rows = self._connection.execute(
            """
            SELECT team_members.team_number,
                   team_members.position,
                   players.id AS player_id,
                   players.name,
                   players.tier,
                   players.score
            FROM team_members
            JOIN players ON players.id = team_members.player_id
            WHERE team_members.tournament_id = ?
            ORDER BY team_members.team_number, team_members.position
            """,
            (tournament_id,),
        ).fetchall()
        return [dict(row) for row in rows]

    def replace_teams(self, tournament_id: int, teams: Iterable[Mapping[str, Any]]) -> None:
        """Drop every stored team of the tournament and write ``teams`` in its place."""
        with self._connection:
            self._write_teams(tournament_id, teams)
            self._touch(tournament_id)

    def _write_teams(self, tournament_id: int, teams: Iterable[Mapping[str, Any]]) -> None:
        self._connection.execute("DELETE FROM teams WHERE tournament_id = ?", (tournament_id,))
        for team in teams:
            team_number = int(team["team_number"])
            self._connection.execute(
                "INSERT INTO teams (tournament_id, team_number) VALUES (?, ?)",
                (tournament_id, team_number),
            )
            self._connection.executemany(
                """
                INSERT INTO team_members (tournament_id, team_number, position, player_id)
                VALUES (?, ?, ?, ?)
                """,
                [
                    (tournament_id, team_number, position, player_id)
                    for position, player_id in enumerate(team["player_ids"])
                ],
            )

    def _touch(self, tournament_id: int) -> None:
        self._connection.execute(
            "UPDATE tournaments SET updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (tournament_id,),
        )

    def mark_finished(self, tournament_id: int, winner_team_number: int) -> None:
        self._connection.execute(
            """
            UPDATE tournaments
            SET is_finished = 1,
                winner_team_number = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            (winner_team_number, tournament_id),
        )
        self._connection.commit()
