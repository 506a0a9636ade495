import sqlite3
import tempfile
import unittest
from pathlib import Path

from acs.db.database import get_connection
from acs.db.repositories import GameRepository, PlayerRepository, TournamentRepository


class DatabaseCrudTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = Path(self.temp_dir.name) / "test.db"
        self.connection = get_connection(self.db_path)
        self.games = GameRepository(self.connection)
        self.players = PlayerRepository(self.connection)
        self.tournaments = TournamentRepository(self.connection)

    def tearDown(self) -> None:
        self.connection.close()
        self.temp_dir.cleanup()

    def test_player_crud(self) -> None:
        game_id = self.games.create({"name": "Rocket League", "description": None})
        player_id = self.players.create({"name": "Alice", "tier": 2, "game_id": game_id})
        player = self.players.get(player_id)
        self.assertIsNotNone(player)
        self.assertEqual(player["name"], "Alice")
        self.assertEqual(player["score"], 0)

        self.players.update(player_id, {"name": "Alicia", "tier": 1, "game_id": game_id})
        updated = self.players.get(player_id)
        self.assertEqual(updated["name"], "Alicia")
        self.assertEqual(updated["tier"], 1)

        self.players.add_score(player_id, 7)
        self.players.add_scores({player_id: -2})
        self.assertEqual(self.players.get(player_id)["score"], 5)

        self.assertEqual(len(self.players.list_by_game(game_id)), 1)
        self.assertEqual(self.games.find_by_name("rocket league")["id"], game_id)

    def test_list_by_ids_keeps_requested_order(self) -> None:
        first = self.players.create({"name": "A", "tier": 1})
        second = self.players.create({"name": "B", "tier": 2})
        rows = self.players.list_by_ids([second, 999, first])
        self.assertEqual([row["id"] for row in rows], [second, first])

    def test_tournament_players_and_teams(self) -> None:
        ids = [self.players.create({"name": f"P{i}", "tier": i % 3 + 1}) for i in range(4)]
        tournament_id = self.tournaments.create({"name": "Cup", "game_id": None, "player_ids": ids})

        self.assertEqual(self.tournaments.list_player_ids(tournament_id), ids)
        self.assertEqual(self.tournaments.list_teams(tournament_id), [])

        self.tournaments.replace_teams(
            tournament_id,
            [
                {"team_number": 1, "player_ids": [ids[0], ids[3]]},
                {"team_number": 2, "player_ids": [ids[1], ids[2]]},
                {"team_number": 3, "player_ids": []},
            ],
        )
        self.assertEqual(
            self.tournaments.list_teams(tournament_id),
            [
                {"team_number": 1, "player_ids": [ids[0], ids[3]]},
                {"team_number": 2, "player_ids": [ids[1], ids[2]]},
                {"team_number": 3, "player_ids": []},
            ],
        )

        self.tournaments.replace_teams(tournament_id, [{"team_number": 1, "player_ids": ids}])
        self.assertEqual(
            self.tournaments.list_teams(tournament_id),
            [{"team_number": 1, "player_ids": ids}],
        )
        members = self.tournaments.list_team_members(tournament_id)
        self.assertEqual([member["player_id"] for member in members], ids)

        self.tournaments.mark_finished(tournament_id, 1)
        finished = self.tournaments.list_finished()
        self.assertEqual(len(finished), 1)
        self.assertEqual(finished[0]["winner_team_number"], 1)

        self.tournaments.delete(tournament_id)
        self.assertIsNone(self.tournaments.get(tournament_id))
        self.assertEqual(self.tournaments.list_teams(tournament_id), [])
        self.assertEqual(self.tournaments.list_player_ids(tournament_id), [])

    def test_update_writes_details_registrations_and_teams(self) -> None:
        game_id = self.games.create({"name": "Chess", "description": None})
        ids = [self.players.create({"name": f"P{i}", "tier": 1}) for i in range(3)]
        tournament_id = self.tournaments.create({"name": "Cup", "game_id": None, "player_ids": ids})
        self.tournaments.replace_teams(tournament_id, [{"team_number": 1, "player_ids": ids}])

        self.tournaments.update(
            tournament_id,
            {
                "name": "Spring Cup",
                "game_id": game_id,
                "player_ids": ids[:2],
                "teams": [{"team_number": 1, "player_ids": ids[:2]}],
            },
        )
        self.assertEqual(self.tournaments.get(tournament_id)["name"], "Spring Cup")
        self.assertEqual(self.tournaments.get(tournament_id)["game_id"], game_id)
        self.assertEqual(self.tournaments.list_player_ids(tournament_id), ids[:2])
        self.assertEqual(
            self.tournaments.list_teams(tournament_id),
            [{"team_number": 1, "player_ids": ids[:2]}],
        )

    def test_registered_player_cannot_be_deleted(self) -> None:
        ids = [self.players.create({"name": f"P{i}", "tier": 1}) for i in range(2)]
        tournament_id = self.tournaments.create({"name": "Cup", "game_id": None, "player_ids": ids})
        self.tournaments.replace_teams(tournament_id, [{"team_number": 1, "player_ids": ids}])
        self.tournaments.mark_finished(tournament_id, 1)

        with self.assertRaises(sqlite3.IntegrityError):
            with self.connection:
                self.connection.execute("DELETE FROM players WHERE id = ?", (ids[0],))

        self.assertIsNotNone(self.players.get(ids[0]))
        self.assertEqual(
            self.tournaments.list_teams(tournament_id),
            [{"team_number": 1, "player_ids": ids}],
        )


if __name__ == "__main__":
    unittest.main()
