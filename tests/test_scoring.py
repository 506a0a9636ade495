import unittest

from acs.domain.models import Player, Team, TeamScore, Tournament
from acs.domain.scoring import adjust_player_score, record_team_scores, team_score_deltas
from acs.errors import InvalidInputError, PlayerNotFoundError, StateConflictError


class RecordTeamScoresTests(unittest.TestCase):
    def setUp(self) -> None:
        self.players = {pid: Player(id=pid, name=pid, tier=1) for pid in ("A", "B", "C", "D")}
        self.tournament = Tournament(
            id=1,
            name="Cup",
            player_ids=["A", "B", "C", "D"],
            teams=[Team(1, ("A", "B")), Team(2, ("C", "D"))],
        )

    def scores(self) -> dict[str, float]:
        return {pid: player.score for pid, player in self.players.items()}

    def test_scores_propagate_to_members(self) -> None:
        record_team_scores(self.tournament, [(1, 5), (2, -3)], self.players)
        self.assertEqual(self.scores(), {"A": 5, "B": 5, "C": -3, "D": -3})

    def test_recording_twice_adds_twice(self) -> None:
        record_team_scores(self.tournament, [(1, 10)], self.players)
        record_team_scores(self.tournament, [(1, 10)], self.players)
        self.assertEqual(self.scores(), {"A": 20, "B": 20, "C": 0, "D": 0})

    def test_unknown_team_is_skipped_silently(self) -> None:
        application = record_team_scores(self.tournament, [(9, 10)], self.players)
        self.assertEqual(self.scores(), {"A": 0, "B": 0, "C": 0, "D": 0})
        self.assertEqual(application.skipped_team_numbers, [9])
        self.assertEqual(application.applied_team_numbers, [])

    def test_partial_report_only_touches_reported_teams(self) -> None:
        application = record_team_scores(
            self.tournament,
            [{"teamNumber": 2, "score": 4}, {"team_number": 7, "score": 1}],
            self.players,
        )
        self.assertEqual(self.scores(), {"A": 0, "B": 0, "C": 4, "D": 4})
        self.assertEqual(application.skipped_team_numbers, [7])

    def test_tournament_without_teams_is_rejected(self) -> None:
        self.tournament.teams = []
        with self.assertRaises(InvalidInputError):
            record_team_scores(self.tournament, [(1, 5)], self.players)

    def test_finished_tournament_is_rejected(self) -> None:
        self.tournament.is_finished = True
        with self.assertRaises(StateConflictError):
            record_team_scores(self.tournament, [(1, 5)], self.players)
        self.assertEqual(self.scores(), {"A": 0, "B": 0, "C": 0, "D": 0})

    def test_missing_member_fails_before_any_change(self) -> None:
        del self.players["D"]
        with self.assertRaises(PlayerNotFoundError):
            record_team_scores(self.tournament, [(1, 5), (2, 5)], self.players)
        self.assertEqual(self.scores(), {"A": 0, "B": 0, "C": 0})

    def test_malformed_entries_are_rejected(self) -> None:
        for entry in [(1,), {"score": 3}, {"team_number": 1}, ("x", 3), (1, "lots")]:
            with self.subTest(entry=entry):
                with self.assertRaises(InvalidInputError):
                    team_score_deltas(self.tournament.teams, [entry])


class TeamScoreDeltasTests(unittest.TestCase):
    def test_same_team_reported_twice_in_one_call(self) -> None:
        application = team_score_deltas([Team(1, (7, 8))], [TeamScore(1, 2), TeamScore(1, 3)])
        self.assertEqual(application.deltas, {7: 5, 8: 5})
        self.assertEqual(application.applied_team_numbers, [1, 1])

    def test_numeric_strings_are_accepted(self) -> None:
        application = team_score_deltas([Team(1, (7,))], [("1", "-2.5")])
        self.assertEqual(application.deltas, {7: -2.5})


class AdjustPlayerScoreTests(unittest.TestCase):
    def test_adjust_adds_signed_delta(self) -> None:
        player = Player(id=1, name="A", tier=1, score=10)
        adjust_player_score(player, -4)
        self.assertEqual(player.score, 6)
        adjust_player_score(player, 1.5)
        self.assertEqual(player.score, 7.5)

    def test_adjust_requires_a_number(self) -> None:
        player = Player(id=1, name="A", tier=1, score=10)
        for delta in (None, "abc", True):
            with self.subTest(delta=delta):
                with self.assertRaises(InvalidInputError):
                    adjust_player_score(player, delta)
        self.assertEqual(player.score, 10)


if __name__ == "__main__":
    unittest.main()
