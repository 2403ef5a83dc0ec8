"""Tests for matchup, side and phase insights."""

from __future__ import annotations

import datetime
import unittest

from beytracker.analytics.insights import (
    beyblade_matchups,
    match_analysis,
    phase_breakdown,
    player_matchups,
    points_distribution,
    side_analysis,
)
from beytracker.match.models import MatchResult, MatchSession
from tests.conftest import BASE_TIME, match_doc, session_doc


def make_match(doc_id: str, **kwargs) -> MatchResult:
    return MatchResult.from_document(doc_id, match_doc(**kwargs))


def make_session(doc_id: str, *args, **kwargs) -> MatchSession:
    return MatchSession.from_document(doc_id, session_doc(*args, **kwargs))


class TestPlayerMatchups(unittest.TestCase):
    """Test case for player_matchups and match_analysis."""

    def test_matchups_group_sorted_pairs(self) -> None:
        later = BASE_TIME + datetime.timedelta(hours=1)
        sessions = [
            make_session("s1", "Bob", "Alice", 4, 1),
            make_session("s2", "Alice", "Bob", 4, 2, created_at=later),
            make_session("s3", "Carol", "Dan", 4, 3),
        ]
        matchups = player_matchups(sessions)
        self.assertEqual(matchups[0].players, "Alice vs Bob")
        self.assertEqual(matchups[0].total_matches, 2)
        self.assertEqual((matchups[0].player1_wins, matchups[0].player2_wins), (1, 1))
        self.assertEqual(matchups[0].avg_point_gap, 2.5)
        self.assertEqual(matchups[0].last_played, later)
        self.assertEqual(matchups[1].players, "Carol vs Dan")

    def test_match_analysis(self) -> None:
        analysis = match_analysis([
            make_session("s1", "Alice", "Bob", 5, 0),
            make_session("s2", "Carol", "Dan", 4, 3),
            make_session("s3", "Eve", "Fay", 2, 0),
        ])
        self.assertEqual(analysis.most_one_sided.players, "Alice vs Bob")
        self.assertEqual(analysis.most_one_sided.point_gap, 5)
        self.assertEqual(analysis.closest_match.players, "Carol vs Dan")
        self.assertEqual(analysis.closest_match.winner, "Carol")
        self.assertAlmostEqual(analysis.avg_point_gap, 8 / 3)
        self.assertEqual(analysis.total_rounds, 3)

    def test_equal_gaps_prefer_alphabetical_matchup(self) -> None:
        analysis = match_analysis([
            make_session("s1", "Zed", "Yan", 4, 1),
            make_session("s2", "Bob", "Alice", 4, 1),
            make_session("s3", "Mia", "Noa", 4, 1),
        ])
        self.assertEqual(analysis.most_one_sided.players, "Alice vs Bob")
        self.assertEqual(analysis.closest_match.players, "Alice vs Bob")

    def test_equal_gaps_same_matchup_keep_first(self) -> None:
        analysis = match_analysis([
            make_session("s1", "Alice", "Bob", 3, 1, winner="Alice"),
            make_session("s2", "Bob", "Alice", 3, 1, winner="Bob"),
        ])
        self.assertEqual(analysis.most_one_sided.winner, "Alice")

    def test_no_sessions(self) -> None:
        self.assertIsNone(match_analysis([]))
        self.assertEqual(player_matchups([]), [])
        self.assertEqual(points_distribution([]), [])


class TestBeybladeMatchups(unittest.TestCase):
    """Test case for beyblade_matchups."""

    def test_dominant_combo(self) -> None:
        matchups = beyblade_matchups([
            make_match("m1", winner="Alice", points_awarded=2),
            make_match("m2", winner="Alice", points_awarded=1),
            make_match("m3", winner="Bob", points_awarded=3),
        ])
        self.assertEqual(len(matchups), 1)
        matchup = matchups[0]
        self.assertEqual(matchup.matchup, "DranSword vs HellsScythe")
        self.assertEqual(matchup.dominant_combo, "DranSword")
        self.assertEqual(matchup.wins, {"DranSword": 2, "HellsScythe": 1})
        self.assertAlmostEqual(matchup.win_rate, 200 / 3)
        self.assertEqual(matchup.avg_points, 2.0)

    def test_tied_combos_prefer_alphabetical(self) -> None:
        matchups = beyblade_matchups([
            make_match("m1", player1_beyblade="Wizard", player2_beyblade="Cobalt", winner="Alice"),
            make_match("m2", player1_beyblade="Wizard", player2_beyblade="Cobalt", winner="Bob"),
        ])
        self.assertEqual(matchups[0].dominant_combo, "Cobalt")

    def test_skips_missing_combos_and_unknown_winners(self) -> None:
        matchups = beyblade_matchups([
            make_match("m1", player2_beyblade=""),
            make_match("m2", winner="Carol"),
        ])
        self.assertEqual(len(matchups), 1)
        self.assertEqual(matchups[0].total_matches, 1)
        self.assertEqual(sum(matchups[0].wins.values()), 0)


class TestSidesAndPhases(unittest.TestCase):
    """Test case for side_analysis and phase_breakdown."""

    def test_side_analysis_ignores_records_without_sides(self) -> None:
        result = side_analysis([
            make_match("m1", x_side_player="Alice", b_side_player="Bob", winner="Alice"),
            make_match("m2", x_side_player="Bob", b_side_player="Alice", winner="Alice"),
            make_match("m3", x_side_player="Alice", winner="Alice"),
            make_match("m4"),
        ])
        self.assertEqual(result.total_matches, 2)
        self.assertEqual(result.x_side_wins, 1)
        self.assertEqual(result.b_side_wins, 1)
        self.assertEqual(result.x_side_win_rate, 50.0)

    def test_side_analysis_without_data(self) -> None:
        self.assertIsNone(side_analysis([make_match("m1")]))
        self.assertIsNone(side_analysis([]))

    def test_phase_breakdown_excludes_unphased_matches(self) -> None:
        rows = phase_breakdown([
            make_match("m1", phase_number=1, points_awarded=2),
            make_match("m2", phase_number=1, points_awarded=1),
            make_match("m3", phase_number=2, points_awarded=3),
            make_match("m4", points_awarded=3),
        ])
        self.assertEqual([r["phase"] for r in rows], [1, 2])
        self.assertEqual(rows[0]["matches"], 2)
        self.assertEqual(rows[0]["avg_points"], 1.5)
        self.assertAlmostEqual(rows[0]["share"], 200 / 3)
        self.assertAlmostEqual(rows[1]["share"], 100 / 3)
        self.assertEqual(phase_breakdown([make_match("m1")]), [])

    def test_points_distribution(self) -> None:
        rows = points_distribution([
            make_session("s1", "Alice", "Bob", 4, 3),
            make_session("s2", "Carol", "Dan", 5, 2),
            make_session("s3", "Eve", "Fay", 4, 0),
        ])
        self.assertEqual(rows, [{"points": 4, "matches": 1}, {"points": 7, "matches": 2}])


if __name__ == "__main__":
    unittest.main()
