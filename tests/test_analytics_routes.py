"""Tests for the analytics blueprint using mockfirestore."""

from __future__ import annotations

import unittest
from unittest.mock import MagicMock, patch

from beytracker.errors import DataSourceError
from tests.conftest import FirestoreAppTestCase, match_doc, session_doc


class AnalyticsRoutesTestCase(FirestoreAppTestCase):
    """Test case for the analytics page and its JSON endpoints."""

    def setUp(self) -> None:
        super().setUp()
        self._set_session_user()
        self.mock_db.collection("tournaments").document("t1").set({"name": "Spring Clash"})

    def _add_data(self) -> None:
        results = self.mock_db.collection("match_results")
        results.add(match_doc(phase_number=1, x_side_player="Alice", b_side_player="Bob"))
        results.add(match_doc(winner="Bob", points_awarded=3, outcome="Extreme Finish", minutes=2))
        results.add(match_doc(minutes=4))
        results.add(match_doc(player1="Alice", player2="Carol", winner=None, minutes=6))
        sessions = self.mock_db.collection("match_sessions")
        sessions.add(session_doc("Alice", "Bob", 4, 3))
        sessions.add(session_doc("Carol", "Alice", 1, 4))

    def test_empty_state(self) -> None:
        response = self.client.get("/analytics/t1")
        self.assertEqual(response.status_code, 200)
        self.assertIn(b"No match data available for this tournament yet.", response.data)

        response = self.client.get("/analytics/t1?tab=players")
        self.assertIn(b"No player data available.", response.data)

    def test_pages_render_with_data(self) -> None:
        self._add_data()
        for tab in ("overview", "players", "insights"):
            response = self.client.get(f"/analytics/t1?tab={tab}")
            self.assertEqual(response.status_code, 200)
            self.assertIn(b"Alice", response.data)

    def test_missing_tournament(self) -> None:
        response = self.client.get("/analytics/missing")
        self.assertEqual(response.status_code, 404)

    def test_page_renders_when_backend_down(self) -> None:
        self.mock_db.collection = MagicMock(side_effect=RuntimeError("network down"))
        response = self.client.get("/analytics/t1")
        self.assertEqual(response.status_code, 200)
        self.assertIn(b"No match data available for this tournament yet.", response.data)

    def test_api_players(self) -> None:
        self._add_data()
        data = self.client.get("/analytics/t1/api/players").get_json()
        names = [p["name"] for p in data["players"]]
        self.assertEqual(names[0], "Alice")
        alice = data["players"][0]
        self.assertEqual((alice["wins"], alice["losses"]), (2, 1))
        self.assertEqual(alice["phase_performance"], {"1": {"wins": 2, "matches": 3, "points": 4}})
        self.assertEqual(data["head_to_head"][0]["player1"], "Alice")

    def test_api_player(self) -> None:
        self._add_data()
        bob = self.client.get("/analytics/t1/api/players/Bob").get_json()
        self.assertEqual(bob["total_points"], 3)
        self.assertEqual(bob["mvp_combo"], "HellsScythe")

        response = self.client.get("/analytics/t1/api/players/Zed")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json(), {"error": "Player not found."})

    def test_api_insights(self) -> None:
        self._add_data()
        data = self.client.get("/analytics/t1/api/insights").get_json()
        self.assertEqual(
            sorted(m["players"] for m in data["player_matchups"]),
            ["Alice vs Bob", "Alice vs Carol"],
        )
        self.assertEqual(data["match_analysis"]["closest_match"]["players"], "Alice vs Bob")
        self.assertEqual(data["match_analysis"]["most_one_sided"]["point_gap"], 3)
        self.assertEqual(data["beyblade_matchups"][0]["dominant_combo"], "DranSword")
        self.assertEqual(data["side_analysis"]["x_side_wins"], 1)
        self.assertEqual(data["phase_breakdown"][0]["phase"], 1)
        self.assertEqual(
            data["points_distribution"],
            [{"points": 5, "matches": 1}, {"points": 7, "matches": 1}],
        )

    def test_api_overview(self) -> None:
        self._add_data()
        data = self.client.get("/analytics/t1/api/overview").get_json()
        self.assertEqual(data["total_matches"], 4)
        self.assertEqual(data["player_rankings"][0]["name"], "Alice")
        self.assertEqual(data["combo_stats"][0]["combo"], "DranSword")

    def test_unreachable_backend_shows_empty_views(self) -> None:
        with patch(
            "beytracker.analytics.routes.fetch_match_results",
            side_effect=DataSourceError("unavailable"),
        ):
            data = self.client.get("/analytics/t1/api/overview").get_json()
        self.assertEqual(data["total_matches"], 0)
        self.assertEqual(data["combo_stats"], [])


if __name__ == "__main__":
    unittest.main()
