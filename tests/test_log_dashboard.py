"""Tests for the live log dashboard and stadium management."""

from __future__ import annotations

import random
import threading
import unittest
from unittest.mock import patch

from mockfirestore import MockFirestore

from beytracker import create_app
from beytracker.core.refresh import PeriodicRefresh
from beytracker.errors import DataSourceError, NotFoundError, ValidationError
from beytracker.logs.cli import format_snapshot
from beytracker.logs.services import LogDashboard, StadiumService, build_snapshot
from beytracker.match.models import MatchResult
from tests.conftest import match_doc, mock_firestore_module, patch_mockfirestore

patch_mockfirestore()


class PeriodicRefreshTestCase(unittest.TestCase):
    """Test case for the cancelable refresh task."""

    def test_runs_until_cancelled(self) -> None:
        ran = threading.Event()
        task = PeriodicRefresh(ran.set, 0.01)
        task.start()
        self.assertTrue(ran.wait(2))
        self.assertTrue(task.running)
        task.cancel(wait=True)
        self.assertFalse(task.running)

    def test_failing_cycle_does_not_stop_task(self) -> None:
        calls = []
        done = threading.Event()

        def callback() -> None:
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            done.set()

        with PeriodicRefresh(callback, 0.01):
            self.assertTrue(done.wait(2))

    def test_invalid_interval(self) -> None:
        with self.assertRaises(ValueError):
            PeriodicRefresh(lambda: None, 0)


class LogDashboardTestCase(unittest.TestCase):
    """Test case for LogDashboard and StadiumService."""

    def setUp(self) -> None:
        self.mock_db = MockFirestore()
        module = mock_firestore_module(self.mock_db)
        for target in (
            "beytracker.match.repository.firestore",
            "beytracker.logs.services.firestore",
        ):
            patcher = patch(target, new=module)
            patcher.start()
            self.addCleanup(patcher.stop)

        self.app = create_app({"TESTING": True})
        self.app_context = self.app.app_context()
        self.app_context.push()

        self.mock_db.collection("tournaments").document("t1").set({"name": "Spring Clash"})
        results = self.mock_db.collection("match_results")
        results.add(match_doc(minutes=5))
        results.add(match_doc(winner="Bob", points_awarded=1, minutes=0))

    def tearDown(self) -> None:
        self.app_context.pop()
        self.mock_db.reset()

    def test_load_builds_snapshot(self) -> None:
        with LogDashboard("t1", db=self.mock_db) as dashboard:
            snapshot = dashboard.load()
            self.assertEqual(dashboard.tournament["name"], "Spring Clash")
            self.assertEqual(snapshot.generation, 1)
            self.assertEqual(len(snapshot.matches), 2)
            self.assertEqual(len(snapshot.rounds), 1)
            self.assertEqual(snapshot.rounds[0].winner, "Alice")
            self.assertEqual(snapshot.feed[0].winner_name, "Alice")

    def test_load_missing_tournament(self) -> None:
        with LogDashboard("missing", db=self.mock_db) as dashboard:
            with self.assertRaises(NotFoundError):
                dashboard.load()

    def test_refresh_notifies_listeners(self) -> None:
        seen = []
        with LogDashboard("t1", db=self.mock_db) as dashboard:
            dashboard.listeners.append(seen.append)
            dashboard.refresh()
            dashboard.refresh()
        self.assertEqual([s.generation for s in seen], [1, 2])

    def test_stale_refresh_is_discarded(self) -> None:
        matches = [MatchResult.from_document("m1", match_doc())]
        with LogDashboard("t1", db=self.mock_db) as dashboard:
            dashboard._apply(build_snapshot(2, [], []))
            shown = dashboard._apply(build_snapshot(1, matches, []))
        self.assertEqual(shown.generation, 2)
        self.assertTrue(shown.is_empty)

    def test_overlapping_refreshes_notify_in_order(self) -> None:
        entered = threading.Event()
        release = threading.Event()
        seen = []

        def listener(snapshot) -> None:
            if snapshot.generation == 2:
                entered.set()
                release.wait(2)
            seen.append(snapshot.generation)

        with LogDashboard("t1", db=self.mock_db) as dashboard:
            dashboard.listeners.append(listener)
            older = threading.Thread(target=dashboard._apply, args=(build_snapshot(2, [], []),))
            newer = threading.Thread(target=dashboard._apply, args=(build_snapshot(3, [], []),))
            older.start()
            self.assertTrue(entered.wait(2))
            newer.start()
            newer.join(0.1)
            release.set()
            older.join(2)
            newer.join(2)
            self.assertEqual(dashboard.snapshot.generation, 3)
        self.assertEqual(seen, [2, 3])

    def test_failed_refresh_keeps_snapshot(self) -> None:
        with LogDashboard("t1", db=self.mock_db) as dashboard:
            first = dashboard.refresh()
            with patch(
                "beytracker.logs.services.fetch_match_results",
                side_effect=DataSourceError("unavailable"),
            ):
                second = dashboard.refresh()
            self.assertIs(second, first)
            self.assertIs(dashboard.snapshot, first)

    def test_close_stops_auto_refresh(self) -> None:
        refreshed = threading.Event()
        dashboard = LogDashboard("t1", db=self.mock_db)
        dashboard.listeners.append(lambda s: refreshed.set())
        dashboard.start_auto_refresh(0.01)
        self.assertTrue(dashboard.auto_refresh)
        self.assertTrue(refreshed.wait(2))

        dashboard.close()
        self.assertFalse(dashboard.auto_refresh)
        with self.assertRaises(RuntimeError):
            dashboard.start_auto_refresh(0.01)

    def test_format_snapshot(self) -> None:
        with LogDashboard("t1", db=self.mock_db) as dashboard:
            text = format_snapshot(dashboard.refresh())
        self.assertEqual(
            text.splitlines(),
            [
                "2 matches, 1 rounds",
                "  R1 [Sam] Alice 2 - 1 Bob -> Alice (5m)",
                "  2 matches from unassigned officers",
            ],
        )
        self.assertEqual(format_snapshot(build_snapshot(1, [], [])), "No matches recorded yet.")

    def test_set_stadium_count_keeps_officers(self) -> None:
        stadiums = StadiumService.set_stadium_count("t1", 3)
        self.assertEqual([s.stadium_name for s in stadiums], ["Stadium 1", "Stadium 2", "Stadium 3"])

        StadiumService.assign_officer(stadiums[1].id, " Sam ")
        stadiums = StadiumService.set_stadium_count("t1", 2)
        self.assertEqual(len(stadiums), 2)
        self.assertEqual(stadiums[1].assigned_officer, "Sam")
        self.assertIsNone(stadiums[0].assigned_officer)

        with LogDashboard("t1", db=self.mock_db) as dashboard:
            self.assertEqual(dashboard.refresh().unmatched, ())

    def test_stadium_validation(self) -> None:
        with self.assertRaises(ValidationError):
            StadiumService.set_stadium_count("t1", 0)
        with self.assertRaises(ValidationError):
            StadiumService.set_stadium_count("t1", 21)
        with self.assertRaises(NotFoundError):
            StadiumService.assign_officer("missing", "Sam")

    def test_randomize_officers(self) -> None:
        StadiumService.set_stadium_count("t1", 3)
        stadiums = StadiumService.randomize_officers(
            "t1", ["Ann", " ", "Ben"], rng=random.Random(0)
        )
        officers = [s.assigned_officer for s in stadiums]
        self.assertEqual(set(officers), {"Ann", "Ben"})
        self.assertEqual(officers[0], officers[2])

    def test_randomize_without_officers(self) -> None:
        StadiumService.set_stadium_count("t1", 2)
        stadiums = StadiumService.randomize_officers("t1", [])
        self.assertEqual([s.assigned_officer for s in stadiums], [None, None])


if __name__ == "__main__":
    unittest.main()
