"""Common utilities for tests."""

import datetime
import unittest
from typing import Any, Optional
from unittest.mock import MagicMock, patch

from mockfirestore import CollectionReference, MockFirestore, Query

from beytracker import create_app


class MockFieldFilter:
    def __init__(self, field_path: str, op_string: str, value: Any) -> None:
        self.field_path = field_path
        self.op_string = op_string
        self.value = value


def patch_mockfirestore() -> None:
    """Apply monkeypatches to mockfirestore to support FieldFilter."""

    def collection_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(CollectionReference, "_where"):
        CollectionReference._where = CollectionReference.where
        CollectionReference.where = collection_where

    def query_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(Query, "_where"):
        Query._where = Query.where
        Query.where = query_where


def mock_firestore_module(db: Any) -> MagicMock:
    """A stand-in for ``firebase_admin.firestore`` whose client is ``db``."""
    module = MagicMock()
    module.client.return_value = db
    module.FieldFilter = MockFieldFilter
    module.SERVER_TIMESTAMP = "2023-01-01"
    return module


FIRESTORE_PATCH_TARGETS = (
    "beytracker.match.repository.firestore",
    "beytracker.logs.services.firestore",
    "beytracker.logs.routes.firestore",
    "beytracker.analytics.routes.firestore",
    "beytracker.tournament.services.firestore",
)

BASE_TIME = datetime.datetime(2024, 5, 1, 10, 0, tzinfo=datetime.timezone.utc)


def match_doc(
    player1: str = "Alice",
    player2: str = "Bob",
    winner: Optional[str] = "Alice",
    minutes: int = 0,
    **overrides: Any,
) -> dict[str, Any]:
    """Raw match_results document data."""
    data = {
        "tournament_id": "t1",
        "round_number": 1,
        "match_number": 1,
        "player1_name": player1,
        "player2_name": player2,
        "player1_beyblade": "DranSword",
        "player2_beyblade": "HellsScythe",
        "outcome": "Burst Finish (2 pts)",
        "winner_name": winner,
        "points_awarded": 2,
        "tournament_officer": "Sam",
        "submitted_at": BASE_TIME + datetime.timedelta(minutes=minutes),
    }
    data.update(overrides)
    return data


def session_doc(
    player1: str,
    player2: str,
    score1: int,
    score2: int,
    winner: Optional[str] = None,
    **overrides: Any,
) -> dict[str, Any]:
    """Raw match_sessions document data."""
    data = {
        "tournament_id": "t1",
        "player1_name": player1,
        "player2_name": player2,
        "player1_final_score": score1,
        "player2_final_score": score2,
        "winner_name": winner or (player1 if score1 >= score2 else player2),
        "created_at": BASE_TIME,
    }
    data.update(overrides)
    return data


class FirestoreAppTestCase(unittest.TestCase):
    """App with every Firestore client patched to one in-memory database."""

    def setUp(self) -> None:
        patch_mockfirestore()
        self.mock_db = MockFirestore()
        self.mock_firestore_module = mock_firestore_module(self.mock_db)

        patchers = [patch("firebase_admin.initialize_app")] + [
            patch(target, new=self.mock_firestore_module)
            for target in FIRESTORE_PATCH_TARGETS
        ]
        for p in patchers:
            p.start()
            self.addCleanup(p.stop)

        self.app = create_app(
            {"TESTING": True, "WTF_CSRF_ENABLED": False, "SERVER_NAME": "localhost"}
        )
        self.client = self.app.test_client()
        self.app_context = self.app.app_context()
        self.app_context.push()

    def tearDown(self) -> None:
        self.app_context.pop()
        self.mock_db.reset()

    def _set_session_user(self, user_id: str = "user1", is_admin: bool = False) -> None:
        """Set a logged-in user in the session."""
        with self.client.session_transaction() as sess:
            sess["user_id"] = user_id
            sess["is_admin"] = is_admin
