"""Firestore queries for match, session, stadium and tournament records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, TypeVar, cast

from firebase_admin import firestore
from flask import current_app

from beytracker.core.constants import (
    MATCH_RESULTS_COLLECTION,
    MATCH_SESSIONS_COLLECTION,
    STADIUMS_COLLECTION,
    TOURNAMENTS_COLLECTION,
)
from beytracker.errors import DataSourceError, ValidationError

from .models import EPOCH, MatchResult, MatchSession, Stadium

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

T = TypeVar("T")


def _stream_for_tournament(db: Client, collection: str, tournament_id: str) -> list[Any]:
    try:
        return list(
            db.collection(collection)
            .where(filter=firestore.FieldFilter("tournament_id", "==", tournament_id))
            .stream()
        )
    except Exception as e:
        raise DataSourceError(f"Could not query {collection}: {e}") from e


def _parse_documents(
    docs: Any, parse: Callable[[str, dict[str, Any]], T], kind: str
) -> list[T]:
    """Parse raw snapshots, skipping (and logging) malformed ones."""
    records = []
    for doc in docs:
        data = doc.to_dict()
        if not data:
            continue
        try:
            records.append(parse(doc.id, data))
        except ValidationError as e:
            current_app.logger.warning(f"Skipping malformed {kind} {doc.id}: {e.message}")
    return records


def fetch_match_results(db: Client, tournament_id: str) -> list[MatchResult]:
    """Fetch every match result of a tournament, oldest submission first."""
    docs = _stream_for_tournament(db, MATCH_RESULTS_COLLECTION, tournament_id)
    matches = _parse_documents(docs, MatchResult.from_document, "match result")
    matches.sort(key=lambda m: m.submitted_at)
    return matches


def fetch_match_sessions(db: Client, tournament_id: str) -> list[MatchSession]:
    """Fetch every completed session of a tournament, oldest first."""
    docs = _stream_for_tournament(db, MATCH_SESSIONS_COLLECTION, tournament_id)
    sessions = _parse_documents(docs, MatchSession.from_document, "match session")
    sessions.sort(key=lambda s: s.created_at or EPOCH)
    return sessions


def fetch_stadiums(db: Client, tournament_id: str) -> list[Stadium]:
    """Fetch the stadiums of a tournament ordered by number."""
    docs = _stream_for_tournament(db, STADIUMS_COLLECTION, tournament_id)
    stadiums = _parse_documents(docs, Stadium.from_document, "stadium")
    stadiums.sort(key=lambda s: s.stadium_number)
    return stadiums


def fetch_tournament(db: Client, tournament_id: str) -> dict[str, Any] | None:
    """Fetch a single tournament document, or None if it does not exist."""
    try:
        doc = cast(Any, db.collection(TOURNAMENTS_COLLECTION).document(tournament_id).get())
    except Exception as e:
        raise DataSourceError(f"Could not load tournament {tournament_id}: {e}") from e
    if not doc.exists:
        return None
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data
