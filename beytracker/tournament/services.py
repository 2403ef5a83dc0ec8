"""Service layer for saving and listing tournaments."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore
from flask import current_app

from beytracker.core.constants import (
    DEFAULT_STAGE,
    STAGES_COLLECTION,
    TOURNAMENTS_COLLECTION,
)
from beytracker.errors import DataSourceError, NotFoundError, SubmissionError
from beytracker.match import fetch_tournament

from .models import TournamentDraft, TournamentRecord
from .wizard import to_payload

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


class TournamentService:
    """Handles writes and reads of tournament documents."""

    @staticmethod
    def save(
        draft: TournamentDraft,
        user_id: str | None,
        tournament_id: str | None = None,
        db: Client | None = None,
    ) -> str:
        """Create a tournament, or update it when ``tournament_id`` is given.

        A new tournament also gets a default stage. The stage is best effort:
        if it cannot be written the tournament is kept and a warning logged.

        Raises:
            SubmissionError: If the tournament document itself cannot be written.
        """
        if db is None:
            db = firestore.client()
        data: dict[str, Any] = dict(to_payload(draft, user_id))
        collection = db.collection(TOURNAMENTS_COLLECTION)

        if tournament_id:
            try:
                data["updated_at"] = firestore.SERVER_TIMESTAMP
                collection.document(tournament_id).update(data)
            except Exception as e:
                current_app.logger.error(f"Error updating tournament {tournament_id}: {e}")
                raise SubmissionError(str(e) or "Failed to save tournament") from e
            current_app.logger.info(f"Tournament {tournament_id} updated by {user_id}")
            return tournament_id

        try:
            data["created_at"] = firestore.SERVER_TIMESTAMP
            data["status"] = "upcoming"
            data["created_by_user_id"] = user_id
            _, ref = collection.add(data)
        except Exception as e:
            current_app.logger.error(f"Error creating tournament: {e}")
            raise SubmissionError(str(e) or "Failed to save tournament") from e

        try:
            db.collection(STAGES_COLLECTION).add({"tournament_id": ref.id, **DEFAULT_STAGE})
        except Exception as e:
            current_app.logger.warning(f"Stage creation warning for {ref.id}: {e}")

        current_app.logger.info(f"Tournament {ref.id} created by {user_id}")
        return cast(str, ref.id)

    @staticmethod
    def get_tournament(tournament_id: str, db: Client | None = None) -> TournamentRecord:
        """Fetch one tournament document.

        Raises:
            NotFoundError: If the tournament does not exist.
        """
        if db is None:
            db = firestore.client()
        data = fetch_tournament(db, tournament_id)
        if data is None:
            raise NotFoundError("Tournament not found.")
        return cast(TournamentRecord, data)

    @staticmethod
    def list_tournaments(
        user_id: str | None = None, db: Client | None = None
    ) -> list[TournamentRecord]:
        """Tournaments newest first; only those hosted by ``user_id`` when given."""
        if db is None:
            db = firestore.client()
        query: Any = db.collection(TOURNAMENTS_COLLECTION)
        if user_id:
            query = query.where(
                filter=firestore.FieldFilter("hosted_by_user_id", "==", user_id)
            )

        try:
            docs = list(query.stream())
        except Exception as e:
            raise DataSourceError(f"Could not list tournaments: {e}") from e

        tournaments = []
        for doc in docs:
            data = doc.to_dict() or {}
            data["id"] = doc.id
            tournaments.append(cast(TournamentRecord, data))
        tournaments.sort(key=lambda t: t.get("tournament_date") or "", reverse=True)
        return tournaments
