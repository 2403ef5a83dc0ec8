"""Service layer for tournament logs: stadium management and the live dashboard."""

from __future__ import annotations

import random
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from firebase_admin import firestore
from flask import Flask, current_app

from beytracker.core.constants import (
    AUTO_REFRESH_SECONDS,
    LIVE_FEED_LIMIT,
    MAX_STADIUMS,
    MIN_STADIUMS,
    REFRESH_WORKERS,
    STADIUMS_COLLECTION,
)
from beytracker.core.refresh import PeriodicRefresh
from beytracker.errors import DataSourceError, NotFoundError, ValidationError
from beytracker.match import (
    MatchResult,
    Stadium,
    fetch_match_results,
    fetch_stadiums,
    fetch_tournament,
)

from .aggregation import (
    PlayerPairing,
    RoundResult,
    group_pairings,
    group_rounds,
    live_feed,
    sort_pairings,
    sort_rounds,
    unmatched_officer_matches,
)

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


class StadiumService:
    """Handles writes to the stadium assignment collection."""

    @staticmethod
    def set_stadium_count(
        tournament_id: str, count: int, db: Client | None = None
    ) -> list[Stadium]:
        """Replace a tournament's stadiums with ``count`` fresh ones.

        Officers stay with the stadium number they were assigned to.
        """
        if count < MIN_STADIUMS or count > MAX_STADIUMS:
            raise ValidationError(
                f"Stadium count must be between {MIN_STADIUMS} and {MAX_STADIUMS}."
            )
        if db is None:
            db = firestore.client()

        previous = {s.stadium_number: s for s in fetch_stadiums(db, tournament_id)}

        collection = db.collection(STADIUMS_COLLECTION)
        for doc in collection.where(
            filter=firestore.FieldFilter("tournament_id", "==", tournament_id)
        ).stream():
            doc.reference.delete()

        for number in range(1, count + 1):
            prev = previous.get(number)
            collection.add({
                "tournament_id": tournament_id,
                "stadium_number": number,
                "stadium_name": f"Stadium {number}",
                "assigned_officer": prev.assigned_officer if prev else None,
                "match_status": "waiting",
            })
        return fetch_stadiums(db, tournament_id)

    @staticmethod
    def assign_officer(
        stadium_id: str, officer: str | None, db: Client | None = None
    ) -> None:
        """Assign (or clear, with None) the officer of one stadium."""
        if db is None:
            db = firestore.client()
        ref = db.collection(STADIUMS_COLLECTION).document(stadium_id)
        if not ref.get().exists:
            raise NotFoundError("Stadium not found.")
        ref.update({"assigned_officer": (officer or "").strip() or None})

    @staticmethod
    def randomize_officers(
        tournament_id: str,
        officers: list[str],
        db: Client | None = None,
        rng: random.Random | None = None,
    ) -> list[Stadium]:
        """Shuffle officers over the stadiums, one update per stadium."""
        if db is None:
            db = firestore.client()
        officers = [o.strip() for o in officers if o and o.strip()]
        stadiums = fetch_stadiums(db, tournament_id)
        if not officers or not stadiums:
            return stadiums

        shuffled = list(officers)
        (rng or random.Random()).shuffle(shuffled)
        collection = db.collection(STADIUMS_COLLECTION)
        for i, stadium in enumerate(stadiums):
            collection.document(stadium.id).update(
                {"assigned_officer": shuffled[i % len(shuffled)]}
            )
        return fetch_stadiums(db, tournament_id)


@dataclass(frozen=True)
class LogSnapshot:
    """Everything the log dashboard shows, computed from one fetch."""

    generation: int
    matches: tuple[MatchResult, ...] = ()
    stadiums: tuple[Stadium, ...] = ()
    feed: tuple[MatchResult, ...] = ()
    rounds: tuple[RoundResult, ...] = ()
    pairings: tuple[PlayerPairing, ...] = ()
    unmatched: tuple[MatchResult, ...] = ()
    officers: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.matches


def build_snapshot(
    generation: int,
    matches: list[MatchResult],
    stadiums: list[Stadium],
    officers: list[str] | None = None,
    feed_limit: int = LIVE_FEED_LIMIT,
) -> LogSnapshot:
    """Recompute every dashboard view from raw rows."""
    rounds = sort_rounds(group_rounds(matches).values())
    pairings = sort_pairings(group_pairings(matches, rounds).values())
    roster = list(officers or [])
    return LogSnapshot(
        generation=generation,
        matches=tuple(matches),
        stadiums=tuple(stadiums),
        feed=tuple(live_feed(matches, feed_limit)),
        rounds=tuple(rounds),
        pairings=tuple(pairings),
        unmatched=tuple(unmatched_officer_matches(matches, stadiums, roster)),
        officers=tuple(roster),
    )


class LogDashboard:
    """Live view model of one tournament's match log.

    ``refresh()`` fetches rows concurrently and rebuilds the snapshot from
    scratch. Each refresh is numbered when issued; a result is applied only if
    no later-issued refresh has been applied already, so a slow stale response
    can never overwrite newer data.
    """

    def __init__(
        self,
        tournament_id: str,
        db: Client | None = None,
        app: Flask | None = None,
        officers: list[str] | None = None,
        feed_limit: int | None = None,
    ) -> None:
        self.app = app or current_app._get_current_object()  # type: ignore[attr-defined]
        self.db = db if db is not None else firestore.client()
        self.tournament_id = tournament_id
        self.officers = list(officers or [])
        self.feed_limit = feed_limit or self.app.config.get(
            "LIVE_FEED_LIMIT", LIVE_FEED_LIMIT
        )
        self.tournament: dict[str, Any] | None = None
        self.snapshot = LogSnapshot(generation=0)
        self.listeners: list[Callable[[LogSnapshot], None]] = []
        self._issued = 0
        self._lock = threading.Lock()
        self._notify_lock = threading.RLock()
        self._auto: PeriodicRefresh | None = None
        self._closed = False

    def _in_context(self, func: Callable[..., Any], *args: Any) -> Any:
        with self.app.app_context():
            return func(*args)

    def load(self) -> LogSnapshot:
        """Fetch the tournament document, then the first snapshot."""
        tournament = self._in_context(fetch_tournament, self.db, self.tournament_id)
        if tournament is None:
            raise NotFoundError("Tournament not found.")
        self.tournament = tournament
        return self.refresh()

    def refresh(self) -> LogSnapshot:
        """Fetch and recompute; on failure keep the previous snapshot."""
        with self._lock:
            self._issued += 1
            generation = self._issued

        try:
            with ThreadPoolExecutor(max_workers=REFRESH_WORKERS) as pool:
                matches_future = pool.submit(
                    self._in_context, fetch_match_results, self.db, self.tournament_id
                )
                stadiums_future = pool.submit(
                    self._in_context, fetch_stadiums, self.db, self.tournament_id
                )
                matches = matches_future.result()
                stadiums = stadiums_future.result()
        except DataSourceError as e:
            self.app.logger.error(
                f"Error refreshing logs for tournament {self.tournament_id}: {e}"
            )
            return self.snapshot

        snapshot = build_snapshot(
            generation, matches, stadiums, self.officers, self.feed_limit
        )
        return self._apply(snapshot)

    def _apply(self, snapshot: LogSnapshot) -> LogSnapshot:
        # Held until listeners return so they see snapshots in generation order.
        with self._notify_lock:
            with self._lock:
                if snapshot.generation < self.snapshot.generation:
                    self.app.logger.info(
                        f"Discarding stale log refresh {snapshot.generation} "
                        f"(showing {self.snapshot.generation})"
                    )
                    return self.snapshot
                self.snapshot = snapshot
            for listener in self.listeners:
                listener(snapshot)
        return snapshot

    @property
    def auto_refresh(self) -> bool:
        return self._auto is not None and self._auto.running

    def start_auto_refresh(self, interval: float | None = None) -> None:
        """Refresh every ``interval`` seconds until stopped or closed."""
        if self._closed:
            raise RuntimeError("Dashboard is closed.")
        if self.auto_refresh:
            return
        if interval is None:
            interval = self.app.config.get("AUTO_REFRESH_SECONDS", AUTO_REFRESH_SECONDS)
        self._auto = PeriodicRefresh(self.refresh, interval)
        self._auto.start()

    def stop_auto_refresh(self) -> None:
        """Stop scheduling refreshes. A refresh already running still completes."""
        if self._auto is not None:
            self._auto.cancel()
            self._auto = None

    def close(self) -> None:
        """Tear the view down; guarantees no further refresh is scheduled."""
        self._closed = True
        auto, self._auto = self._auto, None
        if auto is not None:
            auto.cancel(wait=True)

    def __enter__(self) -> LogDashboard:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
