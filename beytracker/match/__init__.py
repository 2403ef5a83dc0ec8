"""Match records and the queries that load them."""

from .models import MatchResult, MatchSession, Stadium
from .repository import (
    fetch_match_results,
    fetch_match_sessions,
    fetch_stadiums,
    fetch_tournament,
)

__all__ = [
    "MatchResult",
    "MatchSession",
    "Stadium",
    "fetch_match_results",
    "fetch_match_sessions",
    "fetch_stadiums",
    "fetch_tournament",
]
