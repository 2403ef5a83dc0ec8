"""Data models for match records read from Firestore.

Raw documents are parsed into frozen dataclasses at the boundary so the
aggregation code never touches untyped dictionaries.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any, Optional

from beytracker.errors import ValidationError


def _as_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"Field '{key}' must be a string.")
    return value


def _as_optional_str(data: dict[str, Any], key: str) -> Optional[str]:
    value = _as_str(data, key)
    return value or None


def _as_optional_int(data: dict[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Field '{key}' must be a number.")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"Field '{key}' must be a whole number.")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Field '{key}' must be a number.") from e


def _as_int(data: dict[str, Any], key: str, default: int) -> int:
    value = _as_optional_int(data, key)
    return default if value is None else value


def parse_timestamp(value: Any) -> Optional[datetime.datetime]:
    """Convert a Firestore timestamp or ISO-8601 string to an aware datetime."""
    if value is None or value == "":
        return None
    if hasattr(value, "to_datetime"):
        value = value.to_datetime()
    if isinstance(value, str):
        try:
            value = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise ValidationError(f"Invalid timestamp: {value!r}") from e
    if not isinstance(value, datetime.datetime):
        raise ValidationError(f"Invalid timestamp: {value!r}")
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return value


EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


@dataclass(frozen=True)
class MatchResult:
    """One resolved game between two players."""

    id: str
    tournament_id: str
    player1_name: str
    player2_name: str
    winner_name: str
    submitted_at: datetime.datetime
    round_number: int = 1
    match_number: int = 1
    phase_number: Optional[int] = None
    player1_beyblade: str = ""
    player2_beyblade: str = ""
    player1_blade_line: Optional[str] = None
    player2_blade_line: Optional[str] = None
    outcome: str = ""
    points_awarded: Optional[int] = None
    tournament_officer: str = ""
    stadium_number: Optional[int] = None
    b_side_player: Optional[str] = None
    x_side_player: Optional[str] = None
    normalized_player1_name: Optional[str] = None
    normalized_player2_name: Optional[str] = None
    normalized_winner_name: Optional[str] = None

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> MatchResult:
        """Build a match result from raw document data.

        Raises:
            ValidationError: If a field has the wrong shape.
        """
        submitted_at = parse_timestamp(data.get("submitted_at")) or EPOCH
        return cls(
            id=doc_id,
            tournament_id=_as_str(data, "tournament_id"),
            player1_name=_as_str(data, "player1_name"),
            player2_name=_as_str(data, "player2_name"),
            winner_name=_as_str(data, "winner_name"),
            submitted_at=submitted_at,
            round_number=_as_int(data, "round_number", 1),
            match_number=_as_int(data, "match_number", 1),
            phase_number=_as_optional_int(data, "phase_number"),
            player1_beyblade=_as_str(data, "player1_beyblade"),
            player2_beyblade=_as_str(data, "player2_beyblade"),
            player1_blade_line=_as_optional_str(data, "player1_blade_line"),
            player2_blade_line=_as_optional_str(data, "player2_blade_line"),
            outcome=_as_str(data, "outcome"),
            points_awarded=_as_optional_int(data, "points_awarded"),
            tournament_officer=_as_str(data, "tournament_officer"),
            stadium_number=_as_optional_int(data, "stadium_number"),
            b_side_player=_as_optional_str(data, "b_side_player"),
            x_side_player=_as_optional_str(data, "x_side_player"),
            normalized_player1_name=_as_optional_str(data, "normalized_player1_name"),
            normalized_player2_name=_as_optional_str(data, "normalized_player2_name"),
            normalized_winner_name=_as_optional_str(data, "normalized_winner_name"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "id": self.id,
            "tournament_id": self.tournament_id,
            "round_number": self.round_number,
            "match_number": self.match_number,
            "phase_number": self.phase_number,
            "player1_name": self.player1_name,
            "player2_name": self.player2_name,
            "player1_beyblade": self.player1_beyblade,
            "player2_beyblade": self.player2_beyblade,
            "outcome": self.outcome,
            "winner_name": self.winner_name,
            "points_awarded": self.points_awarded,
            "tournament_officer": self.tournament_officer,
            "stadium_number": self.stadium_number,
            "b_side_player": self.b_side_player,
            "x_side_player": self.x_side_player,
            "submitted_at": self.submitted_at.isoformat(),
        }


@dataclass(frozen=True)
class MatchSession:
    """A completed best-of series between two players."""

    id: str
    tournament_id: str
    player1_name: str
    player2_name: str
    winner_name: str
    player1_final_score: int = 0
    player2_final_score: int = 0
    created_at: Optional[datetime.datetime] = None

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> MatchSession:
        """Build a session from raw document data.

        Raises:
            ValidationError: If a field has the wrong shape.
        """
        return cls(
            id=doc_id,
            tournament_id=_as_str(data, "tournament_id"),
            player1_name=_as_str(data, "player1_name"),
            player2_name=_as_str(data, "player2_name"),
            winner_name=_as_str(data, "winner_name"),
            player1_final_score=_as_int(data, "player1_final_score", 0),
            player2_final_score=_as_int(data, "player2_final_score", 0),
            created_at=parse_timestamp(data.get("created_at")),
        )

    @property
    def point_gap(self) -> int:
        return abs(self.player1_final_score - self.player2_final_score)


@dataclass(frozen=True)
class Stadium:
    """A play station, adjudicated by at most one officer."""

    id: str
    tournament_id: str
    stadium_number: int
    stadium_name: str
    assigned_officer: Optional[str] = None
    match_status: str = "waiting"

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Stadium:
        """Build a stadium from raw document data."""
        number = _as_int(data, "stadium_number", 0)
        return cls(
            id=doc_id,
            tournament_id=_as_str(data, "tournament_id"),
            stadium_number=number,
            stadium_name=_as_str(data, "stadium_name") or f"Stadium {number}",
            assigned_officer=_as_optional_str(data, "assigned_officer"),
            match_status=_as_str(data, "match_status") or "waiting",
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "id": self.id,
            "tournament_id": self.tournament_id,
            "stadium_number": self.stadium_number,
            "stadium_name": self.stadium_name,
            "assigned_officer": self.assigned_officer,
            "match_status": self.match_status,
        }
