"""Data models for tournament drafts and stored tournament records."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Optional, TypedDict

from beytracker.errors import ValidationError

HOST_TYPES = ("individual", "community")
TOURNAMENT_TYPES = ("practice", "casual", "ranked", "experimental")
MATCH_FORMATS = ("solo", "teams")
PAYMENT_OPTIONS = ("gcash", "bank_transfer", "cash")


def _flag(data: dict[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise ValidationError(f"Rule '{key}' must be true or false.")
    return value


@dataclass(frozen=True)
class TournamentRules:
    allow_self_finish: bool = False
    allow_deck_shuffling: bool = False
    allow_repeating_parts_in_deck: bool = False
    allow_repeating_parts_across_decks: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> TournamentRules:
        """Build rules from a stored blob; unknown keys are ignored."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValidationError("Tournament rules must be an object.")
        return cls(**{f.name: _flag(data, f.name) for f in fields(cls)})


@dataclass(frozen=True)
class TournamentSettings:
    """Format and house rules of a tournament."""

    rules: TournamentRules = field(default_factory=TournamentRules)
    match_format: str = "solo"
    players_per_team: int = 1

    @classmethod
    def from_dict(cls, data: Any) -> TournamentSettings:
        """Validate the nested settings blob of a stored tournament.

        Raises:
            ValidationError: If the format is unknown or a value has the wrong type.
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValidationError("Tournament settings must be an object.")

        match_format = data.get("match_format", "solo")
        if match_format not in MATCH_FORMATS:
            raise ValidationError(f"Unknown match format: {match_format!r}")

        players_per_team = data.get("players_per_team", 1)
        if isinstance(players_per_team, bool) or not isinstance(players_per_team, int):
            raise ValidationError("Players per team must be a whole number.")
        if players_per_team < 1:
            raise ValidationError("Players per team must be at least 1.")

        return cls(
            rules=TournamentRules.from_dict(data.get("rules")),
            match_format=match_format,
            players_per_team=players_per_team,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TournamentDraft:
    """Everything the wizard collects before a tournament is saved."""

    # Basic information
    name: str = ""
    description: str = ""
    location: str = ""
    password: str = ""
    registration_deadline: str = ""
    tournament_start: str = ""
    custom_url: str = ""
    host_type: str = "individual"
    host_community_id: Optional[str] = None

    # Registration
    beyblades_per_player: int = 3
    decks_per_player: int = 1
    entry_fee: float = 0
    is_free: bool = False
    payment_options: tuple[str, ...] = ()
    payment_details: dict[str, str] = field(
        default_factory=lambda: {option: "" for option in PAYMENT_OPTIONS}
    )
    is_unlimited: bool = True
    participant_cap: int = 16
    allow_repeating_parts_in_deck: bool = False
    allow_repeating_parts_across_decks: bool = False
    repeat_part_fee: float = 50

    # Settings
    tournament_type: str = "ranked"
    tournament_settings: TournamentSettings = field(default_factory=TournamentSettings)


class TournamentPayload(TypedDict):
    """Fields written to the tournaments collection."""

    name: str
    description: str
    location: str
    password: str
    registration_deadline: str
    tournament_date: str
    custom_url: str
    max_participants: int
    beyblades_per_player: int
    decks_per_player: int
    entry_fee: float
    is_free: bool
    tournament_type: str
    tournament_settings: dict[str, Any]
    hosted_by_type: str
    hosted_by_user_id: Optional[str]
    hosted_by_community_id: Optional[str]
    payment_options: list[str]
    payment_details: dict[str, str]
    allow_repeating_parts_in_deck: bool
    allow_repeating_parts_across_decks: bool
    repeat_part_fee: float


class TournamentRecord(TournamentPayload, total=False):
    """A tournament document as read back from Firestore."""

    id: str
    status: str
    created_by_user_id: Optional[str]
    created_at: Any
    updated_at: Any
