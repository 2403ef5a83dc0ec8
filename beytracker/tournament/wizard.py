"""Tournament draft wizard: step guards, draft updates and payload mapping.

The draft is an immutable record. Every step hands the whole draft to
``update_draft`` with the fields it changed and gets a new draft back; only
the review step turns it into a document via ``to_payload``.
"""

from __future__ import annotations

import dataclasses
import re
from typing import Any, NamedTuple

from beytracker.core.constants import UNLIMITED_PARTICIPANTS
from beytracker.errors import ValidationError

from .models import (
    HOST_TYPES,
    PAYMENT_OPTIONS,
    TOURNAMENT_TYPES,
    TournamentDraft,
    TournamentPayload,
    TournamentSettings,
)


class Step(NamedTuple):
    id: str
    title: str


STEPS = (
    Step("basic", "Basic Information"),
    Step("description", "Description"),
    Step("registration", "Registration Settings"),
    Step("settings", "Tournament Settings"),
    Step("review", "Review & Create"),
)
REVIEW_STEP = len(STEPS) - 1

_DRAFT_FIELDS = frozenset(f.name for f in dataclasses.fields(TournamentDraft))


def update_draft(draft: TournamentDraft, **changes: Any) -> TournamentDraft:
    """Shallow-merge ``changes`` into the draft.

    Nested settings are replaced as a whole; use ``with_settings`` or
    ``with_rules`` to change a single nested value.

    Raises:
        ValidationError: If a change names a field the draft does not have.
    """
    unknown = set(changes) - _DRAFT_FIELDS
    if unknown:
        raise ValidationError(f"Unknown draft field(s): {', '.join(sorted(unknown))}")
    return dataclasses.replace(draft, **changes)


def with_settings(draft: TournamentDraft, **changes: Any) -> TournamentDraft:
    """Change top-level tournament settings, keeping the others."""
    settings = dataclasses.replace(draft.tournament_settings, **changes)
    return update_draft(draft, tournament_settings=settings)


def with_rules(draft: TournamentDraft, **changes: Any) -> TournamentDraft:
    """Change individual house rules, keeping the others."""
    rules = dataclasses.replace(draft.tournament_settings.rules, **changes)
    return with_settings(draft, rules=rules)


def can_proceed(draft: TournamentDraft, step: int) -> bool:
    """Whether the wizard may move past ``step`` with this draft."""
    if step == 0:
        return bool(
            draft.name.strip()
            and draft.password.strip()
            and draft.location.strip()
            and draft.registration_deadline
            and draft.tournament_start
            and (draft.host_type == "individual" or draft.host_community_id)
        )
    if step == 2:
        return (
            draft.beyblades_per_player > 0
            and draft.decks_per_player > 0
            and (draft.is_free or draft.entry_fee > 0)
        )
    return step in (1, 3, 4)


def slugify(name: str) -> str:
    """Custom URL suggestion for a tournament name."""
    slug = re.sub(r"[^a-z0-9\s-]", "", name.lower())
    slug = re.sub(r"\s+", "-", slug)
    return re.sub(r"-+", "-", slug)


def to_payload(draft: TournamentDraft, user_id: str | None) -> TournamentPayload:
    """Map a finished draft to the document stored in Firestore."""
    return {
        "name": draft.name,
        "description": draft.description,
        "location": draft.location,
        "password": draft.password,
        "registration_deadline": draft.registration_deadline,
        "tournament_date": draft.tournament_start,
        "custom_url": draft.custom_url or slugify(draft.name),
        "max_participants": (
            UNLIMITED_PARTICIPANTS if draft.is_unlimited else draft.participant_cap
        ),
        "beyblades_per_player": draft.beyblades_per_player,
        "decks_per_player": draft.decks_per_player,
        "entry_fee": 0 if draft.is_free else draft.entry_fee,
        "is_free": draft.is_free,
        "tournament_type": draft.tournament_type,
        "tournament_settings": draft.tournament_settings.to_dict(),
        "hosted_by_type": draft.host_type,
        "hosted_by_user_id": user_id if draft.host_type == "individual" else None,
        "hosted_by_community_id": (
            draft.host_community_id if draft.host_type == "community" else None
        ),
        "payment_options": list(draft.payment_options),
        "payment_details": dict(draft.payment_details),
        "allow_repeating_parts_in_deck": draft.allow_repeating_parts_in_deck,
        "allow_repeating_parts_across_decks": draft.allow_repeating_parts_across_decks,
        "repeat_part_fee": draft.repeat_part_fee or 0,
    }


def draft_from_record(record: dict[str, Any]) -> TournamentDraft:
    """Prefill a draft from a stored tournament for editing.

    Older documents only carry ``allow_repeating_parts``; it seeds both
    repeating-part flags.
    """
    max_participants = record.get("max_participants") or 16
    unlimited = max_participants == UNLIMITED_PARTICIPANTS
    legacy_repeat = bool(record.get("allow_repeating_parts"))
    host_type = record.get("hosted_by_type") or "individual"
    if host_type not in HOST_TYPES:
        raise ValidationError(f"Unknown host type: {host_type!r}")
    tournament_type = record.get("tournament_type") or "ranked"
    if tournament_type not in TOURNAMENT_TYPES:
        raise ValidationError(f"Unknown tournament type: {tournament_type!r}")

    return TournamentDraft(
        name=record.get("name") or "",
        description=record.get("description") or "",
        location=record.get("location") or "",
        password=record.get("password") or "",
        registration_deadline=record.get("registration_deadline") or "",
        tournament_start=record.get("tournament_date") or "",
        custom_url=record.get("custom_url") or "",
        host_type=host_type,
        host_community_id=record.get("hosted_by_community_id"),
        beyblades_per_player=record.get("beyblades_per_player") or 3,
        decks_per_player=record.get("decks_per_player") or 1,
        entry_fee=record.get("entry_fee") or 0,
        is_free=bool(record.get("is_free")),
        payment_options=tuple(record.get("payment_options") or ()),
        payment_details=record.get("payment_details")
        or {option: "" for option in PAYMENT_OPTIONS},
        is_unlimited=unlimited,
        participant_cap=16 if unlimited else max_participants,
        allow_repeating_parts_in_deck=bool(
            record.get("allow_repeating_parts_in_deck") or legacy_repeat
        ),
        allow_repeating_parts_across_decks=bool(
            record.get("allow_repeating_parts_across_decks") or legacy_repeat
        ),
        repeat_part_fee=record.get("repeat_part_fee") or 50,
        tournament_type=tournament_type,
        tournament_settings=TournamentSettings.from_dict(
            record.get("tournament_settings")
        ),
    )


def draft_to_session(draft: TournamentDraft) -> dict[str, Any]:
    """Plain JSON-safe form of a draft for the Flask session."""
    data = dataclasses.asdict(draft)
    data["payment_options"] = list(draft.payment_options)
    return data


def draft_from_session(data: dict[str, Any] | None) -> TournamentDraft:
    """Rebuild a draft stored by ``draft_to_session``; fields no longer known are dropped."""
    if not data:
        return TournamentDraft()
    values = {k: v for k, v in data.items() if k in _DRAFT_FIELDS}
    values["payment_options"] = tuple(values.get("payment_options") or ())
    values["tournament_settings"] = TournamentSettings.from_dict(
        values.get("tournament_settings")
    )
    return TournamentDraft(**values)

