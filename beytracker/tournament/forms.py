"""Forms for the tournament wizard, one per step."""

from __future__ import annotations

import datetime
from typing import Any

from flask_wtf import FlaskForm
from wtforms import (
    BooleanField,
    DateField,
    DateTimeLocalField,
    FloatField,
    IntegerField,
    RadioField,
    SelectMultipleField,
    StringField,
    TextAreaField,
    widgets,
)
from wtforms.validators import DataRequired, NumberRange, Optional

from .models import PAYMENT_OPTIONS, TournamentDraft
from .wizard import update_draft, with_rules, with_settings

START_FORMAT = "%Y-%m-%dT%H:%M"


class MultiCheckboxField(SelectMultipleField):
    widget = widgets.ListWidget(prefix_label=False)
    option_widget = widgets.CheckboxInput()


class WizardStepForm(FlaskForm):
    """A wizard step that writes its fields into the draft."""

    def changes(self, draft: TournamentDraft) -> dict[str, Any]:
        return {}

    def apply_to(self, draft: TournamentDraft) -> TournamentDraft:
        return update_draft(draft, **self.changes(draft))


class BasicInformationForm(WizardStepForm):
    """Step 0: name, schedule, venue and host."""

    name = StringField("Tournament Name", validators=[DataRequired()])
    location = StringField("Location", validators=[DataRequired()])
    password = StringField("Tournament Password", validators=[DataRequired()])
    registration_deadline = DateField("Registration Deadline", validators=[Optional()])
    tournament_start = DateTimeLocalField(
        "Tournament Start", format=START_FORMAT, validators=[Optional()]
    )
    custom_url = StringField("Custom URL", validators=[Optional()])
    host_type = RadioField(
        "Hosted By",
        choices=[("individual", "Myself"), ("community", "A community")],
        default="individual",
    )
    host_community_id = StringField("Community", validators=[Optional()])

    def changes(self, draft: TournamentDraft) -> dict[str, Any]:
        deadline = self.registration_deadline.data
        start = self.tournament_start.data
        return {
            "name": self.name.data or "",
            "location": self.location.data or "",
            "password": self.password.data or "",
            "registration_deadline": deadline.isoformat() if deadline else "",
            "tournament_start": start.strftime(START_FORMAT) if start else "",
            "custom_url": self.custom_url.data or "",
            "host_type": self.host_type.data,
            "host_community_id": self.host_community_id.data or None,
        }


class DescriptionForm(WizardStepForm):
    """Step 1: free-text description."""

    description = TextAreaField("Description", validators=[Optional()])

    def changes(self, draft: TournamentDraft) -> dict[str, Any]:
        return {"description": self.description.data or ""}


class RegistrationSettingsForm(WizardStepForm):
    """Step 2: deck limits, fees and capacity."""

    beyblades_per_player = IntegerField(
        "Beyblades per Player", validators=[DataRequired(), NumberRange(min=1)]
    )
    decks_per_player = IntegerField(
        "Decks per Player", validators=[DataRequired(), NumberRange(min=1)]
    )
    is_free = BooleanField("Free Entry")
    entry_fee = FloatField("Entry Fee", validators=[Optional(), NumberRange(min=0)])
    payment_options = MultiCheckboxField(
        "Payment Options",
        choices=[
            ("gcash", "GCash"),
            ("bank_transfer", "Bank Transfer"),
            ("cash", "Cash"),
        ],
    )
    gcash = StringField("GCash Details", validators=[Optional()])
    bank_transfer = StringField("Bank Transfer Details", validators=[Optional()])
    cash = StringField("Cash Details", validators=[Optional()])
    is_unlimited = BooleanField("Unlimited Participants")
    participant_cap = IntegerField(
        "Participant Cap", validators=[Optional(), NumberRange(min=2)]
    )
    allow_repeating_parts_in_deck = BooleanField("Allow repeating parts in a deck")
    allow_repeating_parts_across_decks = BooleanField(
        "Allow repeating parts across decks"
    )
    repeat_part_fee = FloatField(
        "Repeated Part Fee", validators=[Optional(), NumberRange(min=0)]
    )

    def changes(self, draft: TournamentDraft) -> dict[str, Any]:
        return {
            "beyblades_per_player": self.beyblades_per_player.data,
            "decks_per_player": self.decks_per_player.data,
            "is_free": self.is_free.data,
            "entry_fee": self.entry_fee.data or 0,
            "payment_options": tuple(self.payment_options.data or ()),
            "payment_details": {
                option: getattr(self, option).data or "" for option in PAYMENT_OPTIONS
            },
            "is_unlimited": self.is_unlimited.data,
            "participant_cap": self.participant_cap.data or draft.participant_cap,
            "allow_repeating_parts_in_deck": self.allow_repeating_parts_in_deck.data,
            "allow_repeating_parts_across_decks": (
                self.allow_repeating_parts_across_decks.data
            ),
            "repeat_part_fee": self.repeat_part_fee.data or 0,
        }


class TournamentSettingsForm(WizardStepForm):
    """Step 3: tournament type, match format and house rules."""

    tournament_type = RadioField(
        "Tournament Type",
        choices=[
            ("practice", "Practice"),
            ("casual", "Casual"),
            ("ranked", "Ranked"),
            ("experimental", "Experimental"),
        ],
        default="ranked",
    )
    match_format = RadioField(
        "Match Format",
        choices=[("solo", "Solo"), ("teams", "Teams")],
        default="solo",
    )
    players_per_team = IntegerField(
        "Players per Team", validators=[Optional(), NumberRange(min=2, max=5)]
    )
    allow_self_finish = BooleanField("Allow self finish")
    allow_deck_shuffling = BooleanField("Allow deck shuffling")

    def apply_to(self, draft: TournamentDraft) -> TournamentDraft:
        teams = self.match_format.data == "teams"
        draft = update_draft(draft, tournament_type=self.tournament_type.data)
        draft = with_settings(
            draft,
            match_format=self.match_format.data,
            players_per_team=(self.players_per_team.data or 2) if teams else 1,
        )
        return with_rules(
            draft,
            allow_self_finish=self.allow_self_finish.data,
            allow_deck_shuffling=self.allow_deck_shuffling.data,
        )


class ReviewForm(WizardStepForm):
    """Step 4: confirmation only."""


STEP_FORMS = (
    BasicInformationForm,
    DescriptionForm,
    RegistrationSettingsForm,
    TournamentSettingsForm,
    ReviewForm,
)


def initial_data(draft: TournamentDraft) -> dict[str, Any]:
    """Form defaults for every step, taken from the draft."""
    settings = draft.tournament_settings
    data: dict[str, Any] = {
        "name": draft.name,
        "location": draft.location,
        "password": draft.password,
        "custom_url": draft.custom_url,
        "host_type": draft.host_type,
        "host_community_id": draft.host_community_id or "",
        "description": draft.description,
        "beyblades_per_player": draft.beyblades_per_player,
        "decks_per_player": draft.decks_per_player,
        "is_free": draft.is_free,
        "entry_fee": draft.entry_fee,
        "payment_options": list(draft.payment_options),
        "is_unlimited": draft.is_unlimited,
        "participant_cap": draft.participant_cap,
        "allow_repeating_parts_in_deck": draft.allow_repeating_parts_in_deck,
        "allow_repeating_parts_across_decks": draft.allow_repeating_parts_across_decks,
        "repeat_part_fee": draft.repeat_part_fee,
        "tournament_type": draft.tournament_type,
        "match_format": settings.match_format,
        "players_per_team": settings.players_per_team,
        "allow_self_finish": settings.rules.allow_self_finish,
        "allow_deck_shuffling": settings.rules.allow_deck_shuffling,
    }
    data.update(draft.payment_details)
    if draft.registration_deadline:
        try:
            data["registration_deadline"] = datetime.date.fromisoformat(
                draft.registration_deadline[:10]
            )
        except ValueError:
            pass
    if draft.tournament_start:
        try:
            data["tournament_start"] = datetime.datetime.fromisoformat(
                draft.tournament_start
            )
        except ValueError:
            pass
    return data
