"""Routes for the tournament blueprint."""

from __future__ import annotations

from typing import Any

from flask import (
    current_app,
    flash,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from beytracker.auth.decorators import login_required
from beytracker.errors import DataSourceError, SubmissionError

from . import bp
from .forms import STEP_FORMS, initial_data
from .models import TournamentDraft, TournamentRecord
from .services import TournamentService
from .wizard import (
    REVIEW_STEP,
    STEPS,
    can_proceed,
    draft_from_record,
    draft_from_session,
    draft_to_session,
    slugify,
)

DRAFT_KEY = "tournament_draft"
EDIT_KEY = "tournament_draft_id"


def _current_draft() -> TournamentDraft:
    return draft_from_session(session.get(DRAFT_KEY))


def _store_draft(draft: TournamentDraft) -> None:
    session[DRAFT_KEY] = draft_to_session(draft)


def _clear_draft() -> None:
    session.pop(DRAFT_KEY, None)
    session.pop(EDIT_KEY, None)


def _can_edit(record: TournamentRecord) -> bool:
    """Hosts, creators and admins may edit a tournament."""
    if session.get("is_admin"):
        return True
    user_id = session["user_id"]
    return user_id in (record.get("hosted_by_user_id"), record.get("created_by_user_id"))


@bp.route("/", methods=["GET"])
@login_required
def list_tournaments() -> Any:
    """List tournaments hosted by the current user."""
    try:
        tournaments = TournamentService.list_tournaments(session["user_id"])
    except DataSourceError as e:
        current_app.logger.error(f"Error fetching tournaments: {e}")
        tournaments = []
    return render_template("tournament/list.html", tournaments=tournaments)


@bp.route("/wizard", methods=["GET"])
@login_required
def start_wizard() -> Any:
    """Start a fresh draft."""
    _clear_draft()
    return redirect(url_for(".wizard_step", step=0))


@bp.route("/<string:tournament_id>/edit", methods=["GET"])
@login_required
def edit_tournament(tournament_id: str) -> Any:
    """Open the wizard prefilled with an existing tournament."""
    try:
        record = TournamentService.get_tournament(tournament_id)
    except DataSourceError as e:
        current_app.logger.error(f"Error loading tournament {tournament_id}: {e}")
        flash("Could not load the tournament. Please try again.", "danger")
        return redirect(url_for(".list_tournaments"))

    if not _can_edit(record):
        flash("You are not authorized to edit this tournament.", "danger")
        return redirect(url_for(".list_tournaments"))

    _store_draft(draft_from_record(record))
    session[EDIT_KEY] = tournament_id
    return redirect(url_for(".wizard_step", step=0))


@bp.route("/wizard/<int:step>", methods=["GET", "POST"])
@login_required
def wizard_step(step: int) -> Any:
    """Show one wizard step and merge its answers into the draft."""
    if step < 0 or step >= len(STEPS):
        return redirect(url_for(".wizard_step", step=0))

    draft = _current_draft()
    form = STEP_FORMS[step](data=initial_data(draft))

    if request.method == "POST":
        valid = form.validate()
        if valid:
            draft = form.apply_to(draft)
            _store_draft(draft)
        if request.form.get("action") == "back":
            return redirect(url_for(".wizard_step", step=max(step - 1, 0)))
        if valid and can_proceed(draft, step):
            if step == REVIEW_STEP:
                return redirect(url_for(".submit"), code=307)
            return redirect(url_for(".wizard_step", step=step + 1))
        flash("Please complete the required fields before continuing.", "warning")

    return render_template(
        "tournament/wizard.html",
        form=form,
        draft=draft,
        step=step,
        steps=STEPS,
        editing=session.get(EDIT_KEY),
        can_proceed=can_proceed(draft, step),
        suggested_url=slugify(draft.name),
    )


@bp.route("/wizard/submit", methods=["POST"])
@login_required
def submit() -> Any:
    """Save the draft as a new tournament, or over the one being edited."""
    draft = _current_draft()
    tournament_id = session.get(EDIT_KEY)
    for step in range(len(STEPS)):
        if not can_proceed(draft, step):
            flash("Please complete the required fields before continuing.", "warning")
            return redirect(url_for(".wizard_step", step=step))

    owner_id = session["user_id"]
    if tournament_id:
        try:
            record = TournamentService.get_tournament(tournament_id)
        except DataSourceError as e:
            current_app.logger.error(f"Error loading tournament {tournament_id}: {e}")
            flash("Error: Could not load the tournament. Please try again.", "danger")
            return redirect(url_for(".wizard_step", step=REVIEW_STEP))
        if not _can_edit(record):
            _clear_draft()
            flash("You are not authorized to edit this tournament.", "danger")
            return redirect(url_for(".list_tournaments"))
        # An admin editing keeps the original host.
        owner_id = record.get("hosted_by_user_id") or owner_id

    try:
        TournamentService.save(draft, owner_id, tournament_id)
    except SubmissionError as e:
        # The draft stays in the session so the user can retry.
        flash(f"Error: {e.message}", "danger")
        return redirect(url_for(".wizard_step", step=REVIEW_STEP))

    _clear_draft()
    if tournament_id:
        flash("Tournament updated successfully!", "success")
    else:
        flash("Tournament created successfully!", "success")
    return redirect(url_for(".list_tournaments"))


@bp.route("/wizard/cancel", methods=["POST"])
@login_required
def cancel() -> Any:
    """Discard the draft."""
    _clear_draft()
    return redirect(url_for(".list_tournaments"))
