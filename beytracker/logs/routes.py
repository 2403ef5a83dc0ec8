"""Routes for the logs blueprint."""

from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import current_app, jsonify, render_template, request

from beytracker.auth.decorators import login_required
from beytracker.core.constants import AUTO_REFRESH_SECONDS, LIVE_FEED_LIMIT
from beytracker.errors import DataSourceError, NotFoundError, ValidationError
from beytracker.match import fetch_match_results, fetch_stadiums, fetch_tournament

from . import bp
from .aggregation import available_officers, stadium_rounds, stadium_totals
from .services import LogSnapshot, StadiumService, build_snapshot


def _officer_roster() -> list[str]:
    """Extra officers passed as ``?officers=a,b`` on top of stadium assignments."""
    raw = request.args.get("officers", "")
    return [o.strip() for o in raw.split(",") if o.strip()]


def _load_snapshot(tournament_id: str) -> LogSnapshot:
    """Fetch rows and rebuild every log view; an unreachable backend shows empty views."""
    db = firestore.client()
    try:
        matches = fetch_match_results(db, tournament_id)
        stadiums = fetch_stadiums(db, tournament_id)
    except DataSourceError as e:
        current_app.logger.error(f"Error fetching logs for {tournament_id}: {e}")
        return LogSnapshot(generation=0)
    return build_snapshot(
        1,
        matches,
        stadiums,
        _officer_roster(),
        current_app.config.get("LIVE_FEED_LIMIT", LIVE_FEED_LIMIT),
    )


def _rounds_to_show() -> int:
    try:
        return max(int(request.args.get("rounds_to_show", 1)), 1)
    except ValueError:
        return 1


@bp.route("/<string:tournament_id>", methods=["GET"])
@login_required
def dashboard(tournament_id: str) -> Any:
    """Render the log dashboard of one tournament."""
    try:
        tournament = fetch_tournament(firestore.client(), tournament_id)
    except DataSourceError as e:
        current_app.logger.error(f"Error fetching tournament {tournament_id}: {e}")
        tournament = {"id": tournament_id, "name": tournament_id}
    if tournament is None:
        raise NotFoundError("Tournament not found.")

    snapshot = _load_snapshot(tournament_id)
    rounds_to_show = _rounds_to_show()
    stadium_cards = [
        {
            "stadium": stadium,
            "rounds": stadium_rounds(snapshot.rounds, stadium.assigned_officer),
        }
        for stadium in snapshot.stadiums
    ]
    return render_template(
        "logs/dashboard.html",
        tournament=tournament,
        snapshot=snapshot,
        stadium_cards=stadium_cards,
        totals=stadium_totals(snapshot.stadiums, snapshot.rounds, rounds_to_show),
        rounds_to_show=rounds_to_show,
        tab=request.args.get("tab", "live-feed"),
        refresh_seconds=current_app.config.get(
            "AUTO_REFRESH_SECONDS", AUTO_REFRESH_SECONDS
        ),
    )


@bp.route("/<string:tournament_id>/api/feed", methods=["GET"])
@login_required
def api_feed(tournament_id: str) -> Any:
    """Most recent match results."""
    snapshot = _load_snapshot(tournament_id)
    return jsonify({
        "total_matches": len(snapshot.matches),
        "matches": [m.to_dict() for m in snapshot.feed],
    })


@bp.route("/<string:tournament_id>/api/rounds", methods=["GET"])
@login_required
def api_rounds(tournament_id: str) -> Any:
    """Round results, most recently ended first."""
    snapshot = _load_snapshot(tournament_id)
    return jsonify({"rounds": [r.to_dict() for r in snapshot.rounds]})


@bp.route("/<string:tournament_id>/api/pairings", methods=["GET"])
@login_required
def api_pairings(tournament_id: str) -> Any:
    """Head-to-head pairings, most recently played first."""
    snapshot = _load_snapshot(tournament_id)
    return jsonify({"pairings": [p.to_dict() for p in snapshot.pairings]})


@bp.route("/<string:tournament_id>/api/stadiums", methods=["GET"])
@login_required
def api_stadiums(tournament_id: str) -> Any:
    """Stadiums with their officer's rounds and score totals."""
    snapshot = _load_snapshot(tournament_id)
    rounds_to_show = _rounds_to_show()
    totals = stadium_totals(snapshot.stadiums, snapshot.rounds, rounds_to_show)
    return jsonify({
        "officers": available_officers(snapshot.stadiums),
        "stadiums": [
            {
                **stadium.to_dict(),
                "rounds": [
                    r.to_dict()
                    for r in stadium_rounds(snapshot.rounds, stadium.assigned_officer)
                ],
                "totals": totals[stadium.id],
            }
            for stadium in snapshot.stadiums
        ],
    })


@bp.route("/<string:tournament_id>/api/unmatched", methods=["GET"])
@login_required
def api_unmatched(tournament_id: str) -> Any:
    """Matches submitted by officers without a stadium."""
    snapshot = _load_snapshot(tournament_id)
    return jsonify({"matches": [m.to_dict() for m in snapshot.unmatched]})


@bp.route("/<string:tournament_id>/api/stadiums/count", methods=["POST"])
@login_required(admin_required=True)
def api_set_stadium_count(tournament_id: str) -> Any:
    """Recreate the stadiums of a tournament."""
    payload = request.get_json(silent=True) or {}
    try:
        count = int(payload.get("count", 0))
    except (TypeError, ValueError) as e:
        raise ValidationError("Stadium count must be a number.") from e
    stadiums = StadiumService.set_stadium_count(tournament_id, count)
    return jsonify({"stadiums": [s.to_dict() for s in stadiums]})


@bp.route("/<string:tournament_id>/api/stadiums/randomize", methods=["POST"])
@login_required(admin_required=True)
def api_randomize_officers(tournament_id: str) -> Any:
    """Shuffle officers over the stadiums."""
    payload = request.get_json(silent=True) or {}
    officers = payload.get("officers")
    if not isinstance(officers, list):
        raise ValidationError("Officers must be a list of names.")
    stadiums = StadiumService.randomize_officers(
        tournament_id, [str(o) for o in officers]
    )
    return jsonify({"stadiums": [s.to_dict() for s in stadiums]})


@bp.route("/api/stadiums/<string:stadium_id>/officer", methods=["POST"])
@login_required(admin_required=True)
def api_assign_officer(stadium_id: str) -> Any:
    """Assign or clear the officer of a stadium."""
    payload = request.get_json(silent=True) or {}
    StadiumService.assign_officer(stadium_id, payload.get("officer"))
    return jsonify({"status": "success"})
