"""Routes for the analytics blueprint."""

from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import current_app, jsonify, render_template, request

from beytracker.auth.decorators import login_required
from beytracker.errors import DataSourceError, NotFoundError
from beytracker.match import (
    MatchResult,
    MatchSession,
    fetch_match_results,
    fetch_match_sessions,
    fetch_tournament,
)

from . import bp
from .insights import (
    beyblade_matchups,
    match_analysis,
    phase_breakdown,
    player_matchups,
    points_distribution,
    side_analysis,
)
from .overview import combo_stats, finish_distribution, points_ranking
from .players import compute_player_stats, head_to_head, rank_players


def _load_matches(tournament_id: str) -> list[MatchResult]:
    try:
        return fetch_match_results(firestore.client(), tournament_id)
    except DataSourceError as e:
        current_app.logger.error(f"Error fetching matches for {tournament_id}: {e}")
        return []


def _load_sessions(tournament_id: str) -> list[MatchSession]:
    try:
        return fetch_match_sessions(firestore.client(), tournament_id)
    except DataSourceError as e:
        current_app.logger.error(f"Error fetching sessions for {tournament_id}: {e}")
        return []


def _players_view(matches: list[MatchResult]) -> dict[str, Any]:
    stats = compute_player_stats(matches)
    return {
        "players": [p.to_dict() for p in rank_players(stats.values())],
        "head_to_head": [h.to_dict() for h in head_to_head(matches)],
    }


def _insights_view(
    matches: list[MatchResult], sessions: list[MatchSession]
) -> dict[str, Any]:
    analysis = match_analysis(sessions)
    sides = side_analysis(matches)
    return {
        "player_matchups": [m.to_dict() for m in player_matchups(sessions)],
        "match_analysis": analysis.to_dict() if analysis else None,
        "beyblade_matchups": [m.to_dict() for m in beyblade_matchups(matches)],
        "side_analysis": sides.to_dict() if sides else None,
        "phase_breakdown": phase_breakdown(matches),
        "points_distribution": points_distribution(sessions),
    }


def _overview_view(matches: list[MatchResult]) -> dict[str, Any]:
    return {
        "total_matches": len(matches),
        "combo_stats": [c.to_dict() for c in combo_stats(matches)],
        "finish_distribution": finish_distribution(matches),
        "player_rankings": points_ranking(matches),
    }


@bp.route("/<string:tournament_id>", methods=["GET"])
@login_required
def index(tournament_id: str) -> Any:
    """Render the analytics page of a tournament."""
    try:
        tournament = fetch_tournament(firestore.client(), tournament_id)
    except DataSourceError as e:
        current_app.logger.error(f"Error fetching tournament {tournament_id}: {e}")
        tournament = {"id": tournament_id, "name": tournament_id}
    if tournament is None:
        raise NotFoundError("Tournament not found.")

    matches = _load_matches(tournament_id)
    sessions = _load_sessions(tournament_id)
    return render_template(
        "analytics/index.html",
        tournament=tournament,
        tab=request.args.get("tab", "overview"),
        overview=_overview_view(matches),
        players=_players_view(matches),
        insights=_insights_view(matches, sessions),
    )


@bp.route("/<string:tournament_id>/api/players", methods=["GET"])
@login_required
def api_players(tournament_id: str) -> Any:
    """Player statistics ranked by weighted win rate."""
    return jsonify(_players_view(_load_matches(tournament_id)))


@bp.route("/<string:tournament_id>/api/players/<string:player_name>", methods=["GET"])
@login_required
def api_player(tournament_id: str, player_name: str) -> Any:
    """Statistics of a single player."""
    stats = compute_player_stats(_load_matches(tournament_id))
    stat = stats.get(player_name)
    if stat is None:
        raise NotFoundError("Player not found.")
    return jsonify(stat.to_dict())


@bp.route("/<string:tournament_id>/api/insights", methods=["GET"])
@login_required
def api_insights(tournament_id: str) -> Any:
    """Player and combo matchups, sides and phases."""
    return jsonify(
        _insights_view(_load_matches(tournament_id), _load_sessions(tournament_id))
    )


@bp.route("/<string:tournament_id>/api/overview", methods=["GET"])
@login_required
def api_overview(tournament_id: str) -> Any:
    """Combo leaderboard, finish mix and points ranking."""
    return jsonify(_overview_view(_load_matches(tournament_id)))
