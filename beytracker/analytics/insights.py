"""Cross-cutting insights: player and combo matchups, sides and phases."""

from __future__ import annotations

import datetime
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Any, Optional

from beytracker.match.models import MatchResult, MatchSession


def _matchup_key(a: str, b: str) -> str:
    first, second = sorted((a, b))
    return f"{first} vs {second}"


@dataclass(frozen=True)
class PlayerMatchup:
    players: str
    player1: str
    player2: str
    total_matches: int
    player1_wins: int
    player2_wins: int
    avg_point_gap: float
    last_played: Optional[datetime.datetime]

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        data = asdict(self)
        data["last_played"] = self.last_played.isoformat() if self.last_played else None
        return data


def player_matchups(sessions: Iterable[MatchSession]) -> list[PlayerMatchup]:
    """Session totals per unordered pair of players, busiest pairing first."""
    acc: dict[str, dict[str, Any]] = {}
    for session in sessions:
        first, second = sorted((session.player1_name, session.player2_name))
        key = f"{first} vs {second}"
        entry = acc.setdefault(
            key,
            {
                "player1": first,
                "player2": second,
                "total": 0,
                "p1_wins": 0,
                "p2_wins": 0,
                "gap": 0,
                "last": None,
            },
        )
        entry["total"] += 1
        entry["gap"] += session.point_gap
        if session.winner_name == first:
            entry["p1_wins"] += 1
        elif session.winner_name == second:
            entry["p2_wins"] += 1
        if session.created_at and (entry["last"] is None or session.created_at > entry["last"]):
            entry["last"] = session.created_at

    matchups = [
        PlayerMatchup(
            players=key,
            player1=e["player1"],
            player2=e["player2"],
            total_matches=e["total"],
            player1_wins=e["p1_wins"],
            player2_wins=e["p2_wins"],
            avg_point_gap=e["gap"] / e["total"],
            last_played=e["last"],
        )
        for key, e in acc.items()
    ]
    return sorted(matchups, key=lambda m: m.total_matches, reverse=True)


@dataclass(frozen=True)
class NotableSession:
    players: str
    point_gap: int
    winner: str


@dataclass(frozen=True)
class MatchAnalysis:
    most_one_sided: NotableSession
    closest_match: NotableSession
    avg_point_gap: float
    total_rounds: int

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return asdict(self)


def _notable(session: MatchSession) -> NotableSession:
    return NotableSession(
        players=_matchup_key(session.player1_name, session.player2_name),
        point_gap=session.point_gap,
        winner=session.winner_name or "Unknown",
    )


def match_analysis(sessions: Iterable[MatchSession]) -> MatchAnalysis | None:
    """Most one-sided and closest sessions plus the average gap.

    Equal gaps go to the alphabetically first matchup, then to the session
    seen first. Returns None when there are no sessions.
    """
    sessions = list(sessions)
    if not sessions:
        return None

    # min/max return the first of equal elements, so keys only need the matchup
    most = min(sessions, key=lambda s: (-s.point_gap, _notable(s).players))
    closest = min(sessions, key=lambda s: (s.point_gap, _notable(s).players))
    total_gap = sum(s.point_gap for s in sessions)
    return MatchAnalysis(
        most_one_sided=_notable(most),
        closest_match=_notable(closest),
        avg_point_gap=total_gap / len(sessions),
        total_rounds=len(sessions),
    )


@dataclass(frozen=True)
class ComboMatchup:
    matchup: str
    total_matches: int
    wins: dict[str, int]
    total_points: int
    dominant_combo: str

    @property
    def win_rate(self) -> float:
        if self.total_matches == 0:
            return 0.0
        return self.wins[self.dominant_combo] / self.total_matches * 100

    @property
    def avg_points(self) -> float:
        if self.total_matches == 0:
            return 0.0
        return self.total_points / self.total_matches

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            **asdict(self),
            "win_rate": self.win_rate,
            "avg_points": self.avg_points,
        }


def beyblade_matchups(matches: Iterable[MatchResult]) -> list[ComboMatchup]:
    """Results per unordered pair of combos, most played first.

    The dominant combo has the most wins; a tie goes to the alphabetically
    first combo name.
    """
    acc: dict[str, dict[str, Any]] = {}
    for match in matches:
        bey1, bey2 = match.player1_beyblade, match.player2_beyblade
        if not bey1 or not bey2:
            continue
        key = _matchup_key(bey1, bey2)
        entry = acc.setdefault(key, {"total": 0, "points": 0, "wins": {bey1: 0, bey2: 0}})
        entry["total"] += 1
        entry["points"] += match.points_awarded or 0
        if match.winner_name == match.player1_name:
            entry["wins"][bey1] += 1
        elif match.winner_name == match.player2_name:
            entry["wins"][bey2] += 1

    result = []
    for key, entry in acc.items():
        wins = entry["wins"]
        dominant = min(wins, key=lambda combo: (-wins[combo], combo))
        result.append(
            ComboMatchup(
                matchup=key,
                total_matches=entry["total"],
                wins=dict(wins),
                total_points=entry["points"],
                dominant_combo=dominant,
            )
        )
    return sorted(result, key=lambda m: m.total_matches, reverse=True)


@dataclass(frozen=True)
class SideAnalysis:
    x_side_wins: int
    b_side_wins: int
    total_matches: int

    @property
    def x_side_win_rate(self) -> float:
        return self.x_side_wins / self.total_matches * 100

    @property
    def b_side_win_rate(self) -> float:
        return self.b_side_wins / self.total_matches * 100

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            **asdict(self),
            "x_side_win_rate": self.x_side_win_rate,
            "b_side_win_rate": self.b_side_win_rate,
        }


def side_analysis(matches: Iterable[MatchResult]) -> SideAnalysis | None:
    """X side against B side, over matches that record both sides."""
    x_wins = b_wins = total = 0
    for match in matches:
        if not match.x_side_player or not match.b_side_player:
            continue
        total += 1
        if match.winner_name == match.x_side_player:
            x_wins += 1
        elif match.winner_name == match.b_side_player:
            b_wins += 1
    if total == 0:
        return None
    return SideAnalysis(x_side_wins=x_wins, b_side_wins=b_wins, total_matches=total)


def phase_breakdown(matches: Iterable[MatchResult]) -> list[dict[str, Any]]:
    """Match count and points per phase number, ascending.

    Matches without a phase are left out of every total, including the
    share denominator.
    """
    phases: dict[int, dict[str, int]] = {}
    for match in matches:
        if match.phase_number is None:
            continue
        entry = phases.setdefault(match.phase_number, {"matches": 0, "points": 0})
        entry["matches"] += 1
        entry["points"] += match.points_awarded or 0

    phased = sum(e["matches"] for e in phases.values())
    return [
        {
            "phase": phase,
            "matches": entry["matches"],
            "points": entry["points"],
            "avg_points": entry["points"] / entry["matches"],
            "share": entry["matches"] / phased * 100,
        }
        for phase, entry in sorted(phases.items())
    ]


def points_distribution(sessions: Iterable[MatchSession]) -> list[dict[str, int]]:
    """How many sessions ended with each combined final score."""
    counts: dict[int, int] = {}
    for session in sessions:
        total = session.player1_final_score + session.player2_final_score
        counts[total] = counts.get(total, 0) + 1
    return [{"points": points, "matches": n} for points, n in sorted(counts.items())]
