"""Per-player statistics and head-to-head records for a tournament."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Any

from beytracker.core.constants import (
    FINISH_POINTS,
    UNKNOWN_FINISH,
    WEIGHTED_WIN_RATE_PRIOR,
)
from beytracker.match.models import MatchResult


def weighted_win_rate(wins: int, matches: int) -> float:
    """Win ratio shrunk toward zero for small samples.

    ``wins / matches * matches / (matches + 10)``; always in [0, 1).
    """
    if matches == 0:
        return 0.0
    return (wins / matches) * (matches / (matches + WEIGHTED_WIN_RATE_PRIOR))


def finish_label(outcome: str | None) -> str:
    """Strip a parenthetical suffix: ``"Burst Finish (2 pts)"`` -> ``"Burst Finish"``."""
    label = (outcome or "").split(" (")[0].strip()
    return label or UNKNOWN_FINISH


def match_points(match: MatchResult) -> int:
    """Points recorded on the match, else the standard value for its finish."""
    return match.points_awarded or FINISH_POINTS.get(finish_label(match.outcome), 0)


@dataclass(frozen=True)
class PhaseRecord:
    wins: int
    matches: int
    points: int


@dataclass(frozen=True)
class PlayerStat:
    """Aggregate of every match a player took part in."""

    name: str
    matches: int
    wins: int
    losses: int
    win_rate: float
    weighted_win_rate: float
    total_points: int
    avg_points_per_match: float
    mvp_combo: str
    mvp_combo_score: int
    most_common_finish: str
    finish_distribution: dict[str, int]
    phase_performance: dict[int, PhaseRecord]
    wins_by_finish: dict[str, dict[str, int]]
    losses_by_finish: dict[str, dict[str, int]]
    points_gained_by_bey: dict[str, int]
    points_given_by_bey: dict[str, int]
    match_ids: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        data = asdict(self)
        data["phase_performance"] = {
            str(phase): asdict(record)
            for phase, record in sorted(self.phase_performance.items())
        }
        data["match_ids"] = list(self.match_ids)
        return data


def _empty_player(name: str) -> dict[str, Any]:
    return {
        "name": name,
        "matches": 0,
        "wins": 0,
        "losses": 0,
        "total_points": 0,
        "finish_distribution": {},
        "phase_performance": {},
        "wins_by_finish": {},
        "losses_by_finish": {},
        "points_gained_by_bey": {},
        "points_given_by_bey": {},
        "match_ids": [],
    }


def _bump(counter: dict[Any, int], key: Any, amount: int = 1) -> None:
    counter[key] = counter.get(key, 0) + amount


def _phase(acc: dict[str, Any], phase: int) -> dict[str, int]:
    return acc["phase_performance"].setdefault(
        phase, {"wins": 0, "matches": 0, "points": 0}
    )


def _first_max(counter: dict[str, int]) -> tuple[str, int] | None:
    """Entry with the highest value; the first one seen wins a tie."""
    best = None
    for key, value in counter.items():
        if best is None or value > best[1]:
            best = (key, value)
    return best


def _finalize(acc: dict[str, Any]) -> PlayerStat:
    matches = acc["matches"]
    wins = acc["wins"]
    mvp = _first_max(acc["points_gained_by_bey"])
    common = _first_max(acc["finish_distribution"])
    return PlayerStat(
        name=acc["name"],
        matches=matches,
        wins=wins,
        losses=acc["losses"],
        win_rate=(wins / matches * 100) if matches > 0 else 0.0,
        weighted_win_rate=weighted_win_rate(wins, matches),
        total_points=acc["total_points"],
        avg_points_per_match=acc["total_points"] / matches if matches > 0 else 0.0,
        mvp_combo=mvp[0] if mvp else "",
        mvp_combo_score=mvp[1] if mvp else 0,
        most_common_finish=common[0] if common else "N/A",
        finish_distribution=dict(acc["finish_distribution"]),
        phase_performance={
            phase: PhaseRecord(**record)
            for phase, record in acc["phase_performance"].items()
        },
        wins_by_finish={k: dict(v) for k, v in acc["wins_by_finish"].items()},
        losses_by_finish={k: dict(v) for k, v in acc["losses_by_finish"].items()},
        points_gained_by_bey=dict(acc["points_gained_by_bey"]),
        points_given_by_bey=dict(acc["points_given_by_bey"]),
        match_ids=tuple(acc["match_ids"]),
    )


def compute_player_stats(matches: Iterable[MatchResult]) -> Mapping[str, PlayerStat]:
    """Fold every match into one record per display name.

    Normalized names only decide which side lost; records are keyed by the
    display names exactly as submitted, so ``"Alice"`` and ``"alice "`` stay
    separate players.
    """
    players: dict[str, dict[str, Any]] = {}

    for match in matches:
        if not match.winner_name or not match.player1_name or not match.player2_name:
            continue
        outcome = finish_label(match.outcome)
        points = match_points(match)
        phase = match.phase_number or 1

        norm_p1 = match.normalized_player1_name or match.player1_name.lower()
        norm_winner = match.normalized_winner_name or match.winner_name.lower()

        for name in (match.player1_name, match.player2_name):
            if name not in players:
                players[name] = _empty_player(name)
        players[match.player1_name]["match_ids"].append(match.id)
        if match.player2_name != match.player1_name:
            players[match.player2_name]["match_ids"].append(match.id)

        winner = players.get(match.winner_name)
        loser_name = match.player2_name if norm_winner == norm_p1 else match.player1_name
        loser = players[loser_name]
        if winner is None:
            continue

        if match.winner_name == match.player1_name:
            winner_bey, loser_bey = match.player1_beyblade, match.player2_beyblade
        else:
            winner_bey, loser_bey = match.player2_beyblade, match.player1_beyblade

        winner["matches"] += 1
        winner["wins"] += 1
        winner["total_points"] += points
        _bump(winner["finish_distribution"], outcome)
        _bump(winner["wins_by_finish"].setdefault(winner_bey, {}), outcome)
        _bump(winner["points_gained_by_bey"], winner_bey, points)
        record = _phase(winner, phase)
        record["wins"] += 1
        record["matches"] += 1
        record["points"] += points

        loser["matches"] += 1
        loser["losses"] += 1
        _bump(loser["finish_distribution"], outcome)
        _bump(loser["losses_by_finish"].setdefault(loser_bey, {}), outcome)
        _bump(loser["points_given_by_bey"], loser_bey, points)
        _phase(loser, phase)["matches"] += 1

    return MappingProxyType({name: _finalize(acc) for name, acc in players.items()})


def rank_players(stats: Iterable[PlayerStat]) -> list[PlayerStat]:
    """Rank by weighted win rate, best first."""
    return sorted(stats, key=lambda p: p.weighted_win_rate, reverse=True)


@dataclass(frozen=True)
class HeadToHead:
    player1: str
    player2: str
    total_matches: int
    player1_wins: int
    player2_wins: int

    @property
    def player1_win_rate(self) -> float:
        if self.total_matches == 0:
            return 0.0
        return self.player1_wins / self.total_matches * 100

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {**asdict(self), "player1_win_rate": self.player1_win_rate}


def head_to_head(matches: Iterable[MatchResult]) -> list[HeadToHead]:
    """Win counts per unordered player pair, sides in alphabetical order."""
    records: dict[tuple[str, str], list[int]] = {}
    for match in matches:
        if not match.winner_name or not match.player1_name or not match.player2_name:
            continue
        pair = tuple(sorted((match.player1_name, match.player2_name)))
        counts = records.setdefault(pair, [0, 0, 0])  # type: ignore[arg-type]
        counts[0] += 1
        if match.winner_name == pair[0]:
            counts[1] += 1
        elif match.winner_name == pair[1]:
            counts[2] += 1

    return [
        HeadToHead(pair[0], pair[1], total, p1_wins, p2_wins)
        for pair, (total, p1_wins, p2_wins) in records.items()
    ]
