"""Tournament overview: combo leaderboard, finish mix and points ranking."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from typing import Any

from beytracker.match.models import MatchResult

from .players import finish_label, weighted_win_rate


@dataclass
class ComboStat:
    """A combo as piloted by one player."""

    combo: str
    player: str
    blade_line: str = "Unknown"
    wins: int = 0
    losses: int = 0
    total_points: int = 0
    finish_distribution: dict[str, int] = field(default_factory=dict)

    @property
    def total_matches(self) -> int:
        return self.wins + self.losses

    @property
    def win_rate(self) -> float:
        if self.total_matches == 0:
            return 0.0
        return self.wins / self.total_matches * 100

    @property
    def weighted_win_rate(self) -> float:
        return weighted_win_rate(self.wins, self.total_matches)

    @property
    def avg_points_per_match(self) -> float:
        if self.total_matches == 0:
            return 0.0
        return self.total_points / self.total_matches

    @property
    def combo_score(self) -> float:
        return self.weighted_win_rate * (self.avg_points_per_match / 3) * 100

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            **asdict(self),
            "total_matches": self.total_matches,
            "win_rate": self.win_rate,
            "weighted_win_rate": self.weighted_win_rate,
            "avg_points_per_match": self.avg_points_per_match,
            "combo_score": self.combo_score,
        }


def _complete(matches: Iterable[MatchResult]) -> Iterable[MatchResult]:
    for match in matches:
        if match.winner_name and match.player1_name and match.player2_name:
            yield match


def _sides(match: MatchResult) -> tuple[tuple[str, str, str | None], ...]:
    return (
        (match.player1_name, match.player1_beyblade, match.player1_blade_line),
        (match.player2_name, match.player2_beyblade, match.player2_blade_line),
    )


def combo_stats(matches: Iterable[MatchResult]) -> list[ComboStat]:
    """Per combo and player, best combo score first.

    Only the winning side collects the recorded ``points_awarded``.
    """
    stats: dict[tuple[str, str], ComboStat] = {}
    for match in _complete(matches):
        outcome = finish_label(match.outcome)
        for name, combo, blade_line in _sides(match):
            stat = stats.get((combo, name))
            if stat is None:
                stat = ComboStat(combo=combo, player=name, blade_line=blade_line or "Unknown")
                stats[(combo, name)] = stat
            stat.finish_distribution[outcome] = stat.finish_distribution.get(outcome, 0) + 1
            if match.winner_name == name:
                stat.wins += 1
                stat.total_points += match.points_awarded or 0
            else:
                stat.losses += 1
    return sorted(stats.values(), key=lambda s: s.combo_score, reverse=True)


def finish_distribution(matches: Iterable[MatchResult]) -> list[dict[str, Any]]:
    """How often each finish occurred, most common first."""
    counts: dict[str, int] = {}
    for match in matches:
        label = finish_label(match.outcome)
        counts[label] = counts.get(label, 0) + 1
    return [
        {"name": name, "value": count}
        for name, count in sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    ]


def points_ranking(matches: Iterable[MatchResult]) -> list[dict[str, Any]]:
    """Players by total points, then wins, then win rate."""
    players: dict[str, dict[str, Any]] = {}
    for match in _complete(matches):
        for name, _, _ in _sides(match):
            player = players.setdefault(
                name, {"name": name, "matches": 0, "wins": 0, "losses": 0, "total_points": 0}
            )
            player["matches"] += 1
            if match.winner_name == name:
                player["wins"] += 1
                player["total_points"] += match.points_awarded or 0
            else:
                player["losses"] += 1

    for player in players.values():
        player["win_rate"] = player["wins"] / player["matches"] * 100
    ranked = sorted(
        players.values(),
        key=lambda p: (p["total_points"], p["wins"], p["win_rate"]),
        reverse=True,
    )
    return [{**player, "rank": i} for i, player in enumerate(ranked, start=1)]
