"""Group match results into rounds, pairings and per-stadium views.

Every function here is a pure reduction: it starts from an empty accumulator,
never mutates its input and returns fresh records, so recomputing a view from
the same rows always yields the same result.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, NamedTuple

from beytracker.core.constants import DRAW, LIVE_FEED_LIMIT
from beytracker.match.models import MatchResult, Stadium


class RoundKey(NamedTuple):
    """Identity of a round. Player order matters here."""

    player1: str
    player2: str
    tournament_officer: str
    round_number: int


@dataclass(frozen=True)
class RoundResult:
    """All matches two players played in one round at one officer's stadium."""

    key: RoundKey
    matches: tuple[MatchResult, ...]
    player1_score: int
    player2_score: int
    winner: str
    start_time: datetime.datetime
    end_time: datetime.datetime

    @property
    def player1(self) -> str:
        return self.key.player1

    @property
    def player2(self) -> str:
        return self.key.player2

    @property
    def tournament_officer(self) -> str:
        return self.key.tournament_officer

    @property
    def round_number(self) -> int:
        return self.key.round_number

    @property
    def round_key(self) -> str:
        return f"{self.player1}_vs_{self.player2}_{self.tournament_officer}_{self.round_number}"

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)

    @property
    def duration(self) -> str:
        return f"{self.duration_minutes}m"

    @property
    def is_draw(self) -> bool:
        return self.winner == DRAW

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "round_key": self.round_key,
            "player1": self.player1,
            "player2": self.player2,
            "tournament_officer": self.tournament_officer,
            "round_number": self.round_number,
            "matches": [m.to_dict() for m in self.matches],
            "player1_score": self.player1_score,
            "player2_score": self.player2_score,
            "winner": self.winner,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration": self.duration,
        }


@dataclass(frozen=True)
class PlayerPairing:
    """Head-to-head summary of two players regardless of round or officer."""

    player1: str
    player2: str
    total_matches: int
    player1_wins: int
    player2_wins: int
    player1_score: int
    player2_score: int
    last_played: datetime.datetime
    rounds: tuple[RoundResult, ...]

    @property
    def key(self) -> str:
        return pairing_key(self.player1, self.player2)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "key": self.key,
            "player1": self.player1,
            "player2": self.player2,
            "total_matches": self.total_matches,
            "player1_wins": self.player1_wins,
            "player2_wins": self.player2_wins,
            "player1_score": self.player1_score,
            "player2_score": self.player2_score,
            "last_played": self.last_played.isoformat(),
            "rounds": [r.round_key for r in self.rounds],
        }


def decide_winner(player1: str, player2: str, player1_score: int, player2_score: int) -> str:
    """Return the player with the strictly higher score, or the draw marker."""
    if player1_score > player2_score:
        return player1
    if player2_score > player1_score:
        return player2
    return DRAW


def group_rounds(matches: Iterable[MatchResult]) -> Mapping[RoundKey, RoundResult]:
    """Partition match results into rounds keyed by players, officer and round.

    A match whose winner is neither player stays in its round but scores for
    nobody.
    """
    grouped: dict[RoundKey, list[MatchResult]] = {}
    for match in matches:
        key = RoundKey(
            match.player1_name,
            match.player2_name,
            match.tournament_officer,
            match.round_number,
        )
        grouped.setdefault(key, []).append(match)

    rounds = {}
    for key, round_matches in grouped.items():
        p1_score = p2_score = 0
        for match in round_matches:
            points = match.points_awarded or 0
            if match.winner_name == key.player1:
                p1_score += points
            elif match.winner_name == key.player2:
                p2_score += points

        times = [m.submitted_at for m in round_matches]
        rounds[key] = RoundResult(
            key=key,
            matches=tuple(round_matches),
            player1_score=p1_score,
            player2_score=p2_score,
            winner=decide_winner(key.player1, key.player2, p1_score, p2_score),
            start_time=min(times),
            end_time=max(times),
        )
    return MappingProxyType(rounds)


def sort_rounds(rounds: Iterable[RoundResult]) -> list[RoundResult]:
    """Most recently ended round first."""
    return sorted(rounds, key=lambda r: r.end_time, reverse=True)


def pairing_key(player_a: str, player_b: str) -> str:
    """Order-insensitive key for two player names."""
    first, second = sorted((player_a, player_b))
    return f"{first}_vs_{second}"


def group_pairings(
    matches: Iterable[MatchResult], rounds: Iterable[RoundResult] = ()
) -> Mapping[str, PlayerPairing]:
    """Aggregate head-to-head totals per unordered pair of players.

    Wins and points are attributed to the alphabetically sorted names, not to
    the order the players were recorded in.
    """
    totals: dict[str, dict[str, Any]] = {}
    for match in matches:
        first, second = sorted((match.player1_name, match.player2_name))
        key = f"{first}_vs_{second}"
        if key not in totals:
            totals[key] = {
                "player1": first,
                "player2": second,
                "total_matches": 0,
                "player1_wins": 0,
                "player2_wins": 0,
                "player1_score": 0,
                "player2_score": 0,
                "last_played": match.submitted_at,
            }
        t = totals[key]
        t["total_matches"] += 1
        if match.winner_name == first:
            t["player1_wins"] += 1
            t["player1_score"] += match.points_awarded or 0
        elif match.winner_name == second:
            t["player2_wins"] += 1
            t["player2_score"] += match.points_awarded or 0
        if match.submitted_at > t["last_played"]:
            t["last_played"] = match.submitted_at

    rounds_by_pair: dict[str, list[RoundResult]] = {}
    for round_result in rounds:
        key = pairing_key(round_result.player1, round_result.player2)
        rounds_by_pair.setdefault(key, []).append(round_result)

    return MappingProxyType({
        key: PlayerPairing(rounds=tuple(rounds_by_pair.get(key, [])), **t)
        for key, t in totals.items()
    })


def sort_pairings(pairings: Iterable[PlayerPairing]) -> list[PlayerPairing]:
    """Most recently played pairing first."""
    return sorted(pairings, key=lambda p: p.last_played, reverse=True)


def live_feed(
    matches: Iterable[MatchResult], limit: int = LIVE_FEED_LIMIT
) -> list[MatchResult]:
    """Newest round, phase and match first, capped at ``limit`` rows."""
    ordered = sorted(
        matches,
        key=lambda m: (
            m.round_number,
            m.phase_number or 0,
            m.match_number,
            m.submitted_at,
        ),
        reverse=True,
    )
    return ordered[:limit]


def available_officers(stadiums: Iterable[Stadium]) -> list[str]:
    """Distinct assigned officers in stadium order."""
    officers: list[str] = []
    for stadium in stadiums:
        if stadium.assigned_officer and stadium.assigned_officer not in officers:
            officers.append(stadium.assigned_officer)
    return officers


def stadium_rounds(rounds: Iterable[RoundResult], officer: str | None) -> list[RoundResult]:
    """Rounds adjudicated by a stadium's officer, in the order given."""
    if not officer:
        return []
    return [r for r in rounds if r.tournament_officer == officer]


def stadium_totals(
    stadiums: Iterable[Stadium], rounds: Sequence[RoundResult], rounds_to_show: int
) -> dict[str, dict[str, int]]:
    """Summed scores of the latest ``rounds_to_show`` rounds per stadium."""
    totals = {}
    for stadium in stadiums:
        shown = stadium_rounds(rounds, stadium.assigned_officer)[: max(rounds_to_show, 0)]
        totals[stadium.id] = {
            "p1": sum(r.player1_score for r in shown),
            "p2": sum(r.player2_score for r in shown),
        }
    return totals


def unmatched_officer_matches(
    matches: Iterable[MatchResult],
    stadiums: Iterable[Stadium],
    officers: Iterable[str] = (),
) -> list[MatchResult]:
    """Matches submitted by an officer that no stadium or roster knows about."""
    valid = set(available_officers(stadiums)) | {o for o in officers if o}
    return [
        m for m in matches if m.tournament_officer and m.tournament_officer not in valid
    ]
