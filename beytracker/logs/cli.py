"""``flask logs`` commands."""

from __future__ import annotations

import threading

import click

from beytracker.core.constants import AUTO_REFRESH_SECONDS

from . import bp
from .services import LogDashboard, LogSnapshot


def format_snapshot(snapshot: LogSnapshot, max_rounds: int = 10) -> str:
    """Plain-text summary of a log snapshot."""
    if snapshot.is_empty:
        return "No matches recorded yet."

    lines = [f"{len(snapshot.matches)} matches, {len(snapshot.rounds)} rounds"]
    for r in snapshot.rounds[:max_rounds]:
        lines.append(
            f"  R{r.round_number} [{r.tournament_officer or '-'}] "
            f"{r.player1} {r.player1_score} - {r.player2_score} {r.player2} "
            f"-> {r.winner} ({r.duration})"
        )
    if snapshot.unmatched:
        lines.append(f"  {len(snapshot.unmatched)} matches from unassigned officers")
    return "\n".join(lines)


@bp.cli.command("watch")
@click.argument("tournament_id")
@click.option(
    "--interval",
    type=float,
    default=AUTO_REFRESH_SECONDS,
    show_default=True,
    help="Seconds between refreshes.",
)
@click.option("--once", is_flag=True, help="Print a single snapshot and exit.")
def watch(tournament_id: str, interval: float, once: bool) -> None:
    """Follow the round results of a tournament in the terminal."""
    with LogDashboard(tournament_id) as dashboard:
        dashboard.listeners.append(lambda s: click.echo(format_snapshot(s) + "\n"))
        dashboard.load()
        if once:
            return
        dashboard.start_auto_refresh(interval)
        try:
            threading.Event().wait()
        except KeyboardInterrupt:
            click.echo("Stopped.")
