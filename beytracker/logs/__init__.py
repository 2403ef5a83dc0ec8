"""Tournament logs blueprint: live feed, rounds, pairings and stadiums."""

from flask import Blueprint

bp = Blueprint("logs", __name__, url_prefix="/logs")

from . import cli, routes  # noqa: E402, F401
from .services import LogDashboard, StadiumService  # noqa: E402

__all__ = ["LogDashboard", "StadiumService", "cli", "routes"]
