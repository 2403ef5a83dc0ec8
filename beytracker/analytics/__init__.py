"""Tournament analytics blueprint: players, matchups and overview."""

from flask import Blueprint

bp = Blueprint("analytics", __name__, url_prefix="/analytics")

from . import routes  # noqa: E402, F401
