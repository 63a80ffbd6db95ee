from flask import Blueprint

bp = Blueprint("games", __name__)

from weekly_picks.routes.games import routes  # noqa: F401, E402
