from flask import Blueprint

bp = Blueprint("leaderboard", __name__)

from weekly_picks.routes.leaderboard import routes  # noqa: F401, E402
