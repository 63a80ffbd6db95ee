from flask import Blueprint

bp = Blueprint("main", __name__)

from weekly_picks.routes.main import routes  # noqa: F401, E402
