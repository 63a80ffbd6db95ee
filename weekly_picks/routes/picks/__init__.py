from flask import Blueprint

bp = Blueprint("picks", __name__)

from weekly_picks.routes.picks import routes  # noqa: F401, E402
