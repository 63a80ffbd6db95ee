from flask import Blueprint

bp = Blueprint("admin", __name__)

from weekly_picks.routes.admin import routes  # noqa: F401, E402
