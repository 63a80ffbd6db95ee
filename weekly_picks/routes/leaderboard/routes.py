from flask import jsonify
from flask_login import current_user, login_required

from weekly_picks import db
from weekly_picks.exceptions import NotFoundError
from weekly_picks.models import User
from weekly_picks.routes.decorators import valid_week
from weekly_picks.routes.leaderboard import bp
from weekly_picks.utils.leaderboard import (
    season_leaderboard,
    user_stats,
    weekly_leaderboard,
)


@bp.route("")
@login_required
def season():
    """Season standings for the caller's group"""
    return jsonify(season_leaderboard(current_user.group_id))


@bp.route("/week/<int(signed=True):week>")
@login_required
@valid_week
def week_standings(week):
    return jsonify(weekly_leaderboard(current_user.group_id, week))


@bp.route("/user/<int:user_id>/stats")
@login_required
def stats(user_id):
    user = db.session.get(User, user_id)
    # Members of other groups are reported as missing
    if user is None or user.group_id != current_user.group_id:
        raise NotFoundError("User not found")

    data = dict(user_stats(user.id))
    data["username"] = user.username
    return jsonify(data)
