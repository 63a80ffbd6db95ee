import logging

from flask import current_app, jsonify
from flask_login import current_user, login_required

from weekly_picks import get_schedule_provider
from weekly_picks.exceptions import ValidationError
from weekly_picks.forms import get_json_body
from weekly_picks.models import Game, Pick
from weekly_picks.routes.decorators import (
    add_no_store_headers,
    admin_required,
    valid_week,
)
from weekly_picks.routes.picks import bp
from weekly_picks.utils.deadline import DeadlineGate
from weekly_picks.utils.scoring import score_week

logger = logging.getLogger(__name__)


def _submission_week(payload, selections):
    """Week of a submission; every pick must name the same week"""
    weeks = [payload.get("weekNumber")]
    weeks.extend(selection.get("weekNumber") for selection in selections)
    weeks = [week for week in weeks if week is not None]

    if not weeks:
        raise ValidationError("weekNumber is required")
    if not all(Game.is_valid_week(week) for week in weeks):
        raise ValidationError("Invalid week number")
    if len(set(weeks)) > 1:
        raise ValidationError("All picks must be for the same week")

    return weeks[0]


@bp.route("/week/<int(signed=True):week>")
@login_required
@valid_week
@add_no_store_headers
def week_picks(week):
    picks = Pick.get_user_picks(current_user.id, week)
    return jsonify([pick.to_dict() for pick in picks])


@bp.route("", methods=["POST"])
@login_required
def submit_picks():
    payload = get_json_body()
    selections = payload.get("picks")

    if not isinstance(selections, list) or not selections:
        raise ValidationError("Invalid picks data")
    if not all(isinstance(selection, dict) for selection in selections):
        raise ValidationError("Invalid picks data")

    week = _submission_week(payload, selections)
    gate = DeadlineGate.from_config(current_app.config)

    picks = Pick.submit_week(current_user.id, week, selections, gate)

    return jsonify(
        {
            "message": "Picks submitted successfully",
            "picks": [pick.to_dict() for pick in picks],
        }
    )


@bp.route("/deadline")
@login_required
def deadline():
    """Deadline for the current week"""
    week = get_schedule_provider().get_current_week()
    gate = DeadlineGate.from_config(current_app.config)
    return jsonify(gate.status(week))


@bp.route("/score/<int(signed=True):week>", methods=["POST"])
@admin_required
@valid_week
def score(week):
    scored = score_week(week)
    return jsonify(
        {
            "message": f"Scored {scored} picks for week {week}",
            "scoredPicks": scored,
        }
    )
