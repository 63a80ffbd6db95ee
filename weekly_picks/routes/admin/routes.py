import logging

from flask import current_app, jsonify, request
from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError

from weekly_picks import db, get_schedule_provider
from weekly_picks.exceptions import ConflictError, NotFoundError, ValidationError
from weekly_picks.forms import get_json_body, validate_json_form
from weekly_picks.forms.groups import (
    CreateGroupCodeForm,
    CreateGroupForm,
    QuickSetupForm,
)
from weekly_picks.models import Game, Group, GroupCode
from weekly_picks.routes.admin import bp
from weekly_picks.routes.decorators import admin_required
from weekly_picks.utils.data_sync import DataSync

logger = logging.getLogger(__name__)


def _get_group_or_404(group_id):
    group = db.session.get(Group, group_id)
    if group is None:
        raise NotFoundError("Group not found")
    return group


def _ensure_code_available(code):
    if GroupCode.get_by_code(code) is not None:
        raise ConflictError("Group code already exists")


def _commit(conflict_message):
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(conflict_message)


@bp.route("/groups", methods=["GET"])
@admin_required
def list_groups():
    groups = Group.query.order_by(Group.id).all()
    return jsonify([group.to_dict() for group in groups])


@bp.route("/groups/<int:group_id>", methods=["GET"])
@admin_required
def get_group(group_id):
    group = _get_group_or_404(group_id)
    return jsonify(group.to_dict(include_members=True, include_codes=True))


@bp.route("/groups", methods=["POST"])
@admin_required
def create_group():
    form = validate_json_form(CreateGroupForm)

    group = Group(
        name=form.name.data,
        description=form.description.data or None,
        max_members=form.max_members.data,
    )
    db.session.add(group)
    _commit("Group could not be created")

    logger.info(f"Created group {group.name} (id={group.id})")
    return (
        jsonify({"message": "Group created successfully", "group": group.to_dict()}),
        201,
    )


@bp.route("/group-codes", methods=["POST"])
@admin_required
def create_group_code():
    form = validate_json_form(CreateGroupCodeForm)

    group = _get_group_or_404(form.group_id.data)
    _ensure_code_available(form.code.data)

    group_code = GroupCode(
        code=form.code.data,
        group_id=group.id,
        max_usage=form.max_usage.data,
        expires_at=form.expires_at.data,
    )
    db.session.add(group_code)
    _commit("Group code already exists")

    logger.info(f"Created group code {group_code.code} for group {group.name}")
    return (
        jsonify(
            {
                "message": "Group code created successfully",
                "groupCode": group_code.to_dict(),
            }
        ),
        201,
    )


@bp.route("/quick-setup", methods=["POST"])
@admin_required
def quick_setup():
    """Create a group together with its first invite code"""
    form = validate_json_form(QuickSetupForm)
    _ensure_code_available(form.code.data)

    group = Group(
        name=form.group_name.data,
        description=form.group_description.data or None,
        max_members=form.max_members.data,
    )
    db.session.add(group)
    db.session.flush()

    group_code = GroupCode(
        code=form.code.data,
        group_id=group.id,
        max_usage=form.max_usage.data,
    )
    db.session.add(group_code)
    _commit("Group code already exists")

    logger.info(f"Quick setup created group {group.name} with code {group_code.code}")
    return (
        jsonify(
            {
                "message": "Group and code created successfully",
                "group": group.to_dict(),
                "groupCode": group_code.to_dict(),
            }
        ),
        201,
    )


@bp.route("/schedule/populate", methods=["POST"])
@admin_required
def populate_schedule():
    """Store every regular-season game for a season (defaults to the current one)"""
    payload = request.get_json(silent=True) or {}
    provider = get_schedule_provider()

    season = payload.get("season") if isinstance(payload, dict) else None
    if season is None:
        season = provider.get_current_season()
    elif isinstance(season, bool) or not isinstance(season, int):
        raise ValidationError("Season must be a year")

    inserted = DataSync(provider).sync_season(season)
    return jsonify(
        {
            "message": f"Populated {inserted} games for the {season} season",
            "season": season,
            "gamesInserted": inserted,
            "totalGames": Game.query.count(),
        }
    )


@bp.route("/schedule", methods=["GET"])
@admin_required
def schedule_overview():
    """Stored and completed game counts per week"""
    completed = func.sum(case((Game.is_completed.is_(True), 1), else_=0))
    rows = (
        db.session.query(Game.week, func.count(Game.id), completed)
        .group_by(Game.week)
        .order_by(Game.week)
        .all()
    )

    weeks = [
        {"week": week, "games": int(games), "completed": int(done or 0)}
        for week, games, done in rows
    ]
    return jsonify(
        {
            "currentWeek": get_schedule_provider().get_current_week(),
            "totalGames": sum(w["games"] for w in weeks),
            "weeks": weeks,
        }
    )


@bp.route("/teams/<team>/record", methods=["GET"])
@admin_required
def team_record(team):
    """Win/loss/tie record from stored completed games, optionally through a week"""
    plays_in = (Game.home_team == team) | (Game.away_team == team)
    if not db.session.query(Game.query.filter(plays_in).exists()).scalar():
        raise NotFoundError("Team not found")

    week = request.args.get("week", type=int)
    if week is not None and not Game.is_valid_week(week):
        raise ValidationError("Invalid week number")

    query = Game.query.filter(Game.is_completed.is_(True), plays_in)
    if week is not None:
        query = query.filter(Game.week <= week)

    record = {"wins": 0, "losses": 0, "ties": 0}
    for game in query:
        if game.is_tie:
            record["ties"] += 1
        elif game.winner == team:
            record["wins"] += 1
        elif game.winner is not None:
            record["losses"] += 1

    return jsonify({"team": team, "throughWeek": week, **record})


@bp.route("/scheduler", methods=["GET"])
@admin_required
def scheduler_status():
    service = current_app.extensions["scheduler_service"]
    return jsonify(service.get_status())


@bp.route("/scheduler/run", methods=["POST"])
@admin_required
def run_scheduler():
    """Run one score update now, regardless of the game window"""
    payload = get_json_body() if request.data else {}
    force = payload.get("force", True) is not False

    service = current_app.extensions["scheduler_service"]
    result = service.force_sync() if force else service.run_score_update()

    if result is None:
        return jsonify({"message": "Score update skipped or failed", "result": None})
    return jsonify({"message": "Score update complete", "result": result})
