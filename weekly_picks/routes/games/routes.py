import logging

from flask import jsonify
from flask_login import login_required

from weekly_picks import get_schedule_provider
from weekly_picks.models import Game
from weekly_picks.routes.decorators import admin_required, valid_week
from weekly_picks.routes.games import bp
from weekly_picks.utils.data_sync import DataSync

logger = logging.getLogger(__name__)


@bp.route("/week/<int(signed=True):week>")
@login_required
@valid_week
def week_games(week):
    """Games for a week, fetched from the schedule provider on first access"""
    games = Game.get_games_for_week(week)

    if not games:
        provider = get_schedule_provider()
        season = provider.get_current_season()
        logger.info(f"No stored games for week {week}, syncing from provider")
        games = DataSync(provider).sync_week(season, week)

    return jsonify([game.to_dict() for game in games])


@bp.route("/current-week")
@login_required
def current_week():
    return jsonify({"week": get_schedule_provider().get_current_week()})


@bp.route("/update-scores/<int(signed=True):week>", methods=["POST"])
@admin_required
@valid_week
def update_scores(week):
    """Pull the latest scores for a week and write them onto stored games"""
    provider = get_schedule_provider()
    season = provider.get_current_season()

    fixtures = provider.update_game_scores(season, week)
    updated = DataSync(provider).apply_score_updates(fixtures)

    logger.info(f"Manual score update for week {week}: {updated} games changed")
    return jsonify(
        {
            "message": f"Updated {updated} games for week {week}",
            "week": week,
            "gamesUpdated": updated,
        }
    )
