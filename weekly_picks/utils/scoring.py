"""
Scoring Engine for the Weekly Picks application

Resolves pick correctness once a game is completed. A pick is scored at most
once: only picks whose ``is_correct`` is still NULL are touched. Games without
a winner (incomplete, missing scores, or tied) leave their picks unscored.

For aggregated statistics and leaderboards, see weekly_picks/utils/leaderboard.py
"""

import logging

from weekly_picks import db
from weekly_picks.models import Game, Pick
from weekly_picks.utils.cache_utils import invalidate_model_cache

logger = logging.getLogger(__name__)


def score_game(game):
    """
    Score the unscored picks of a single game.

    Returns:
        Number of picks that went from unscored to scored (not committed)
    """
    winning_side = game.winning_side
    if winning_side is None:
        if game.is_tie:
            logger.info(f"Game {game.id} ended in a tie, picks left unscored")
        return 0

    unscored = Pick.query.filter(Pick.game_id == game.id, Pick.is_correct.is_(None))

    correct = unscored.filter(Pick.selected_side == winning_side).update(
        {Pick.is_correct: True}, synchronize_session=False
    )
    incorrect = unscored.filter(Pick.selected_side != winning_side).update(
        {Pick.is_correct: False}, synchronize_session=False
    )

    return correct + incorrect


def score_week(week):
    """
    Score every completed game in a week.

    Returns:
        Total number of picks newly scored across the week
    """
    completed_games = Game.query.filter_by(week=week, is_completed=True).all()

    scored = 0
    try:
        for game in completed_games:
            scored += score_game(game)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    # Bulk updates bypass the identity map
    db.session.expire_all()

    if scored:
        invalidate_model_cache("Leaderboard")

    logger.info(
        f"Scored {scored} picks for {len(completed_games)} completed games in week {week}"
    )
    return scored
