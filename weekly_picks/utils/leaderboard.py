"""
Group leaderboards and per-user accuracy.

Only scored picks (``is_correct`` not NULL) count. Rankings are restricted to
the members of one group; ties on correct picks are broken by user id.
"""

from sqlalchemy import case, func

from weekly_picks import db
from weekly_picks.models import Pick, User
from weekly_picks.utils.cache_utils import cached_query


def accuracy(correct, picks):
    """Whole-number percentage, rounding halves up"""
    if not picks:
        return 0
    return int(100 * correct / picks + 0.5)


def _correct_sum():
    return func.coalesce(func.sum(case((Pick.is_correct.is_(True), 1), else_=0)), 0)


def _ranked_rows(group_id, week=None):
    correct = _correct_sum().label("correct")
    picks = func.count(Pick.id).label("picks")

    query = (
        db.session.query(User.id, User.username, picks, correct)
        .join(Pick, Pick.user_id == User.id)
        .filter(User.group_id == group_id, Pick.is_correct.isnot(None))
    )
    if week is not None:
        query = query.filter(Pick.week == week)

    return (
        query.group_by(User.id, User.username)
        .order_by(correct.desc(), User.id.asc())
        .all()
    )


@cached_query("Leaderboard", timeout=300)
def season_leaderboard(group_id):
    """Season standings for a group"""
    return [
        {
            "userId": row.id,
            "username": row.username,
            "totalCorrect": int(row.correct),
            "totalPicks": int(row.picks),
        }
        for row in _ranked_rows(group_id)
    ]


@cached_query("Leaderboard", timeout=300)
def weekly_leaderboard(group_id, week):
    """Standings for a single week; totalCorrect mirrors weeklyCorrect"""
    return [
        {
            "userId": row.id,
            "username": row.username,
            "totalCorrect": int(row.correct),
            "weeklyCorrect": int(row.correct),
            "weeklyPicks": int(row.picks),
        }
        for row in _ranked_rows(group_id, week)
    ]


@cached_query("Leaderboard", timeout=300)
def user_stats(user_id):
    """Overall and per-week accuracy for a user's scored picks"""
    correct = _correct_sum().label("correct")
    picks = func.count(Pick.id).label("picks")

    weekly_rows = (
        db.session.query(Pick.week, picks, correct)
        .filter(Pick.user_id == user_id, Pick.is_correct.isnot(None))
        .group_by(Pick.week)
        .order_by(Pick.week.asc())
        .all()
    )

    weekly = [
        {
            "week": row.week,
            "picks": int(row.picks),
            "correct": int(row.correct),
            "accuracy": accuracy(int(row.correct), int(row.picks)),
        }
        for row in weekly_rows
    ]

    total_picks = sum(w["picks"] for w in weekly)
    total_correct = sum(w["correct"] for w in weekly)

    return {
        "userId": user_id,
        "overall": {
            "totalPicks": total_picks,
            "totalCorrect": total_correct,
            "accuracy": accuracy(total_correct, total_picks),
        },
        "weekly": weekly,
    }
