import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from weekly_picks import db
from weekly_picks.exceptions import (
    ConflictError,
    DeadlineClosed,
    InvalidGame,
    InvalidSelection,
    ValidationError,
)
from weekly_picks.models.pick_side import PickSide

logger = logging.getLogger(__name__)


class Pick(db.Model):
    __tablename__ = "picks"

    id = db.Column(db.Integer, primary_key=True)

    # Pick identification
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    game_id = db.Column(db.Integer, db.ForeignKey("games.id"), nullable=False)
    week = db.Column(db.Integer, nullable=False)

    # Pick details: side is authoritative, team name is resolved from it
    selected_side = db.Column(
        db.Enum(
            PickSide,
            name="pick_side",
            values_callable=lambda sides: [side.value for side in sides],
        ),
        nullable=False,
    )
    selected_team = db.Column(db.String(100), nullable=False)

    # Result: None until scored, then set once
    is_correct = db.Column(db.Boolean)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint("user_id", "game_id", name="unique_user_game_pick"),
        db.Index("idx_pick_user_week", "user_id", "week"),
        db.Index("idx_pick_week", "week"),
        db.Index("idx_pick_game", "game_id"),
    )

    def __repr__(self):
        return f"<Pick user_id={self.user_id} game_id={self.game_id} team={self.selected_team}>"

    @property
    def is_scored(self):
        return self.is_correct is not None

    @staticmethod
    def _parse_game_id(raw):
        # Whole numbers only; floats like 1.7 must not round to a game
        if isinstance(raw, int) and not isinstance(raw, bool):
            return raw
        if isinstance(raw, str) and raw.strip().isdigit():
            return int(raw.strip())
        raise ValidationError("Invalid game id")

    @staticmethod
    def _resolve_side(game, selection):
        """Bind a submitted selection to one side of its game"""
        if selection.get("side") is not None:
            side = PickSide.parse(selection.get("side"))
            if side is None:
                raise InvalidSelection("Side must be 'home' or 'away'")
            return side

        team = selection.get("selectedTeam")
        if not isinstance(team, str) or not team.strip():
            raise ValidationError("Each pick needs a selected team")

        side = game.side_for_team(team.strip())
        if side is None:
            raise InvalidSelection(
                f"{team} is not playing in {game.away_team} @ {game.home_team}"
            )
        return side

    @staticmethod
    def submit_week(user_id, week, selections, gate, now=None):
        """Replace a user's picks for a week with a new set.

        selections is a list of dicts carrying ``gameId`` and either
        ``selectedTeam`` (one of the game's team names) or ``side``
        (``home``/``away``). Nothing is written unless every selection is
        valid; prior picks for the week that are not resubmitted are removed.
        """
        from .game import Game

        if not Game.is_valid_week(week):
            raise ValidationError("Invalid week number")

        if not selections:
            raise ValidationError("Invalid picks data")

        if not gate.is_open(week, now):
            raise DeadlineClosed(week)

        game_ids = [Pick._parse_game_id(s.get("gameId")) for s in selections]
        if len(set(game_ids)) != len(game_ids):
            raise ValidationError("Each game can only be picked once")

        games = {
            game.id: game
            for game in Game.query.filter(Game.id.in_(game_ids), Game.week == week)
        }
        if len(games) != len(game_ids):
            raise InvalidGame()

        new_picks = []
        for game_id, selection in zip(game_ids, selections):
            game = games[game_id]
            side = Pick._resolve_side(game, selection)
            new_picks.append(
                Pick(
                    user_id=user_id,
                    game_id=game_id,
                    week=week,
                    selected_side=side,
                    selected_team=game.team_for_side(side),
                )
            )

        try:
            deleted = Pick.query.filter_by(user_id=user_id, week=week).delete(
                synchronize_session=False
            )
            db.session.add_all(new_picks)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            logger.warning(
                f"Concurrent pick submission for user {user_id} week {week}"
            )
            raise ConflictError("Picks were changed by another request, try again")
        except Exception:
            db.session.rollback()
            raise

        logger.info(
            f"User {user_id} submitted {len(new_picks)} picks for week {week} "
            f"(replaced {deleted})"
        )
        return new_picks

    @staticmethod
    def get_user_picks(user_id, week):
        """A user's picks for a week in kickoff order"""
        from .game import Game

        return (
            Pick.query.join(Game)
            .filter(Pick.user_id == user_id, Pick.week == week)
            .order_by(Game.game_time, Game.id)
            .all()
        )

    def to_dict(self, include_game=True):
        """Convert pick to dictionary for API responses"""
        data = {
            "id": self.id,
            "userId": self.user_id,
            "weekNumber": self.week,
            "gameId": self.game_id,
            "side": self.selected_side.value if self.selected_side else None,
            "selectedTeam": self.selected_team,
            "isCorrect": self.is_correct,
            "submittedAt": self.created_at.isoformat() if self.created_at else None,
        }

        if include_game:
            data["game"] = self.game.to_dict() if self.game else None

        return data
