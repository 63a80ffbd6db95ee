from datetime import datetime, timezone

from weekly_picks import db
from weekly_picks.models.pick_side import PickSide

MIN_WEEK = 1
MAX_WEEK = 18


class Game(db.Model):
    __tablename__ = "games"

    id = db.Column(db.Integer, primary_key=True)
    week = db.Column(db.Integer, nullable=False)

    # Teams
    home_team = db.Column(db.String(100), nullable=False)
    away_team = db.Column(db.String(100), nullable=False)

    # Game timing (stored as naive UTC)
    game_time = db.Column(db.DateTime, nullable=False)

    # Scores
    home_score = db.Column(db.Integer)
    away_score = db.Column(db.Integer)

    # Game status
    is_completed = db.Column(db.Boolean, default=False, nullable=False)

    # Feed identifier used for idempotent upserts
    external_id = db.Column(db.String(50), unique=True, index=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    picks = db.relationship(
        "Pick", backref="game", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.Index("idx_game_week", "week"),
        db.Index("idx_game_time", "game_time"),
        db.Index("idx_game_completed", "is_completed"),
        db.CheckConstraint("week BETWEEN 1 AND 18", name="valid_week"),
        db.CheckConstraint("home_team != away_team", name="different_teams"),
    )

    def __repr__(self):
        return f"<Game {self.away_team} @ {self.home_team} Week {self.week}>"

    @staticmethod
    def is_valid_week(week):
        if isinstance(week, bool) or not isinstance(week, int):
            return False
        return MIN_WEEK <= week <= MAX_WEEK

    @property
    def winning_side(self):
        """Side that won, None if not completed, scores missing or tied"""
        if not self.is_completed or self.home_score is None or self.away_score is None:
            return None
        if self.home_score > self.away_score:
            return PickSide.HOME
        if self.away_score > self.home_score:
            return PickSide.AWAY
        return None

    @property
    def winner(self):
        """Name of the winning team (None if undecided or tie)"""
        side = self.winning_side
        return self.team_for_side(side) if side else None

    @property
    def is_tie(self):
        return (
            bool(self.is_completed)
            and self.home_score is not None
            and self.home_score == self.away_score
        )

    def team_for_side(self, side):
        return self.home_team if side is PickSide.HOME else self.away_team

    def side_for_team(self, team_name):
        """Side a team name plays on in this game, None if it is not playing"""
        if team_name == self.home_team:
            return PickSide.HOME
        if team_name == self.away_team:
            return PickSide.AWAY
        return None

    def update_score(self, home_score, away_score, is_completed):
        """Apply a score update, returns True if anything changed"""
        changed = (
            self.home_score != home_score
            or self.away_score != away_score
            or bool(self.is_completed) != bool(is_completed)
        )
        if changed:
            self.home_score = home_score
            self.away_score = away_score
            self.is_completed = bool(is_completed)
        return changed

    @staticmethod
    def from_fixture(fixture):
        game_time = fixture.game_time
        if game_time.tzinfo is not None:
            game_time = game_time.astimezone(timezone.utc).replace(tzinfo=None)

        return Game(
            external_id=fixture.external_id,
            week=fixture.week,
            home_team=fixture.home_team,
            away_team=fixture.away_team,
            game_time=game_time,
            home_score=fixture.home_score,
            away_score=fixture.away_score,
            is_completed=fixture.is_completed,
        )

    @staticmethod
    def get_games_for_week(week):
        """All games for a week in kickoff order"""
        return Game.query.filter_by(week=week).order_by(Game.game_time, Game.id).all()

    def to_dict(self):
        """Convert game to dictionary for API responses"""
        game_time = self.game_time
        if game_time is not None and game_time.tzinfo is None:
            game_time = game_time.replace(tzinfo=timezone.utc)

        return {
            "id": self.id,
            "weekNumber": self.week,
            "homeTeam": self.home_team,
            "awayTeam": self.away_team,
            "homeScore": self.home_score,
            "awayScore": self.away_score,
            "gameTime": game_time.isoformat() if game_time else None,
            "isCompleted": bool(self.is_completed),
            "externalId": self.external_id,
            "winner": self.winner,
        }
