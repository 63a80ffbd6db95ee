import logging

from sqlalchemy.exc import IntegrityError

from weekly_picks import db
from weekly_picks.models import Game
from weekly_picks.services.schedule_provider import REGULAR_SEASON_WEEKS

logger = logging.getLogger(__name__)


class DataSync:
    """
    Copies schedule provider fixtures into the game store.

    Fixtures are matched on ``external_id`` so fetching the same week again
    never duplicates games.
    """

    def __init__(self, provider):
        self.provider = provider

    def _insert_missing(self, fixtures):
        external_ids = [f.external_id for f in fixtures if f.external_id]
        existing = {
            external_id
            for (external_id,) in db.session.query(Game.external_id).filter(
                Game.external_id.in_(external_ids)
            )
        }

        inserted = 0
        for fixture in fixtures:
            if fixture.external_id in existing:
                continue
            db.session.add(Game.from_fixture(fixture))
            existing.add(fixture.external_id)
            inserted += 1
        return inserted

    def sync_week(self, season, week):
        """Insert the week's fixtures that are not stored yet, return the week's games"""
        fixtures = self.provider.get_weekly_schedule(season, week)

        try:
            inserted = self._insert_missing(fixtures)
            db.session.commit()
        except IntegrityError:
            # Another request stored the same fixtures first
            db.session.rollback()
            inserted = 0
        except Exception:
            db.session.rollback()
            logger.error(f"Error syncing week {week} games", exc_info=True)
            raise

        if inserted:
            logger.info(f"Inserted {inserted} games for {season} week {week}")

        return Game.get_games_for_week(week)

    def sync_season(self, season):
        """Insert every regular-season fixture, returns the number inserted"""
        fixtures = self.provider.get_full_season_schedule(season)

        try:
            inserted = self._insert_missing(fixtures)
            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.error(f"Error syncing {season} season", exc_info=True)
            raise

        logger.info(
            f"Synced {season} season: {inserted} new of {len(fixtures)} games "
            f"across {REGULAR_SEASON_WEEKS} weeks"
        )
        return inserted

    def apply_score_updates(self, fixtures):
        """Write fixture scores onto stored games, returns how many changed"""
        by_external_id = {f.external_id: f for f in fixtures if f.external_id}
        if not by_external_id:
            return 0

        games = Game.query.filter(Game.external_id.in_(list(by_external_id))).all()

        updates = 0
        try:
            for game in games:
                fixture = by_external_id[game.external_id]
                if game.update_score(
                    fixture.home_score, fixture.away_score, fixture.is_completed
                ):
                    updates += 1
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        missing = len(by_external_id) - len(games)
        if missing:
            logger.warning(f"{missing} score updates had no matching game")

        return updates
