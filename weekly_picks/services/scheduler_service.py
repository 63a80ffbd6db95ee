"""
Weekly Picks Score Update Scheduler Service

Polls the schedule provider for final scores once an hour and scores picks
for the current week. Updates only run inside the game window (Thursday night
through Monday night, configured timezone). Every failure is logged and left
for the next hourly run.
"""

import atexit
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from weekly_picks import db
from weekly_picks.utils.data_sync import DataSync
from weekly_picks.utils.scoring import score_week
from weekly_picks.utils.timezone_utils import (
    convert_to_timezone,
    ensure_aware,
    resolve_timezone,
)

logger = logging.getLogger(__name__)

THURSDAY = 3
SUNDAY = 6
MONDAY = 0


def utc_now():
    return datetime.now(timezone.utc)


class GameWindow:
    """Thursday from 19:00, all of Sunday, all of Monday (local time)"""

    def __init__(self, timezone_name="America/Chicago", thursday_start_hour=19):
        self.tz = resolve_timezone(timezone_name)
        self.thursday_start_hour = thursday_start_hour

    def contains(self, now):
        local = convert_to_timezone(ensure_aware(now), self.tz)
        day = local.weekday()

        if day == THURSDAY:
            return local.hour >= self.thursday_start_hour
        return day in (SUNDAY, MONDAY)


class SchedulerService:
    """Runs the hourly score update on an APScheduler background scheduler"""

    JOB_ID = "hourly_score_update"

    def __init__(self, app=None, schedule_provider=None, clock=None, window=None):
        self.scheduler = None
        self.app = app
        self.provider = schedule_provider
        self.clock = clock or utc_now
        self.window = window
        self.is_running = False
        self.sync_stats = {
            "last_sync": None,
            "total_syncs": 0,
            "successful_syncs": 0,
            "failed_syncs": 0,
            "skipped_syncs": 0,
            "last_error": None,
            "games_updated": 0,
            "picks_scored": 0,
        }

        if app:
            self.init_app(app)

    def init_app(self, app):
        """Attach to a Flask app and start if enabled"""
        self.app = app
        if self.provider is None:
            self.provider = app.extensions["schedule_provider"]
        if self.window is None:
            self.window = GameWindow(app.config.get("TIMEZONE", "America/Chicago"))

        app.extensions["scheduler_service"] = self

        if app.config.get("TESTING", False) or not app.config.get(
            "SCHEDULER_ENABLED", True
        ):
            return

        self.scheduler = BackgroundScheduler(daemon=True, timezone="UTC")
        atexit.register(self.shutdown)
        self.start()

    def start(self):
        """Start the background scheduler"""
        if self.is_running:
            return

        try:
            self.scheduler.remove_all_jobs()
            self.scheduler.add_job(
                func=self.run_score_update,
                trigger=CronTrigger(minute=0),  # Top of every hour
                id=self.JOB_ID,
                name="Hourly Score Update",
                max_instances=1,
                coalesce=True,
                misfire_grace_time=300,
            )
            self.scheduler.start()
            self.is_running = True

            logger.info("Scheduler started successfully")

        except Exception as e:
            logger.error(f"Failed to start scheduler: {e}")
            raise

    def stop(self):
        """Stop the background scheduler"""
        if not self.is_running:
            return

        try:
            self.scheduler.shutdown(wait=False)
            self.is_running = False
            logger.info("Scheduler stopped")

        except Exception as e:
            logger.error(f"Error stopping scheduler: {e}")

    def shutdown(self):
        """Graceful shutdown"""
        self.stop()

    def run_score_update(self, force=False):
        """
        Pull final scores for the current week and score picks.

        Returns a summary dict, or None when skipped (outside the game window)
        or when the update failed.
        """
        now = self.clock()
        if not force and not self.window.contains(now):
            self.sync_stats["skipped_syncs"] += 1
            return None

        with self.app.app_context():
            try:
                season = self.provider.get_current_season(now)
                week = self.provider.get_current_week(now)
                logger.info(f"Updating scores for week {week}...")

                fixtures = self.provider.update_game_scores(season, week)
                games_updated = DataSync(self.provider).apply_score_updates(fixtures)
                picks_scored = score_week(week)

                self._update_stats(True, games_updated, picks_scored)
                logger.info(
                    f"Score update complete. Updated {games_updated} games, "
                    f"scored {picks_scored} picks."
                )
                return {
                    "season": season,
                    "week": week,
                    "gamesUpdated": games_updated,
                    "picksScored": picks_scored,
                }

            except Exception as e:
                db.session.rollback()
                self._update_stats(False)
                self.sync_stats["last_error"] = str(e)
                logger.error(f"Error in scheduled score update: {e}", exc_info=True)
                return None

    def force_sync(self):
        """Run a score update now, ignoring the game window"""
        logger.info("Forcing score update...")
        return self.run_score_update(force=True)

    def _update_stats(self, success, games_updated=0, picks_scored=0):
        """Update sync statistics"""
        self.sync_stats["last_sync"] = self.clock()
        self.sync_stats["total_syncs"] += 1

        if success:
            self.sync_stats["successful_syncs"] += 1
            self.sync_stats["games_updated"] += games_updated
            self.sync_stats["picks_scored"] += picks_scored
            self.sync_stats["last_error"] = None
        else:
            self.sync_stats["failed_syncs"] += 1

    def get_status(self):
        """Get scheduler status information"""
        jobs = []
        if self.scheduler:
            for job in self.scheduler.get_jobs():
                next_run = getattr(job, "next_run_time", None)
                jobs.append(
                    {
                        "id": job.id,
                        "name": job.name,
                        "nextRun": next_run.isoformat() if next_run else None,
                        "trigger": str(job.trigger),
                    }
                )

        stats = dict(self.sync_stats)
        if stats["last_sync"] is not None:
            stats["last_sync"] = stats["last_sync"].isoformat()

        return {
            "isRunning": self.is_running,
            "inGameWindow": self.window.contains(self.clock()) if self.window else None,
            "jobs": jobs,
            "stats": stats,
        }
