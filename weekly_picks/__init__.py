import logging
import os
import sys
import time

from flask import Flask, jsonify, request
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from config import config

logger = logging.getLogger(__name__)

db = SQLAlchemy()
login_manager = LoginManager()
cache = Cache()
migrate = Migrate()


def get_real_ip():
    """
    Get the real client IP address, accounting for reverse proxies.
    Checks X-Forwarded-For, X-Real-IP, and falls back to remote_addr.
    """
    # X-Forwarded-For: client, proxy1, proxy2, ...
    if request.headers.get("X-Forwarded-For"):
        return request.headers.get("X-Forwarded-For").split(",")[0].strip()
    if request.headers.get("X-Real-IP"):
        return request.headers.get("X-Real-IP")
    return get_remote_address()


# Quota and storage come from RATELIMIT_DEFAULT / RATELIMIT_STORAGE_URI
limiter = Limiter(key_func=get_real_ip)


def create_app(config_name=None, schedule_provider=None):
    app = Flask(__name__)

    # Determine configuration
    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app.config.from_object(config[config_name]())

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    cache.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    # Setup logging
    from weekly_picks.utils.logging_config import setup_logging

    setup_logging(app)

    # One schedule provider per application, shared by routes and scheduler
    if schedule_provider is None:
        from weekly_picks.services.schedule_provider import ScheduleProvider

        schedule_provider = ScheduleProvider.from_config(app.config)
    app.extensions["schedule_provider"] = schedule_provider

    # Import and register blueprints
    from weekly_picks.routes.main import bp as main_bp

    app.register_blueprint(main_bp)

    from weekly_picks.routes.auth import bp as auth_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")

    from weekly_picks.routes.games import bp as games_bp

    app.register_blueprint(games_bp, url_prefix="/api/games")

    from weekly_picks.routes.picks import bp as picks_bp

    app.register_blueprint(picks_bp, url_prefix="/api/picks")

    from weekly_picks.routes.leaderboard import bp as leaderboard_bp

    app.register_blueprint(leaderboard_bp, url_prefix="/api/leaderboard")

    from weekly_picks.routes.admin import bp as admin_bp

    app.register_blueprint(admin_bp, url_prefix="/api/admin")

    # Register error handlers
    register_error_handlers(app)

    # Show configuration warnings
    show_config_warnings(app, config_name)

    # Create database tables once the database answers
    if not app.config.get("TESTING"):
        wait_for_database(app)
    with app.app_context():
        db.create_all()

    # Initialize and start background scheduler
    from weekly_picks.services.scheduler_service import SchedulerService

    scheduler_service = SchedulerService(schedule_provider=schedule_provider)
    scheduler_service.init_app(app)

    return app


def get_schedule_provider(app=None):
    """Schedule provider bound to the current (or given) application"""
    from flask import current_app

    app = app or current_app
    return app.extensions["schedule_provider"]


def wait_for_database(app, max_retries=None, delay=None):
    """Block until the database answers, exiting the process on failure"""
    max_retries = max_retries or app.config.get("DB_CONNECT_RETRIES", 10)
    delay = app.config.get("DB_CONNECT_DELAY", 5) if delay is None else delay

    for attempt in range(1, max_retries + 1):
        try:
            logger.info(f"Database connection attempt {attempt}/{max_retries}...")
            with app.app_context():
                db.session.execute(db.text("SELECT 1")).fetchone()
            logger.info("Database connection established successfully.")
            return True
        except OperationalError as e:
            logger.error(f"Database connection attempt {attempt} failed: {e}")
            if attempt == max_retries:
                logger.critical("Max retries reached. Unable to start server.")
                sys.exit(1)
            logger.info(f"Retrying in {delay} seconds...")
            time.sleep(delay)


def show_config_warnings(app, config_name):
    """Log configuration warnings and status"""
    logger.info(f"Weekly Picks starting with '{config_name}' configuration")

    if config_name == "production" and app.config.get("DEBUG"):
        logger.warning("DEBUG mode is enabled in production!")

    if not app.config.get("NFL_API_KEY"):
        logger.info("NFL_API_KEY not set - using synthetic schedule data")

    db_url = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if "sqlite" in db_url:
        logger.info(
            "Using SQLite database (%s)",
            "in-memory" if "memory" in db_url else "app.db file",
        )
    elif "postgresql" in db_url:
        logger.info("Using PostgreSQL database")
    else:
        logger.info(
            f"Using database: {db_url.split('://')[0] if '://' in db_url else 'Unknown'}"
        )


def register_error_handlers(app):
    """Register global error handlers"""
    from weekly_picks.exceptions import PicksError

    @app.after_request
    def after_request(response):
        # Add security headers to all responses
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"

        if not app.config.get("DEBUG") and not app.config.get("TESTING"):
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response

    @app.errorhandler(PicksError)
    def handle_picks_error(error):
        if error.status_code >= 500:
            app.logger.error(f"{error.message} - Path: {request.path}")
        else:
            app.logger.info(
                f"{type(error).__name__}: {error.message} - Path: {request.path}"
            )
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({"message": "Route not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return jsonify({"message": "Method not allowed"}), 405

    @app.errorhandler(400)
    def bad_request_error(error):
        app.logger.warning(
            f"400 Bad Request: {str(error)} - Path: {request.path} - Method: {request.method}"
        )
        return jsonify({"message": "Bad request"}), 400

    @app.errorhandler(429)
    def too_many_requests_error(error):
        return (
            jsonify(
                {"message": "Too many requests from this IP, please try again later."}
            ),
            429,
        )

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        original = getattr(error, "original_exception", None) or error
        app.logger.error(
            f"Unhandled error on {request.method} {request.path}: {original}",
            exc_info=original if not isinstance(original, HTTPException) else None,
        )
        payload = {"message": "Something went wrong!"}
        if app.config.get("FLASK_ENV") != "production":
            payload["error"] = str(original)
        return jsonify(payload), 500


from weekly_picks import models  # noqa: F401, E402 - imported for model registration
