import os
import secrets
import warnings

from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, ".env"))


class Config:
    # Generate a secure key if not provided (with a warning)
    _secret_key = os.environ.get("SECRET_KEY")

    if not _secret_key:
        _secret_key = secrets.token_urlsafe(32)
        warnings.warn(
            "SECRET_KEY not set! Using auto-generated key. "
            "Issued auth tokens will stop verifying on app restart. "
            "Run 'python3 generate_secrets.py' to generate secure keys.",
            UserWarning,
        )

    SECRET_KEY = _secret_key

    # Database configuration - built from environment at initialization
    def __init__(self):
        """Initialize configuration with dynamic database URI"""
        self.SQLALCHEMY_DATABASE_URI = self._build_database_uri()

    def _build_database_uri(self):
        """Build database URI from environment variables"""
        database_url = os.environ.get("DATABASE_URL")

        if database_url:
            return database_url

        db_type = os.environ.get("DB_TYPE", "sqlite")

        if db_type.lower() == "postgresql":
            db_host = os.environ.get("DB_HOST") or "localhost"
            db_port = os.environ.get("DB_PORT") or "5432"
            db_name = os.environ.get("DB_NAME") or "weekly_picks_db"
            db_user = os.environ.get("DB_USER") or "picks_user"
            db_password = os.environ.get("DB_PASSWORD") or "picks_password"

            return f"postgresql+psycopg://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"
        else:
            # Default to SQLite for development
            return "sqlite:///" + os.path.join(basedir, "app.db")

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Startup database connection retries
    DB_CONNECT_RETRIES = int(os.environ.get("DB_CONNECT_RETRIES") or 10)
    DB_CONNECT_DELAY = float(os.environ.get("DB_CONNECT_DELAY") or 5)

    # Schedule feed configuration
    NFL_API_KEY = os.environ.get("NFL_API_KEY")
    NFL_API_BASE_URL = (
        os.environ.get("NFL_API_BASE_URL") or "https://api.sportsdata.io/v3/nfl"
    )

    # Season and deadline settings
    SEASON_START_DATE = os.environ.get("SEASON_START_DATE", "2025-09-08")
    TIMEZONE = os.environ.get("TIMEZONE", "America/Chicago")
    PICKS_DEADLINE_HOUR = int(os.environ.get("PICKS_DEADLINE_HOUR") or 12)

    # Authentication
    AUTH_TOKEN_MAX_AGE = int(
        os.environ.get("AUTH_TOKEN_MAX_AGE") or 7 * 24 * 3600
    )  # 7 days
    ADMIN_API_KEY = os.environ.get("ADMIN_API_KEY")

    # Forms are posted as JSON by token-authenticated clients
    WTF_CSRF_ENABLED = False

    # Caching configuration
    CACHE_REDIS_URL = os.environ.get("CACHE_REDIS_URL")
    CACHE_TYPE = os.environ.get(
        "CACHE_TYPE", "RedisCache" if CACHE_REDIS_URL else "SimpleCache"
    )
    CACHE_DEFAULT_TIMEOUT = int(
        os.environ.get("CACHE_DEFAULT_TIMEOUT", 300)
    )  # 5 minutes
    CACHE_KEY_PREFIX = "weekly_picks:"

    # Rate limiting: fixed quota per client address
    RATELIMIT_DEFAULT = os.environ.get("RATELIMIT_DEFAULT", "100 per 15 minutes")
    RATELIMIT_STORAGE_URI = (
        os.environ.get("RATELIMIT_STORAGE_URI")
        or os.environ.get("REDIS_URL")
        or "memory://"
    )
    RATELIMIT_HEADERS_ENABLED = True

    # Scheduler configuration
    SCHEDULER_ENABLED = os.environ.get("SCHEDULER_ENABLED", "True").lower() == "true"

    # Logging configuration
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_TO_CONSOLE = os.environ.get("LOG_TO_CONSOLE", "True").lower() == "true"
    LOG_TO_FILE = os.environ.get("LOG_TO_FILE", "True").lower() == "true"
    LOG_DIR = os.environ.get("LOG_DIR", "logs")

    # Environment detection
    FLASK_ENV = os.environ.get("FLASK_ENV", "development")
    DEBUG = FLASK_ENV == "development"
    TESTING = False


class DevelopmentConfig(Config):
    """Development configuration with helpful defaults"""

    DEBUG = True
    SQLALCHEMY_ECHO = os.environ.get("SQLALCHEMY_ECHO", "False").lower() == "true"


class ProductionConfig(Config):
    """Production configuration with security focus"""

    DEBUG = False
    FLASK_ENV = "production"

    # In production, require explicit environment variables
    def __init__(self):
        super().__init__()  # Call parent __init__ to build database URI

        if not os.environ.get("SECRET_KEY"):
            warnings.warn(
                "PRODUCTION WARNING: SECRET_KEY not explicitly set! "
                "Using auto-generated key is not recommended for production.",
                UserWarning,
            )
        if not os.environ.get("ADMIN_API_KEY"):
            warnings.warn(
                "PRODUCTION WARNING: ADMIN_API_KEY not set! "
                "Admin endpoints are only reachable by admin users.",
                UserWarning,
            )


class TestingConfig(Config):
    """Testing configuration"""

    TESTING = True
    DEBUG = False
    FLASK_ENV = "testing"
    ADMIN_API_KEY = "test-admin-key"
    NFL_API_KEY = None
    CACHE_TYPE = "NullCache"
    RATELIMIT_ENABLED = False
    SCHEDULER_ENABLED = False
    LOG_TO_FILE = False
    LOG_LEVEL = "WARNING"

    def _build_database_uri(self):
        return "sqlite:///:memory:"


# Configuration mapping
config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
