import os
import secrets
import warnings

from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, ".env"))


def _env_bool(name, default):
    return os.environ.get(name, str(default)).strip().lower() in ("1", "true", "yes")


def _env_int(name, default):
    value = os.environ.get(name)
    return int(value) if value else default


def _secret(name, consequence):
    """Read a secret, generating a throwaway one (with a warning) if unset"""
    value = os.environ.get(name)
    if value:
        return value

    warnings.warn(
        f"{name} not set! Using auto-generated key. {consequence} "
        "Run 'python3 generate_secrets.py' to generate secure keys.",
        UserWarning,
    )
    return secrets.token_urlsafe(32)


class Config:
    SECRET_KEY = _secret("SECRET_KEY", "Sessions will not survive a restart.")

    # Bearer tokens
    JWT_SECRET_KEY = _secret("JWT_SECRET_KEY", "Issued tokens will stop working on restart.")
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRATION_HOURS = _env_int("JWT_EXPIRATION_HOURS", 168)

    # Database
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    def __init__(self):
        self.SQLALCHEMY_DATABASE_URI = self._build_database_uri()

    def _build_database_uri(self):
        """DATABASE_URL wins; otherwise DB_TYPE picks SQLite or PostgreSQL"""
        database_url = os.environ.get("DATABASE_URL")
        if database_url:
            return database_url

        if os.environ.get("DB_TYPE", "sqlite").lower() != "postgresql":
            return "sqlite:///" + os.path.join(basedir, "survivor.db")

        return "postgresql+psycopg://{user}:{password}@{host}:{port}/{name}".format(
            user=os.environ.get("DB_USER") or "survivor_user",
            password=os.environ.get("DB_PASSWORD") or "survivor_password",
            host=os.environ.get("DB_HOST") or "localhost",
            port=os.environ.get("DB_PORT") or "5432",
            name=os.environ.get("DB_NAME") or "survivor_db",
        )

    # Civil timezone of the league, used for timestamps and display
    TIMEZONE = os.environ.get("TIMEZONE", "America/Mexico_City")

    # Team list cache; leaderboards are never cached
    CACHE_TYPE = os.environ.get("CACHE_TYPE", "SimpleCache")
    CACHE_DEFAULT_TIMEOUT = _env_int("CACHE_DEFAULT_TIMEOUT", 300)
    CACHE_REDIS_URL = os.environ.get("CACHE_REDIS_URL", "redis://localhost:6379/0")
    CACHE_KEY_PREFIX = "survivor:"

    # Rate limiting
    RATELIMIT_ENABLED = _env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_TO_CONSOLE = _env_bool("LOG_TO_CONSOLE", True)
    LOG_TO_FILE = _env_bool("LOG_TO_FILE", True)
    LOG_DIR = os.environ.get("LOG_DIR", os.path.join(basedir, "logs"))

    DEBUG = False
    TESTING = False


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_ECHO = _env_bool("SQLALCHEMY_ECHO", False)


class ProductionConfig(Config):
    """Production configuration; secrets must come from the environment"""

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")

    def __init__(self):
        super().__init__()

        for name in ("SECRET_KEY", "JWT_SECRET_KEY"):
            if not os.environ.get(name):
                warnings.warn(
                    f"PRODUCTION WARNING: {name} not explicitly set!", UserWarning
                )
        if self.SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
            warnings.warn(
                "PRODUCTION WARNING: running on SQLite; set DATABASE_URL or DB_TYPE=postgresql",
                UserWarning,
            )


class TestingConfig(Config):
    TESTING = True
    CACHE_TYPE = "SimpleCache"
    RATELIMIT_ENABLED = False
    LOG_TO_FILE = False
    LOG_LEVEL = "WARNING"

    def _build_database_uri(self):
        return "sqlite:///:memory:"


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
