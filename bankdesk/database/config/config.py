from typing import Optional

from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """
    Application configuration settings loaded from environment variables
    or a `.env` file. Provides strongly typed access to environment values.
    """

    FRONTEND_URL: str = "http://localhost:5173"
    """Base URL of the frontend client application."""

    LOG_LEVEL: str = "INFO"
    """Root log level (e.g., `DEBUG`, `INFO`, `WARNING`)."""

    DB_DRIVER_NAME: str = "sqlite"
    """Database driver (e.g., `mysql+pymysql`, `postgresql`, `sqlite`)."""

    DB_USERNAME: Optional[str] = None
    """Database username credential."""

    DB_PASSWORD: Optional[str] = None
    """Database password credential."""

    DB_HOST: Optional[str] = None
    """Hostname or IP address of the database server."""

    DB_PORT: Optional[int] = None
    """Port of the database server."""

    DB_DATABASE_NAME: str = "bankdesk.db"
    """Name of the application’s database (a file path for sqlite)."""

    DB_CHARSET: str = "utf8mb4"
    """Connection charset negotiated with MySQL drivers."""

    DB_ECHO: bool = False
    """Echo emitted SQL to the log."""

    REDIS_URL: Optional[str] = None
    """Full Redis URL. Takes precedence over host/port when set."""

    REDIS_HOST: str = "localhost"
    """Hostname of the Redis server."""

    REDIS_PORT: int = 6379
    """Port of the Redis server."""

    REDIS_DB: int = 0
    """Redis logical database index."""

    REDIS_PASSWORD: Optional[str] = None
    """Redis password, if any."""

    REDIS_SOCKET_TIMEOUT: float = 2.0
    """Seconds before a Redis call is abandoned with a timeout."""

    CACHE_KEY_PREFIX: str = "bankdesk"
    """Namespace prepended to every cache key."""

    CACHE_DEFAULT_TTL_SECONDS: int = 300
    """Expiration applied when a cache write does not specify one."""

    SECRET_KEY: str = "change-me-in-production"
    """Secret key used for signing tokens."""

    ALGORITHM: str = "HS256"
    """Cryptographic algorithm used for JWT signing."""

    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    """Duration (in minutes) before access tokens expire."""

    REFRESH_TOKEN_EXPIRE_MINUTES: int = 1440
    """Duration (in minutes) before refresh tokens expire."""

    class Config:
        """
        Configuration for Pydantic settings. Loads values from `.env` file by default.
        """
        env_file = ".env"

    def database_url(self) -> URL:
        """
        Build the SQLAlchemy URL from the `DB_*` settings.

        MySQL drivers always receive an explicit `charset` query argument so
        that the client and server agree on a four-byte UTF-8 encoding;
        otherwise non-ASCII text is silently mangled on insert.
        """
        if self.DB_DRIVER_NAME.startswith("sqlite"):
            return URL.create(self.DB_DRIVER_NAME, database=self.DB_DATABASE_NAME)

        query = {}
        if self.DB_DRIVER_NAME.startswith("mysql"):
            query["charset"] = self.DB_CHARSET

        return URL.create(
            self.DB_DRIVER_NAME,
            username=self.DB_USERNAME,
            password=self.DB_PASSWORD,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_DATABASE_NAME,
            query=query,
        )


# Singleton instance of Settings, ready to be imported across the app
settings = Settings()
"""Defines a Settings object that contains the contents of the .env file"""
