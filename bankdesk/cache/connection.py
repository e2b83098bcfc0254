"""
Redis connection management.

Handles connection setup from application settings and exposes a lazily
connected ``redis.Redis`` client.
"""

import logging
from typing import Optional

import redis

from bankdesk.database.config.config import Settings, settings as default_settings
from bankdesk.exceptions import CacheUnavailableError

logger = logging.getLogger(__name__)


class RedisConnection:
    """Redis connection manager for the ephemeral cache."""

    def __init__(self, config: Settings = default_settings, client: Optional[redis.Redis] = None):
        self.config = config
        self._client = client

    def connect(self, verify: bool = True) -> redis.Redis:
        """
        Establish the Redis connection.

        With ``verify`` the server is pinged once; otherwise connectivity
        problems surface on the first command instead.
        """
        if self._client is None:
            if self.config.REDIS_URL:
                client = redis.from_url(
                    self.config.REDIS_URL,
                    decode_responses=True,
                    socket_timeout=self.config.REDIS_SOCKET_TIMEOUT,
                )
            else:
                client = redis.Redis(
                    host=self.config.REDIS_HOST,
                    port=self.config.REDIS_PORT,
                    db=self.config.REDIS_DB,
                    password=self.config.REDIS_PASSWORD,
                    socket_timeout=self.config.REDIS_SOCKET_TIMEOUT,
                    decode_responses=True,
                )
            if verify:
                self._ping(client)
            logger.info("Redis client configured")
            self._client = client

        return self._client

    @staticmethod
    def _ping(client: redis.Redis):
        try:
            client.ping()
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise CacheUnavailableError(f"cache backend unreachable: {e}") from e
        logger.info("Redis connection established successfully")

    def disconnect(self):
        """Close Redis connection."""
        if self._client:
            self._client.close()
            self._client = None
            logger.info("Redis connection closed")

    @property
    def client(self) -> redis.Redis:
        """Get Redis client, connecting if needed."""
        if self._client is None:
            return self.connect()
        return self._client
