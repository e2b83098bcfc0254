"""
Ephemeral key-value cache on top of Redis.

Values are stored as JSON strings with a mandatory expiration, so entries
vanish on their own once their TTL elapses. Writes are plain ``SET`` calls:
the last writer wins. Connectivity problems are reported as
:class:`~bankdesk.exceptions.CacheUnavailableError` and never retried here.
"""

import functools
import json
import logging
from datetime import timedelta
from typing import Any, Optional, Union

import redis

from bankdesk.exceptions import CacheUnavailableError, InvalidTTLError

logger = logging.getLogger(__name__)

TTL = Union[int, timedelta]


def _transient(func):
    """Translate redis connectivity failures into ``CacheUnavailableError``."""

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.error(f"Cache {func.__name__} failed: {e}")
            raise CacheUnavailableError(f"cache backend unreachable: {e}") from e

    return wrapper


def normalize_ttl(ttl: TTL) -> int:
    """Return ``ttl`` as whole seconds, rejecting anything that is not positive."""
    if isinstance(ttl, timedelta):
        seconds = ttl.total_seconds()
    elif isinstance(ttl, bool) or not isinstance(ttl, (int, float)):
        raise InvalidTTLError(f"ttl must be a number of seconds, got {ttl!r}")
    else:
        seconds = ttl
    if seconds <= 0 or seconds != int(seconds):
        raise InvalidTTLError(f"ttl must be a positive whole number of seconds, got {ttl!r}")
    return int(seconds)


class EphemeralCache:
    """
    Thin key-value client with per-key expiration.

    Args:
        client: a ``redis.Redis`` (or compatible) client created with
            ``decode_responses=True``.
        prefix: namespace prepended to every key as ``"{prefix}:{key}"``.
        default_ttl: expiration used when ``set`` is called without one.
    """

    def __init__(self, client: redis.Redis, prefix: str = "bankdesk", default_ttl: int = 300):
        self.client = client
        self.prefix = prefix
        self.default_ttl = normalize_ttl(default_ttl)

    def _key(self, key: str) -> str:
        if not key:
            raise ValueError("cache key must not be empty")
        return f"{self.prefix}:{key}" if self.prefix else key

    @_transient
    def set(self, key: str, value: Any, ttl: Optional[TTL] = None) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds, replacing any previous value."""
        seconds = self.default_ttl if ttl is None else normalize_ttl(ttl)
        self.client.set(self._key(key), json.dumps(value), ex=seconds)

    @_transient
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or ``None`` when the key is absent or expired."""
        raw = self.client.get(self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    @_transient
    def delete(self, key: str) -> bool:
        return bool(self.client.delete(self._key(key)))

    @_transient
    def exists(self, key: str) -> bool:
        return bool(self.client.exists(self._key(key)))

    @_transient
    def ttl(self, key: str) -> Optional[int]:
        """Remaining lifetime in seconds, or ``None`` when the key is absent."""
        remaining = self.client.ttl(self._key(key))
        # -2: no such key, -1: key without expiry (never written by this client)
        if remaining is None or remaining < 0:
            return None
        return int(remaining)

    @_transient
    def ping(self) -> bool:
        return bool(self.client.ping())


class RefreshTokenStore:
    """
    Tracks issued refresh tokens so they can be revoked before they expire.

    Entries live under their own ``"{prefix}:auth"`` namespace, apart from
    any keys written through ``cache`` itself.
    """

    def __init__(self, cache: EphemeralCache):
        prefix = f"{cache.prefix}:auth" if cache.prefix else "auth"
        self.cache = EphemeralCache(cache.client, prefix=prefix, default_ttl=cache.default_ttl)

    @staticmethod
    def _key(jti: str) -> str:
        return f"refresh:{jti}"

    def remember(self, jti: str, subject: str, ttl: TTL) -> None:
        self.cache.set(self._key(jti), subject, ttl)

    def is_active(self, jti: str, subject: str) -> bool:
        return self.cache.get(self._key(jti)) == subject

    def revoke(self, jti: str) -> bool:
        return self.cache.delete(self._key(jti))
