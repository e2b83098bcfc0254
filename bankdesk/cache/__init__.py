"""
The `cache` package wraps Redis as a short-lived key-value store.

Contents
--------
- RedisConnection
    Builds and owns the ``redis.Redis`` client from settings.

- EphemeralCache
    ``set``/``get``/``delete`` with per-key expiration and JSON values.

- RefreshTokenStore
    Remembers issued refresh tokens until they expire or are revoked.
"""

from bankdesk.cache.client import EphemeralCache, RefreshTokenStore, normalize_ttl
from bankdesk.cache.connection import RedisConnection

__all__ = ["EphemeralCache", "RefreshTokenStore", "RedisConnection", "normalize_ttl"]
