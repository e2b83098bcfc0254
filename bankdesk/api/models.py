from typing import Any, Optional

from pydantic import BaseModel, Field


class UserCredentials(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class LogoutRequest(BaseModel):
    refresh_token: Optional[str] = None


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user_details: dict


class AccessToken(BaseModel):
    access_token: str
    token_type: str = "bearer"


class CacheEntry(BaseModel):
    """Payload for the cache save endpoint. ``ttl`` is in seconds."""

    key: str = Field(min_length=1)
    value: Any
    ttl: Optional[int] = Field(default=None, gt=0)


class CacheSaved(BaseModel):
    key: str
    ttl: int


class CacheValue(BaseModel):
    key: str
    value: Any
