"""
JWT utilities for issuing, verifying and refreshing tokens.

Every token carries ``sub`` (the user's email) and ``role``. A token that
lacks either claim is rejected outright instead of being treated as a
token with an empty role.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

from jose import JWTError, jwt
from pydantic import BaseModel

from bankdesk.cache import RefreshTokenStore
from bankdesk.database.config.config import Settings, settings as default_settings
from bankdesk.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


class TokenClaims(BaseModel):
    """Verified contents of a token."""

    subject: str
    role: str
    token_type: str
    expires_at: datetime
    jti: Optional[str] = None


def _encode(claims: dict, expires_delta: timedelta, config: Settings) -> str:
    now = datetime.now(timezone.utc)
    to_encode = dict(claims)
    to_encode.update({"iat": now, "exp": now + expires_delta})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def create_access_token(
    subject: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
    config: Settings = default_settings,
) -> str:
    """
    Issue a signed access token.

    Args:
        subject: the user's email.
        role: the user's role, copied verbatim into the ``role`` claim.
        expires_delta: lifetime; defaults to ``ACCESS_TOKEN_EXPIRE_MINUTES``.
    """
    expires_delta = expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode({"sub": subject, "role": role, "type": ACCESS}, expires_delta, config)


def create_refresh_token(
    subject: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
    config: Settings = default_settings,
) -> str:
    """Issue a signed refresh token with a unique ``jti``."""
    expires_delta = expires_delta or timedelta(minutes=config.REFRESH_TOKEN_EXPIRE_MINUTES)
    claims = {"sub": subject, "role": role, "type": REFRESH, "jti": uuid4().hex}
    return _encode(claims, expires_delta, config)


def verify_token(token: str, expected_type: str = ACCESS, config: Settings = default_settings) -> TokenClaims:
    """
    Validate ``token`` and extract its claims.

    Raises:
        InvalidTokenError: bad signature, expired or missing ``exp``, wrong
            token type, or a missing ``sub``/``role`` claim.
    """
    try:
        payload = jwt.decode(
            token, config.SECRET_KEY, algorithms=[config.ALGORITHM], options={"require_exp": True}
        )
    except JWTError as e:
        logger.warning("Rejected token: %s", e)
        raise InvalidTokenError("Invalid or expired token") from e

    if payload.get("type") != expected_type:
        raise InvalidTokenError(f"Expected a {expected_type} token")
    subject = payload.get("sub")
    role = payload.get("role")
    if not subject or not role:
        logger.warning("Rejected token without subject or role claim")
        raise InvalidTokenError("Token is missing a required claim")

    return TokenClaims(
        subject=subject,
        role=role,
        token_type=expected_type,
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        jti=payload.get("jti"),
    )


def issue_token_pair(subject: str, role: str, store: RefreshTokenStore, config: Settings = default_settings) -> dict:
    """Issue an access/refresh pair and remember the refresh token in the cache."""
    access_token = create_access_token(subject, role, config=config)
    refresh_token = create_refresh_token(subject, role, config=config)
    claims = verify_token(refresh_token, expected_type=REFRESH, config=config)
    store.remember(claims.jti, subject, timedelta(minutes=config.REFRESH_TOKEN_EXPIRE_MINUTES))
    return {"access_token": access_token, "refresh_token": refresh_token, "token_type": "bearer"}


def refresh_access_token(refresh_token: str, store: RefreshTokenStore, config: Settings = default_settings) -> str:
    """
    Exchange a refresh token for a new access token.

    The new token carries the role read from the refresh token itself.

    Raises:
        InvalidTokenError: the refresh token is invalid, expired or revoked.
    """
    claims = verify_token(refresh_token, expected_type=REFRESH, config=config)
    if not claims.jti or not store.is_active(claims.jti, claims.subject):
        logger.warning("Refresh attempted with revoked token for %s", claims.subject)
        raise InvalidTokenError("Refresh token revoked")
    return create_access_token(claims.subject, claims.role, config=config)


def revoke_refresh_token(refresh_token: str, store: RefreshTokenStore, config: Settings = default_settings) -> bool:
    """Forget a refresh token so it can no longer be exchanged."""
    claims = verify_token(refresh_token, expected_type=REFRESH, config=config)
    return store.revoke(claims.jti) if claims.jti else False
