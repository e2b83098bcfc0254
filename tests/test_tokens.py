from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from bankdesk.api.utils import (
    create_access_token,
    create_refresh_token,
    issue_token_pair,
    refresh_access_token,
    revoke_refresh_token,
    verify_token,
)
from bankdesk.cache import RefreshTokenStore
from bankdesk.exceptions import InvalidTokenError


@pytest.fixture
def store(cache):
    return RefreshTokenStore(cache)


def test_access_token_round_trip(settings):
    token = create_access_token("alice@example.com", "customer", config=settings)
    claims = verify_token(token, config=settings)

    assert claims.subject == "alice@example.com"
    assert claims.role == "customer"
    assert claims.token_type == "access"
    assert claims.expires_at > datetime.now(timezone.utc)


@pytest.mark.parametrize("role", ["customer", "admin", "auditor"])
def test_refreshed_token_keeps_role(settings, store, role):
    tokens = issue_token_pair("alice@example.com", role, store, config=settings)

    original = verify_token(tokens["access_token"], config=settings)
    reissued = verify_token(refresh_access_token(tokens["refresh_token"], store, config=settings), config=settings)

    assert reissued.role == original.role == role
    assert reissued.subject == original.subject


def test_token_without_role_is_rejected(settings):
    claims = {"sub": "alice@example.com", "type": "access", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)}
    token = jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    with pytest.raises(InvalidTokenError):
        verify_token(token, config=settings)


def test_token_without_subject_is_rejected(settings):
    claims = {"role": "customer", "type": "access", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)}
    token = jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    with pytest.raises(InvalidTokenError):
        verify_token(token, config=settings)


def test_expired_token_is_rejected(settings):
    token = create_access_token("alice@example.com", "customer", expires_delta=timedelta(seconds=-1), config=settings)

    with pytest.raises(InvalidTokenError):
        verify_token(token, config=settings)


def test_token_signed_with_other_key_is_rejected(settings):
    token = jwt.encode(
        {"sub": "alice@example.com", "role": "admin", "type": "access"}, "other-key", algorithm=settings.ALGORITHM
    )

    with pytest.raises(InvalidTokenError):
        verify_token(token, config=settings)


def test_refresh_token_cannot_be_used_as_access_token(settings):
    token = create_refresh_token("alice@example.com", "customer", config=settings)

    with pytest.raises(InvalidTokenError):
        verify_token(token, config=settings)


def test_access_token_cannot_be_used_to_refresh(settings, store):
    token = create_access_token("alice@example.com", "customer", config=settings)

    with pytest.raises(InvalidTokenError):
        refresh_access_token(token, store, config=settings)


def test_unknown_refresh_token_is_rejected(settings, store):
    token = create_refresh_token("alice@example.com", "customer", config=settings)

    with pytest.raises(InvalidTokenError):
        refresh_access_token(token, store, config=settings)


def test_revoked_refresh_token_is_rejected(settings, store):
    tokens = issue_token_pair("alice@example.com", "customer", store, config=settings)

    assert revoke_refresh_token(tokens["refresh_token"], store, config=settings)
    with pytest.raises(InvalidTokenError):
        refresh_access_token(tokens["refresh_token"], store, config=settings)


def test_refresh_token_lapses_with_cache_entry(settings, store, fake_redis):
    tokens = issue_token_pair("alice@example.com", "customer", store, config=settings)
    fake_redis.advance(settings.REFRESH_TOKEN_EXPIRE_MINUTES * 60)

    with pytest.raises(InvalidTokenError):
        refresh_access_token(tokens["refresh_token"], store, config=settings)


def test_token_without_expiry_is_rejected(settings):
    token = jwt.encode(
        {"sub": "alice@example.com", "role": "customer", "type": "access"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM
    )

    with pytest.raises(InvalidTokenError):
        verify_token(token, config=settings)
