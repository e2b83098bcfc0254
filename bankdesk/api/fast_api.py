"""
FastAPI Router: Authentication, Account Projections, and Cache API

This module defines the HTTP API endpoints exposed by the backend. It handles:
- User registration, login, token refresh, and logout
- Read-only projections of accounts and transactions
- Saving and reading short-lived values in the ephemeral cache
- A health probe for the database and the cache

Each endpoint validates input via Pydantic models and returns structured responses.
Application errors raised below are turned into JSON responses by the
handlers registered in ``bankdesk.main``.
"""

import hashlib
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import sessionmaker

from bankdesk.api.dependencies import (
    get_cache,
    get_current_requester,
    get_projection_loader,
    get_session_factory,
    get_settings,
    get_token_store,
)
from bankdesk.api.models import (
    AccessToken,
    CacheEntry,
    CacheSaved,
    CacheValue,
    LogoutRequest,
    RefreshRequest,
    TokenPair,
    UserCredentials,
)
from bankdesk.api.utils import issue_token_pair, refresh_access_token, revoke_refresh_token
from bankdesk.cache import EphemeralCache, RefreshTokenStore
from bankdesk.database.config.config import Settings
from bankdesk.database.core.funcs import login_user, register_user
from bankdesk.database.core.projections import ProjectionLoader, Requester, TransactionRecord
from bankdesk.database.core.session import health_check
from bankdesk.exceptions import CacheUnavailableError, MissingDependencyError

logger = logging.getLogger(__name__)

router = APIRouter()
"""Creates the FastAPI router in which we define its routes"""


def caller_key(requester: Requester, key: str) -> str:
    """Scope a cache key to the caller so users never see each other's entries."""
    owner = hashlib.sha256(requester.email.encode("utf-8")).hexdigest()[:32]
    return f"user:{owner}:{key}"


@router.post("/register")
def register(
    data: UserCredentials,
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    Register a new customer account.

    Raises
    ------
    HTTPException 409
        If the email is already registered.
    """
    res = register_user(session_factory, email=data.email, password=data.password)
    if res['res']:
        return res['user_details']
    raise HTTPException(status_code=409, detail=res['detail'])


@router.post("/login", response_model=TokenPair)
def login(
    data: UserCredentials,
    response: Response,
    session_factory: sessionmaker = Depends(get_session_factory),
    store: RefreshTokenStore = Depends(get_token_store),
    settings: Settings = Depends(get_settings),
):
    """
    Authenticate a user, issue an access/refresh pair and set the access
    token as cookie.

    Raises
    ------
    HTTPException 401
        If authentication fails.
    """
    auth = login_user(session_factory, email=data.email, password=data.password)
    if not auth['authenticated']:
        raise HTTPException(status_code=401, detail=auth['detail'])

    details = auth['user_details']
    tokens = issue_token_pair(details['email'], details['role'], store, config=settings)
    logger.info("User %s logged in", details['email'])
    response.set_cookie(
        key="token",
        value=tokens['access_token'],
        httponly=True,
        secure=True,
        samesite="none",
    )
    return {**tokens, 'user_details': details}


@router.post("/refresh", response_model=AccessToken)
def refresh(
    data: RefreshRequest,
    response: Response,
    store: RefreshTokenStore = Depends(get_token_store),
    settings: Settings = Depends(get_settings),
):
    """
    Exchange a refresh token for a new access token with the same role.

    Raises
    ------
    401
        If the refresh token is invalid, expired or revoked.
    """
    access_token = refresh_access_token(data.refresh_token, store, config=settings)
    response.set_cookie(key="token", value=access_token, httponly=True, secure=True, samesite="none")
    return {'access_token': access_token, 'token_type': 'bearer'}


@router.post("/logout")
def logout(
    data: LogoutRequest,
    response: Response,
    store: RefreshTokenStore = Depends(get_token_store),
    settings: Settings = Depends(get_settings),
):
    """Revoke the refresh token, if given, and clear the JWT cookie."""
    if data.refresh_token:
        revoke_refresh_token(data.refresh_token, store, config=settings)
    response.delete_cookie(key="token")
    return True


@router.get("/get_user")
def get_user(requester: Requester = Depends(get_current_requester)):
    """
    Retrieve user details from the JWT token.

    Returns
    -------
    dict
        {'email': str, 'role': str}
    """
    return {'email': requester.email, 'role': requester.role}


@router.get("/accounts/{account_id}/transactions", response_model=List[TransactionRecord])
def account_transactions(
    account_id: int,
    requester: Requester = Depends(get_current_requester),
    loader: ProjectionLoader = Depends(get_projection_loader),
):
    """
    List the transactions of an account in chronological order.

    Raises
    ------
    403
        If the caller neither owns the account nor is an admin.
    404
        If the account does not exist.
    """
    return loader.list_account_transactions(account_id, requester)


@router.get("/transactions/{transaction_id}", response_model=TransactionRecord)
def transaction_detail(
    transaction_id: int,
    requester: Requester = Depends(get_current_requester),
    loader: ProjectionLoader = Depends(get_projection_loader),
):
    """Fetch one transaction together with its account and owner."""
    return loader.load_transaction(transaction_id, requester)


@router.post("/cache", response_model=CacheSaved)
def save_cache_entry(
    data: CacheEntry,
    cache: EphemeralCache = Depends(get_cache),
    requester: Requester = Depends(get_current_requester),
):
    """
    Store a value in the ephemeral cache, visible only to the caller.

    Request Body
    ------------
    CacheEntry {key: str, value: any, ttl: int|None}
    """
    ttl = data.ttl or cache.default_ttl
    cache.set(caller_key(requester, data.key), data.value, ttl)
    return {'key': data.key, 'ttl': ttl}


@router.get("/cache/{key}", response_model=CacheValue)
def read_cache_entry(
    key: str,
    cache: EphemeralCache = Depends(get_cache),
    requester: Requester = Depends(get_current_requester),
):
    """
    Read a value from the ephemeral cache.

    Raises
    ------
    HTTPException 404
        If the key is absent or expired.
    """
    value = cache.get(caller_key(requester, key))
    if value is None:
        raise HTTPException(status_code=404, detail='Key not found')
    return {'key': key, 'value': value}


@router.get("/health")
def health(request: Request):
    """Report database and cache connectivity."""
    db_ok, db_detail = health_check(request.app.state.engine)
    try:
        cache_ok = get_cache(request).ping()
        cache_detail = "Cache OK (PING)"
    except (CacheUnavailableError, MissingDependencyError) as e:
        cache_ok, cache_detail = False, f"CACHE ERROR: {e.detail}"
    return {'database': {'ok': db_ok, 'detail': db_detail}, 'cache': {'ok': cache_ok, 'detail': cache_detail}}
