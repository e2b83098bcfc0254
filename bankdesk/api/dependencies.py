"""
FastAPI dependencies resolving the objects wired onto ``app.state`` at
startup, and the identity of the current caller.
"""

from typing import Optional

from fastapi import Cookie, Header, Request
from sqlalchemy.orm import sessionmaker

from bankdesk.api.utils import verify_token
from bankdesk.cache import EphemeralCache, RefreshTokenStore
from bankdesk.database.config.config import Settings
from bankdesk.database.core.projections import ProjectionLoader, Requester
from bankdesk.exceptions import InvalidTokenError, MissingDependencyError


def _state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise MissingDependencyError(f"{name} is not configured")
    return value


def get_settings(request: Request) -> Settings:
    return _state(request, "settings")


def get_session_factory(request: Request) -> sessionmaker:
    return _state(request, "session_factory")


def get_cache(request: Request) -> EphemeralCache:
    return _state(request, "cache")


def get_token_store(request: Request) -> RefreshTokenStore:
    return RefreshTokenStore(get_cache(request))


def get_projection_loader(request: Request) -> ProjectionLoader:
    return ProjectionLoader(get_session_factory(request))


def get_current_requester(
    request: Request,
    authorization: Optional[str] = Header(None),
    token: Optional[str] = Cookie(None),
) -> Requester:
    """
    Resolve the caller from a ``Bearer`` header, falling back to the
    ``token`` cookie set at login.
    """
    raw = None
    if authorization and authorization.lower().startswith("bearer "):
        raw = authorization[7:].strip()
    elif token:
        raw = token
    if not raw:
        raise InvalidTokenError("Missing Token")
    claims = verify_token(raw, config=get_settings(request))
    return Requester(email=claims.subject, role=claims.role)
