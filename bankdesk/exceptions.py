"""
Error types raised by the bankdesk packages.

Every error carries a human readable ``detail`` so that the API layer can
turn it into the same ``{"detail": ...}`` body FastAPI uses for
``HTTPException``.
"""


class BankdeskError(Exception):
    """Base class for all application errors."""

    status_code = 500

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail or self.__class__.__name__


class NotFoundError(BankdeskError):
    """The requested aggregate does not exist."""

    status_code = 404


class AuthorizationError(BankdeskError):
    """The caller may not access the requested aggregate."""

    status_code = 403


class StaleSessionError(BankdeskError):
    """An association was accessed after its unit of work had closed."""

    status_code = 500


class InvalidTokenError(BankdeskError):
    """A token is malformed, expired, revoked or missing a required claim."""

    status_code = 401


class CacheUnavailableError(BankdeskError):
    """The cache backend could not be reached. Callers may retry later."""

    status_code = 503


class MissingDependencyError(BankdeskError):
    """A runtime dependency was not wired onto the application."""

    status_code = 500


class InvalidTTLError(BankdeskError, ValueError):
    """A cache expiration was not a positive number of seconds."""

    status_code = 422
