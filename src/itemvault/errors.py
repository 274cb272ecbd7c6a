"""Application error taxonomy.

Every failure the service reports to a client is an AppError subclass
carrying its HTTP status. Handlers registered in main.py turn them into
the uniform {"success": false, "message": ...} envelope, so services and
dependencies raise these instead of HTTPException.
"""

from http import HTTPStatus


class AppError(Exception):
    """Base class for errors surfaced to API clients."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input."""

    status = HTTPStatus.BAD_REQUEST
    message = "Invalid input"


class DuplicateUsernameError(AppError):
    """Username is already taken.

    Semantically a conflict, but clients of this API expect 400.
    """

    status = HTTPStatus.BAD_REQUEST
    message = "Username already registered"


class AuthenticationError(AppError):
    """Wrong username or password at login."""

    status = HTTPStatus.BAD_REQUEST
    message = "Invalid username or password"


class UnauthorizedError(AppError):
    """Authorization header missing or not a Bearer credential."""

    status = HTTPStatus.UNAUTHORIZED
    message = "Unauthorized"


class TokenError(AppError):
    """A presented token was rejected. Catch this for "any token failure"."""

    status = HTTPStatus.FORBIDDEN
    message = "Invalid token"


class InvalidTokenError(TokenError):
    """Token is malformed or its signature does not match."""


class ExpiredTokenError(TokenError):
    """Token signature is valid but its expiry has passed."""

    message = "Token has expired"


class ForbiddenError(AppError):
    """The record exists but belongs to another account."""

    status = HTTPStatus.FORBIDDEN
    message = "Forbidden"


class NotFoundError(AppError):
    status = HTTPStatus.NOT_FOUND
    message = "Not found"


class StoreError(AppError):
    """The backing store failed. Detail is logged, never returned."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR
    message = "Storage failure"


class ConfigurationError(Exception):
    """Raised at startup when required configuration is unusable."""


def describe_validation_error(errors) -> str:
    """Flatten pydantic error dicts into one client-facing message."""
    parts = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        msg = str(err.get("msg", "invalid value")).removeprefix("Value error, ")
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(parts) or ValidationError.message
