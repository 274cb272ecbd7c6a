"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
A single short-lived access token (60min by default) carries the
account id and username; there is no refresh token and no server-side
session, so a token simply stops working once it expires.

The signing secret is handed to TokenIssuer explicitly (main.py builds
one from settings at startup), which keeps verification testable with
any secret and any TTL.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from itemvault.errors import ConfigurationError, ExpiredTokenError, InvalidTokenError

DEFAULT_TTL = timedelta(hours=1)


@dataclass(frozen=True)
class Identity:
    """The authenticated (account id, username) pair behind a request."""

    account_id: uuid.UUID
    username: str


class TokenIssuer:
    """Signs and verifies identity tokens with one process-wide secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = DEFAULT_TTL,
    ):
        if not secret or not secret.strip():
            raise ConfigurationError("Refusing to sign tokens with an empty secret")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    @classmethod
    def from_settings(cls, settings) -> "TokenIssuer":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(minutes=settings.access_token_expire_minutes),
        )

    def issue(self, account_id: uuid.UUID | str, username: str) -> str:
        """Create a signed token that expires TTL from now."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(account_id),
            "username": username,
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        """Verify and decode a token.

        Raises ExpiredTokenError when the signature checks out but the
        token is past its expiry, InvalidTokenError for anything else.
        PyJWT checks the signature before the claims, so a forged token
        is always reported as invalid, never as expired.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError()
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        username = payload.get("username")
        if not isinstance(username, str) or not username:
            raise InvalidTokenError("Invalid token: missing username claim")
        try:
            account_id = uuid.UUID(payload["sub"])
        except (ValueError, TypeError, AttributeError):
            raise InvalidTokenError("Invalid token: malformed subject claim")

        return Identity(account_id=account_id, username=username)
