"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current identity from the request. This is the only
gate in front of the item routes:

    no Authorization header        -> 401
    header without "Bearer " prefix -> 401
    token fails verification        -> 403 (reason in the message)
    token verifies                  -> Identity, also on request.state
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from itemvault.auth.jwt import Identity, TokenIssuer
from itemvault.auth.ownership import OwnershipGuard
from itemvault.errors import TokenError, UnauthorizedError

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "


def get_token_issuer(request: Request) -> TokenIssuer:
    """The issuer built at startup from settings (see main.create_app)."""
    return request.app.state.token_issuer


async def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(None),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Identity:
    """Resolve the caller's identity from a Bearer token (required)."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise UnauthorizedError()

    token = authorization[len(BEARER_PREFIX):].strip()
    try:
        identity = issuer.verify(token)
    except TokenError as e:
        logger.info("auth.token_rejected", reason=e.message, path=request.url.path)
        raise

    request.state.identity = identity
    structlog.contextvars.bind_contextvars(account_id=str(identity.account_id))
    return identity


def get_ownership_guard(
    identity: Identity = Depends(get_current_identity),
) -> OwnershipGuard:
    return OwnershipGuard(identity)
