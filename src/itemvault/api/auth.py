"""Auth API — registration, login, and a protected probe route.

Learn: Routes for the account lifecycle:
- POST /register → create a new account
- POST /login → username/password → JWT
- GET /protected → echoes the identity behind a valid token
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from itemvault.auth.dependencies import get_current_identity, get_token_issuer
from itemvault.auth.jwt import Identity, TokenIssuer
from itemvault.db.engine import get_db
from itemvault.schemas.auth import (
    LoginRequest,
    MessageResponse,
    ProtectedResponse,
    RegisterRequest,
    TokenResponse,
    UserInfo,
)
from itemvault.services.account_service import AccountService

router = APIRouter()


def _svc(request: Request, db: AsyncSession = Depends(get_db)) -> AccountService:
    return AccountService(db, bcrypt_rounds=request.app.state.settings.bcrypt_rounds)


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(body: RegisterRequest, svc: AccountService = Depends(_svc)):
    """Create a new account."""
    await svc.register(body.username, body.password)
    return MessageResponse(message="User registered successfully")


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    svc: AccountService = Depends(_svc),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Login with username and password → JWT."""
    account = await svc.authenticate(body.username, body.password)
    return TokenResponse(token=issuer.issue(account.id, account.username))


# ─── Protected probe ────────────────────────────────────


@router.get("/protected", response_model=ProtectedResponse)
async def protected(identity: Identity = Depends(get_current_identity)):
    return ProtectedResponse(
        message="Access granted to protected route",
        user=UserInfo(id=identity.account_id, username=identity.username),
    )
