"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. Every item route is behind the token check
without each handler having to ask for it. Health and auth routers are
open (/protected asks for the identity itself).
"""

from fastapi import APIRouter, Depends

from itemvault.api.auth import router as auth_router
from itemvault.api.health import router as health_router
from itemvault.api.items import router as items_router
from itemvault.auth.dependencies import get_current_identity

# All protected routers require authentication
_auth = [Depends(get_current_identity)]

api_router = APIRouter()

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes — require a valid Bearer token
api_router.include_router(items_router, tags=["items"], dependencies=_auth)
