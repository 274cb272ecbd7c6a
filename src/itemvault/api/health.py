"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running
and the database is reachable. The endpoint is public, so a failed
check reports only "error"; the driver message goes to the log.
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from itemvault import __version__
from itemvault.db.engine import get_db

router = APIRouter()
logger = structlog.get_logger()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check server health and database connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as e:
        logger.error("health.database_failed", error=str(e))
        checks["database"] = "error"

    status = "healthy" if checks["database"] == "ok" else "degraded"
    return {"status": status, **checks}
