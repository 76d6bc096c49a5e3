"""
Health check endpoints
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from gamewallet.api.deps import get_gaming_service
from gamewallet.core.config import settings
from gamewallet.services.gaming import GamingService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness: the process is up and serving requests"""
    return {"status": "ok"}


@router.get("/health/ready")
async def readiness_check(service: GamingService = Depends(get_gaming_service)):
    """
    Readiness: the ledger database answers a query.
    Returns 503 while it does not.
    """
    try:
        async with service.session_factory() as session:
            await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "unavailable", "database": "error"})
    return {"status": "ok", "database": "ok", "currencies": settings.supported_currencies}
