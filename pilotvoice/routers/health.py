"""Health check endpoint."""
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from pilotvoice.version import APP_VERSION

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Health check endpoint for monitoring."""
    try:
        async with request.app.state.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "error", "detail": "Database connection failed"})

    settings = request.app.state.settings
    return {
        "status": "ok",
        "database": "connected",
        "version": APP_VERSION,
        "anonymization": "mock" if settings.mock_ai_service else "openrouter",
    }
