"""
Health check endpoint.
"""
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, status

from config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Liveness probe; reports the gateway mode and whether keys are present."""
    return {
        "status": "healthy",
        "production": settings.midtrans_is_production,
        "gateway_configured": bool(settings.midtrans_server_key),
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
