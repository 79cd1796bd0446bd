"""
Health check and status endpoints
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Request

from crm_voice.core.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """
    Readiness check - verifies the service is ready to handle requests
    """
    checks = {
        "document_store": request.app.state.document_store.is_connected(),
        "twilio": request.app.state.twilio_service.is_configured,
        "voice_tokens": bool(
            settings.twilio_api_key and settings.twilio_api_secret and settings.twiml_app_sid
        )
    }

    return {
        "status": "ready" if all(checks.values()) else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks
    }
