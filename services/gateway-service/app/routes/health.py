"""
Health check routes for gateway service
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
import structlog

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Liveness of the gateway itself; never contacts the backend"""
    settings = request.app.state.settings
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.service_name,
    }


@router.get("/health/detailed")
async def detailed_health_check(request: Request):
    """Detailed health check with backend component status"""
    settings = request.app.state.settings
    client = request.app.state.forwarder.client

    backend = await client.check_health(
        settings.backend_health_path,
        timeout=settings.health_check_timeout,
    )
    if backend["status"] != "healthy":
        logger.warning("Backend not healthy", backend_url=settings.backend_url, **backend)

    return {
        "service": settings.service_name,
        "status": "ok" if backend["status"] == "healthy" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.service_version,
        "components": {
            "backend": {"url": settings.backend_url, **backend},
        },
    }
