# Health check endpoints for orchestrators and load balancers

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from core.dependencies import get_publisher
from core.events import EventPublisher

router = APIRouter(prefix="/health", tags=["health"])


class HealthStatus:
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@router.get("/live")
async def liveness_check(publisher: EventPublisher = Depends(get_publisher)):
    """
    Basic liveness check - returns 200 while the process is serving requests,
    whatever the state of the broker connection
    """
    return {
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": publisher.service_name,
    }


@router.get("/ready")
async def readiness_check(publisher: EventPublisher = Depends(get_publisher)):
    """
    Readiness check - 503 while the event producer is not connected, since
    every operation that emits a critical event would fail fast
    """
    health = publisher.health()
    if not publisher.is_connected:
        overall = HealthStatus.UNHEALTHY
    elif health["circuit_breaker"]["state"] != "closed":
        overall = HealthStatus.DEGRADED
    else:
        overall = HealthStatus.HEALTHY

    return JSONResponse(
        status_code=status.HTTP_200_OK if publisher.is_connected else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": overall,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "kafka": health,
        },
    )
