"""
Health check route.
"""

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Request

from ..models import APIResponse

router = APIRouter()


@router.get("/health", response_model=APIResponse)
async def health_check(request: Request) -> APIResponse:
    """Report liveness, the configured schedule and whether a run is executing.

    The schedule is only advertised; an external scheduler calls the trigger.
    """
    config = request.app.state.config
    service = request.app.state.report_service
    tz = ZoneInfo(config.scheduler.timezone)

    return APIResponse(
        success=True,
        message="healthy",
        data={
            "status": "healthy",
            "timestamp": datetime.now(tz).isoformat(),
            "schedule": config.scheduler.cron_time,
            "scheduling": "external",
            "trigger": "/api/cron",
            "timezone": config.scheduler.timezone,
            "running": service.is_running,
        },
    )
