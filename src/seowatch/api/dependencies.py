"""FastAPI dependency providers for service components."""

from typing import TYPE_CHECKING

from fastapi import HTTPException, Request, status

if TYPE_CHECKING:
    from ..cdn.manager import CDNManager
    from ..monitoring.system import MonitoringSystem
    from ..scheduler.manager import SEOScheduler
    from ..service import MonitoringService


async def get_service(request: Request) -> "MonitoringService":
    """Dependency to get the monitoring service from app state."""
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Monitoring service not initialized",
        )
    return service


async def get_scheduler(request: Request) -> "SEOScheduler":
    return (await get_service(request)).scheduler


async def get_monitoring(request: Request) -> "MonitoringSystem":
    return (await get_service(request)).monitoring


async def get_cdn(request: Request) -> "CDNManager":
    return (await get_service(request)).cdn
