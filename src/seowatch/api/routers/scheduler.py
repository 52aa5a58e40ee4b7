"""Crawl scheduler API endpoints."""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from ...scheduler.manager import SEOScheduler
from ...utils.logging import get_structured_logger
from ..auth import require_permission
from ..dependencies import get_scheduler, get_service
from ..types import (
    MetricsResponse,
    OutcomeResponse,
    ScheduleResponse,
    ScheduleUpdateRequest,
)

logger = get_structured_logger(__name__)

router = APIRouter()


@router.get("/status")
async def get_service_status(
    service=Depends(get_service),
    current_user: dict[str, Any] = Depends(require_permission("read")),
) -> dict[str, Any]:
    """Timer jobs and component summary."""
    return service.get_status()


@router.get("/schedules", response_model=list[ScheduleResponse])
async def list_schedules(
    scheduler: SEOScheduler = Depends(get_scheduler),
    current_user: dict[str, Any] = Depends(require_permission("read")),
) -> list[ScheduleResponse]:
    return [ScheduleResponse(**entry.to_dict()) for entry in scheduler.get_schedules()]


@router.put("/schedules/{page_id}", response_model=ScheduleResponse)
async def update_schedule(
    page_id: str,
    request: ScheduleUpdateRequest,
    scheduler: SEOScheduler = Depends(get_scheduler),
    current_user: dict[str, Any] = Depends(require_permission("write")),
) -> ScheduleResponse:
    changes = request.model_dump(exclude_unset=True, exclude_none=True)

    entry = scheduler.update_schedule(page_id, **changes)
    return ScheduleResponse(**entry.to_dict())


@router.post("/schedules/{page_id}/trigger", response_model=OutcomeResponse)
async def trigger_run(
    page_id: str,
    scheduler: SEOScheduler = Depends(get_scheduler),
    current_user: dict[str, Any] = Depends(require_permission("write")),
) -> OutcomeResponse:
    """Run a page immediately and return its outcome.

    Unknown pages answer 404 and pages already running answer 409.
    """
    outcome = await scheduler.trigger_now(page_id)

    logger.info("Manual run finished", page_id=page_id, success=outcome.success)
    return OutcomeResponse(**outcome.to_dict())


@router.get("/results", response_model=list[OutcomeResponse])
async def list_results(
    page_id: Optional[str] = Query(None, description="Filter by page"),
    limit: int = Query(50, ge=1, le=1000, description="Maximum results"),
    scheduler: SEOScheduler = Depends(get_scheduler),
    current_user: dict[str, Any] = Depends(require_permission("read")),
) -> list[OutcomeResponse]:
    return [
        OutcomeResponse(**o.to_dict())
        for o in scheduler.get_outcomes(page_id=page_id, limit=limit)
    ]


@router.get("/metrics", response_model=MetricsResponse)
async def get_metrics(
    scheduler: SEOScheduler = Depends(get_scheduler),
    current_user: dict[str, Any] = Depends(require_permission("read")),
) -> MetricsResponse:
    return MetricsResponse(**scheduler.get_metrics().to_dict())
