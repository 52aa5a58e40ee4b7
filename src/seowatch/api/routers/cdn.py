"""CDN cache invalidation API endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth import require_permission
from ..dependencies import get_service
from ..types import InvalidationRequest, InvalidationResponse

router = APIRouter()


@router.get("/providers")
async def list_providers(
    service=Depends(get_service),
    current_user: dict[str, Any] = Depends(require_permission("read")),
) -> dict[str, list[str]]:
    return {"providers": service.cdn.get_configured_providers()}


@router.post("/invalidate", response_model=InvalidationResponse)
async def invalidate(
    request: InvalidationRequest,
    service=Depends(get_service),
    current_user: dict[str, Any] = Depends(require_permission("write")),
) -> InvalidationResponse:
    """Purge explicit URLs, or every URL derived from a page."""
    urls = list(request.urls or [])

    if request.page_id:
        page = await service.catalog.get_page(request.page_id)
        if page is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Page {request.page_id} not found",
            )
        urls.extend(service.cdn.urls_for_page(page))

    summary = await service.cdn.invalidate_urls(list(dict.fromkeys(urls)))
    return InvalidationResponse(**summary.to_dict())
