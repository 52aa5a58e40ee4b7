"""API routers."""

from .cdn import router as cdn_router
from .monitoring import router as monitoring_router
from .scheduler import router as scheduler_router

__all__ = [
    "scheduler_router",
    "monitoring_router",
    "cdn_router",
]
