"""Type definitions for the API module."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class APIError(Exception):
    """Base exception for API-related errors."""

    pass


class HealthStatus(str, Enum):
    """Health check status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"


class HealthCheckResponse(BaseModel):
    """Response model for health checks."""

    status: HealthStatus
    timestamp: datetime
    version: str
    service_running: bool


class ScheduleResponse(BaseModel):
    page_id: str
    frequency: str
    next_run: datetime
    crawl_enabled: bool
    reporting_enabled: bool
    last_run: Optional[datetime] = None
    last_status: Optional[str] = None
    last_error: Optional[str] = None


class ScheduleUpdateRequest(BaseModel):
    """Partial update of a schedule entry. Unset fields are left unchanged."""

    model_config = {"extra": "forbid"}

    frequency: Optional[str] = None
    crawl_enabled: Optional[bool] = None
    reporting_enabled: Optional[bool] = None
    next_run: Optional[datetime] = None


class OutcomeResponse(BaseModel):
    page_id: str
    success: bool
    duration_ms: int
    seo_score: Optional[float] = None
    errors: list[str] = Field(default_factory=list)
    timestamp: datetime


class FailureSummaryResponse(BaseModel):
    page_id: str
    error: str
    timestamp: datetime


class MetricsResponse(BaseModel):
    total_runs_24h: int
    successful_runs_24h: int
    failed_runs_24h: int
    success_rate: float
    average_response_time: float
    last_errors: list[FailureSummaryResponse] = Field(default_factory=list)


class AlertResponse(BaseModel):
    id: str
    type: str
    severity: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime
    acknowledged: bool


class DashboardResponse(BaseModel):
    metrics: MetricsResponse
    recent_alerts: list[AlertResponse]
    unacknowledged_count: int
    system_health: str
    generated_at: datetime
    delivery_stats: Optional[dict[str, int]] = None


class AcknowledgeAllResponse(BaseModel):
    acknowledged: int


class InvalidationRequest(BaseModel):
    """Either explicit URLs or a page id whose URLs are derived."""

    urls: Optional[list[str]] = None
    page_id: Optional[str] = None


class InvalidationResultResponse(BaseModel):
    provider: str
    success: bool
    message: str
    invalidation_id: Optional[str] = None


class InvalidationResponse(BaseModel):
    success: bool
    results: list[InvalidationResultResponse]
    urls: list[str]
