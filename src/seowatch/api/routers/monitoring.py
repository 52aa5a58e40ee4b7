"""Alerting and dashboard API endpoints."""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from ...monitoring.system import MonitoringSystem
from ...monitoring.types import AlertSeverity, AlertType
from ..auth import require_permission
from ..dependencies import get_monitoring
from ..types import AcknowledgeAllResponse, AlertResponse, DashboardResponse

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    monitoring: MonitoringSystem = Depends(get_monitoring),
    current_user: dict[str, Any] = Depends(require_permission("read")),
) -> DashboardResponse:
    return DashboardResponse(**monitoring.get_dashboard_snapshot().to_dict())


@router.get("/alerts", response_model=list[AlertResponse])
async def list_alerts(
    limit: int = Query(50, ge=1, le=500, description="Maximum alerts"),
    type: Optional[AlertType] = Query(None, description="Filter by alert type"),
    severity: Optional[AlertSeverity] = Query(None, description="Filter by severity"),
    monitoring: MonitoringSystem = Depends(get_monitoring),
    current_user: dict[str, Any] = Depends(require_permission("read")),
) -> list[AlertResponse]:
    alerts = monitoring.get_alerts(limit=limit, alert_type=type, severity=severity)
    return [AlertResponse(**a.to_dict()) for a in alerts]


@router.post("/alerts/acknowledge-all", response_model=AcknowledgeAllResponse)
async def acknowledge_all_alerts(
    monitoring: MonitoringSystem = Depends(get_monitoring),
    current_user: dict[str, Any] = Depends(require_permission("write")),
) -> AcknowledgeAllResponse:
    return AcknowledgeAllResponse(acknowledged=monitoring.acknowledge_all())


@router.post("/alerts/{alert_id}/acknowledge")
async def acknowledge_alert(
    alert_id: str,
    monitoring: MonitoringSystem = Depends(get_monitoring),
    current_user: dict[str, Any] = Depends(require_permission("write")),
) -> dict[str, Any]:
    if not monitoring.acknowledge(alert_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Alert {alert_id} not found",
        )
    return {"success": True, "alert_id": alert_id}


@router.get("/config")
async def get_alert_config(
    monitoring: MonitoringSystem = Depends(get_monitoring),
    current_user: dict[str, Any] = Depends(require_permission("read")),
) -> dict[str, Any]:
    return monitoring.get_config().model_dump()


@router.put("/config")
async def update_alert_config(
    changes: dict[str, Any] = Body(...),
    monitoring: MonitoringSystem = Depends(get_monitoring),
    current_user: dict[str, Any] = Depends(require_permission("write")),
) -> dict[str, Any]:
    """Merge changes into the alert configuration; invalid values answer 422."""
    return monitoring.update_config(**changes).model_dump()
