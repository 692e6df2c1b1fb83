"""API endpoints for alerts management."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from vifin.database import get_db
from vifin.dependencies import get_current_user_id
from vifin.models.alert import AlertType
from vifin.schemas.alert import AlertResponse, AlertsListResponse, UnreadCountResponse
from vifin.services import alerts_service

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=AlertsListResponse)
def get_alerts(
    unread_only: bool = Query(False),
    type: Optional[AlertType] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get alerts with optional filters."""
    alerts = alerts_service.get_alerts(
        db,
        user_id,
        unread_only=unread_only,
        alert_type=type,
        limit=limit
    )
    unread_count = alerts_service.get_unread_count(db, user_id)

    return AlertsListResponse(
        items=[AlertResponse.model_validate(a) for a in alerts],
        unread_count=unread_count,
        total=len(alerts)
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return UnreadCountResponse(count=alerts_service.get_unread_count(db, user_id))


@router.post("/mark-all-read")
def mark_all_read(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Mark all alerts as read."""
    count = alerts_service.mark_all_read(db, user_id)
    return {"marked_read": count}


@router.patch("/{alert_id}/read", response_model=AlertResponse)
def mark_read(
    alert_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return alerts_service.mark_as_read(db, alert_id, user_id)


@router.delete("/{alert_id}", status_code=204)
def delete_alert(
    alert_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    alerts_service.delete_alert(db, alert_id, user_id)
