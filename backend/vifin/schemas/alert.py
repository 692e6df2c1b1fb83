"""Pydantic schemas for alerts."""

from pydantic import BaseModel
from typing import Optional, Dict, Any, List
from datetime import datetime
from vifin.models.alert import AlertType


class AlertResponse(BaseModel):
    id: str
    alert_type: AlertType
    message: str
    payload: Optional[Dict[str, Any]] = None
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class AlertsListResponse(BaseModel):
    items: List[AlertResponse]
    unread_count: int
    total: int


class UnreadCountResponse(BaseModel):
    count: int
