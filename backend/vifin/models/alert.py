"""
Alert database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Enum, Text, JSON, ForeignKey, Index
from sqlalchemy.orm import relationship
import enum
from vifin.database import Base


class AlertType(str, enum.Enum):
    """Alert type enumeration."""
    BUDGET_WARNING = "BUDGET_WARNING"
    BUDGET_EXCEEDED = "BUDGET_EXCEEDED"
    LARGE_TRANSACTION = "LARGE_TRANSACTION"
    UNUSUAL_SPENDING = "UNUSUAL_SPENDING"
    CATEGORY_SPIKE = "CATEGORY_SPIKE"
    INFO = "INFO"
    SUCCESS = "SUCCESS"


class Alert(Base):
    """Out-of-band notification; payload carries dedup keys."""

    __tablename__ = "alerts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    alert_type = Column(Enum(AlertType), nullable=False)
    message = Column(Text, nullable=False)
    payload = Column(JSON, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="alerts")

    __table_args__ = (
        Index("idx_alert_user_type", "user_id", "alert_type"),
    )
