"""
Category pattern database model.
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, DateTime, Enum, Numeric, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
import enum
from vifin.database import Base


class PatternType(str, enum.Enum):
    """Pattern type enumeration."""
    merchant = "merchant"
    keyword = "keyword"
    mcc = "mcc"


MAX_CONFIDENCE = Decimal("1.00")


class CategoryPattern(Base):
    """Learned or authored matching rule with a confidence score."""

    __tablename__ = "category_patterns"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pattern = Column(String(255), nullable=False)  # Lowercased; keyword patterns may be /regex/
    pattern_type = Column(Enum(PatternType), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True)  # NULL = global
    confidence = Column(Numeric(4, 2), default=Decimal("0.50"), nullable=False)
    usage_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="patterns")

    __table_args__ = (
        UniqueConstraint("user_id", "pattern", "pattern_type", "category_id", name="uq_pattern_owner_category"),
        Index("idx_pattern_type_user", "pattern_type", "user_id"),
    )
