"""
Category rule database model (static priority keyword rules).
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from vifin.database import Base


class CategoryRule(Base):
    """Keyword rule; lower priority wins."""

    __tablename__ = "category_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False, index=True)
    keyword = Column(String(255), nullable=False)
    keyword_normalized = Column(String(255), nullable=False)
    priority = Column(Integer, default=5, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="rules")

    __table_args__ = (
        UniqueConstraint("keyword", "category_id", name="uq_rule_keyword_category"),
    )
