"""
Category database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Enum, Integer, ForeignKey
from sqlalchemy.orm import relationship
import enum
from vifin.database import Base


class CategoryType(str, enum.Enum):
    """Category type, mirrors the transaction direction."""
    income = "income"
    expense = "expense"


UNCATEGORIZED_KEY = "expense:uncategorized"


class Category(Base):
    """Spending/income bucket, either a global default or user-owned."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    type = Column(Enum(CategoryType), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)  # NULL = global default
    is_default = Column(Boolean, default=False, nullable=False)
    default_key = Column(String(100), unique=True, nullable=True)  # Stable key for seeded defaults
    priority = Column(Integer, default=50, nullable=False)
    color = Column(String(7), nullable=True)  # Hex color
    icon = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="category")
    patterns = relationship("CategoryPattern", back_populates="category", cascade="all, delete-orphan")
    rules = relationship("CategoryRule", back_populates="category", cascade="all, delete-orphan")
