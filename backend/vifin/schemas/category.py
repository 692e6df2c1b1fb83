"""
Category Pydantic schemas for API validation.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from vifin.models.category import CategoryType


class CategorySummary(BaseModel):
    """Compact category embedded in other responses."""
    id: str
    name: str
    type: CategoryType
    icon: Optional[str] = None
    color: Optional[str] = None

    model_config = {"from_attributes": True}


class CategoryResponse(CategorySummary):
    """Schema for category response."""
    user_id: Optional[str] = None
    is_default: bool
    priority: int
    created_at: datetime


class CategoryList(BaseModel):
    """Schema for listing categories."""
    items: list[CategoryResponse]
    total: int
