"""
Categorization pattern schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional
from vifin.models.category_pattern import PatternType
from vifin.schemas.category import CategorySummary


class PatternResponse(BaseModel):
    id: int
    pattern: str
    pattern_type: PatternType
    category_id: str
    category: Optional[CategorySummary] = None
    confidence: Decimal
    usage_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PatternList(BaseModel):
    items: list[PatternResponse]
    total: int


class CategoryUpdateRequest(BaseModel):
    """Manual category correction for one transaction."""
    category_id: str = Field(..., min_length=1)


class AutoCategorizeResponse(BaseModel):
    updated: int
