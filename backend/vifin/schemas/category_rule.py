"""
Category rule schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from vifin.schemas.category import CategorySummary


class CategoryRuleCreate(BaseModel):
    category_id: str
    keyword: str = Field(..., min_length=1, max_length=255)
    priority: int = Field(5, ge=0, le=100)


class CategoryRuleUpdate(BaseModel):
    keyword: Optional[str] = Field(None, min_length=1, max_length=255)
    priority: Optional[int] = Field(None, ge=0, le=100)
    is_active: Optional[bool] = None


class CategoryRuleResponse(BaseModel):
    id: int
    category_id: str
    category: Optional[CategorySummary] = None
    keyword: str
    keyword_normalized: str
    priority: int
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class RuleFromTransactionRequest(BaseModel):
    transaction_id: str
    category_id: str


class RuleTestRequest(BaseModel):
    description: str = Field(..., min_length=1)


class RuleTestResponse(BaseModel):
    matched: bool
    category: Optional[CategorySummary] = None
    rule_id: Optional[int] = None
    keyword: Optional[str] = None
    confidence: Optional[float] = None
