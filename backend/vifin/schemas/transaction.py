"""
Transaction schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from vifin.models.transaction import TransactionType, ClassificationSource
from vifin.schemas.category import CategorySummary


class TransactionCreate(BaseModel):
    """Manually entered transaction."""
    amount: Decimal = Field(..., gt=0)
    type: TransactionType
    category_id: str
    description: Optional[str] = Field(None, max_length=500)
    posted_at: Optional[datetime] = None
    bank_account_id: Optional[str] = None


class TransactionUpdate(BaseModel):
    category_id: Optional[str] = None
    notes: Optional[str] = None


class TransactionResponse(BaseModel):
    id: str
    user_id: str
    bank_account_id: str
    external_txn_id: Optional[str]
    amount: Decimal
    type: TransactionType
    raw_description: str
    normalized_description: Optional[str]
    posted_at: datetime
    category_id: Optional[str]
    category: Optional[CategorySummary] = None
    classification_source: ClassificationSource
    mcc: Optional[str]
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TransactionListResponse(BaseModel):
    items: list[TransactionResponse]
    total: int
    page: int
    pages: int


class BulkCategorizeRequest(BaseModel):
    transaction_ids: list[str] = Field(..., min_length=1)
    category_id: str


class BulkCategorizeResponse(BaseModel):
    success_count: int
    failed_count: int
    failed_ids: list[str]
