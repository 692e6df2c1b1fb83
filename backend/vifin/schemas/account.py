"""
Bank account Pydantic schemas.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class BankAccountResponse(BaseModel):
    """Schema for bank account response."""
    id: str
    bank_name: str
    account_alias: Optional[str]
    account_number_mask: Optional[str]
    account_type: str
    currency: str
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class BankAccountList(BaseModel):
    items: list[BankAccountResponse]
    total: int
