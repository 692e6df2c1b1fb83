"""
Sepay webhook schemas.

Field names follow Sepay's camelCase wire format via aliases.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal


class SepayWebhookPayload(BaseModel):
    """Transaction notification pushed by Sepay (or built from a sheet row)."""
    id: Optional[int] = None
    gateway: Optional[str] = None
    transaction_date: Optional[str] = Field(None, alias="transactionDate")
    account_number: Optional[str] = Field(None, alias="accountNumber")
    sub_account: Optional[str] = Field(None, alias="subAccount")
    code: Optional[str] = None
    content: Optional[str] = None
    transfer_type: Optional[str] = Field(None, alias="transferType")
    description: Optional[str] = None
    transfer_amount: Optional[Decimal] = Field(None, alias="transferAmount")
    reference_code: Optional[str] = Field(None, alias="referenceCode")
    accumulated: Optional[Decimal] = None

    model_config = {"populate_by_name": True}

    @field_validator("account_number", "sub_account", "code", "reference_code", mode="before")
    @classmethod
    def coerce_numbers_to_text(cls, v):
        # Banks send account numbers and references as JSON numbers at times
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class WebhookResponse(BaseModel):
    """Acknowledgement returned to the aggregator."""
    success: bool = True
    message: str
    transaction_id: Optional[str] = Field(None, alias="transactionId")

    model_config = {"populate_by_name": True}


class SimulateWebhookRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)
    content: str = Field(..., min_length=1, max_length=500)
    transfer_type: str = Field("out", pattern=r"^(in|out)$")
    account_id: Optional[str] = None


class LinkAccountRequest(BaseModel):
    account_number: str = Field(..., min_length=4, max_length=50)
    bank_code: str = Field(..., min_length=2, max_length=50)
    account_alias: Optional[str] = Field(None, max_length=100)


class SyncRequest(BaseModel):
    account_number: str = Field(..., min_length=4)
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None
    limit: int = Field(100, ge=1, le=1000)


class SyncResult(BaseModel):
    synced: int = 0
    skipped: int = 0
    errors: int = 0
