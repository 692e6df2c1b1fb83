"""
Google Sheets import schemas.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional, List
from vifin.schemas.webhook import SepayWebhookPayload


class SheetSyncRequest(BaseModel):
    spreadsheet_id: Optional[str] = None
    range: Optional[str] = None


class SheetImportRequest(BaseModel):
    """Rows as exported from the sheet, header row included."""
    rows: List[List[Any]] = Field(..., min_length=1)


class SheetPreviewResponse(BaseModel):
    headers: List[str]
    sample_rows: List[List[str]]
    total_rows: int
    payloads: List[SepayWebhookPayload]
