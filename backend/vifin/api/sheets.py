"""
Google Sheets import endpoints.
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional
from sqlalchemy.orm import Session

from vifin.database import get_db
from vifin.dependencies import get_current_user_id
from vifin.schemas.sheets import SheetSyncRequest, SheetImportRequest, SheetPreviewResponse
from vifin.schemas.webhook import SyncResult
from vifin.services import sheets_import_service

router = APIRouter(prefix="/google-sheets", tags=["google-sheets"])


@router.post("/sync", response_model=SyncResult)
def sync_sheet(
    data: SheetSyncRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Fetch the configured (or given) sheet and import new rows."""
    return sheets_import_service.sync_sheet(db, user_id, data.spreadsheet_id, data.range)


@router.post("/import", response_model=SyncResult)
def import_rows(
    data: SheetImportRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Import rows sent by the client, header row first."""
    return sheets_import_service.import_rows(db, user_id, data.rows)


@router.get("/preview", response_model=SheetPreviewResponse)
def preview_sheet(
    spreadsheet_id: Optional[str] = None,
    sheet_range: Optional[str] = Query(None, alias="range"),
    user_id: str = Depends(get_current_user_id)
):
    """Fetch the sheet and show what an import would send, without storing anything."""
    rows = sheets_import_service.fetch_sheet_rows(spreadsheet_id, sheet_range)
    return sheets_import_service.preview_rows(rows)


@router.post("/preview", response_model=SheetPreviewResponse)
def preview(
    data: SheetImportRequest,
    user_id: str = Depends(get_current_user_id)
):
    return sheets_import_service.preview_rows(data.rows)
