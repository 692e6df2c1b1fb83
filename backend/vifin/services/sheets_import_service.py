"""Import transactions from the Sepay Google Sheets export."""

import logging
from typing import Any, List, Optional, Sequence

import httpx
from sqlalchemy.orm import Session

from vifin.config import settings
from vifin.errors import ExternalApiError, ValidationError
from vifin.models.transaction import ClassificationSource
from vifin.parsers.sheet_parser import SheetParser
from vifin.schemas.sheets import SheetPreviewResponse
from vifin.schemas.webhook import SyncResult
from vifin.services import bank_account_service
from vifin.services.webhook_service import IngestStatus, ingest_payload, validate_payload

logger = logging.getLogger(__name__)

SHEETS_SOURCE = "gsheets"
CSV_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq"


def fetch_sheet_rows(
    spreadsheet_id: Optional[str] = None,
    sheet_range: Optional[str] = None,
    transport: Optional[httpx.BaseTransport] = None
) -> List[List[str]]:
    """Download a public sheet as CSV and split it into rows."""
    spreadsheet_id = spreadsheet_id or settings.google_sheets_spreadsheet_id
    if not spreadsheet_id:
        raise ValidationError("spreadsheet_id is required")

    params = {
        "tqx": "out:csv",
        "sheet": "Sheet1",
        "range": sheet_range or settings.google_sheets_range,
    }
    url = CSV_EXPORT_URL.format(sheet_id=spreadsheet_id)
    logger.info("Reading Google Sheet %s (%s)", spreadsheet_id, params["range"])

    try:
        with httpx.Client(timeout=30.0, transport=transport, follow_redirects=True) as client:
            response = client.get(url, params=params, headers={"Accept": "text/csv"})
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ExternalApiError(f"Google Sheets returned {e.response.status_code}")
    except httpx.RequestError as e:
        raise ExternalApiError(f"Google Sheets unreachable: {e}")

    return SheetParser().parse_csv(response.text)


def preview_rows(rows: Sequence[Sequence[Any]]) -> SheetPreviewResponse:
    """Headers, a few raw rows and the payloads an import would ingest."""
    parser = SheetParser()
    headers, sample = parser.get_preview(rows)
    payloads = parser.parse(rows)
    return SheetPreviewResponse(
        headers=headers,
        sample_rows=sample,
        total_rows=max(len(rows) - 1, 0),
        payloads=payloads,
    )


def import_rows(db: Session, user_id: str, rows: Sequence[Sequence[Any]]) -> SyncResult:
    """
    Feed sheet rows through the webhook pipeline as GOOGLE_SHEETS transactions.

    The first row is the header. Rows missing an account number or amount are
    skipped, already-imported rows count as skipped, and a failing row is
    counted as an error without stopping the import.
    """
    parser = SheetParser()
    result = SyncResult()

    for row in rows[1:]:
        try:
            payload = parser.to_payload(row)
        except ValueError as e:
            logger.warning("Unreadable sheet row: %s", e)
            result.errors += 1
            continue

        if payload is None or validate_payload(payload):
            result.skipped += 1
            continue

        try:
            account = bank_account_service.find_or_create_account(
                db, user_id, payload.account_number, payload.gateway
            )
            outcome = ingest_payload(
                db, payload, account,
                classification_source=ClassificationSource.GOOGLE_SHEETS,
                source=SHEETS_SOURCE,
            )
        except Exception:
            db.rollback()
            logger.exception("Failed to import sheet row for account *%s", payload.account_number[-4:])
            result.errors += 1
            continue

        if outcome.status == IngestStatus.duplicate:
            result.skipped += 1
        else:
            result.synced += 1

    logger.info(
        "Sheet import for user %s: %d synced, %d skipped, %d errors",
        user_id, result.synced, result.skipped, result.errors
    )
    return result


def sync_sheet(
    db: Session,
    user_id: str,
    spreadsheet_id: Optional[str] = None,
    sheet_range: Optional[str] = None
) -> SyncResult:
    rows = fetch_sheet_rows(spreadsheet_id, sheet_range)
    return import_rows(db, user_id, rows)
