"""Sepay user API client and pull-based transaction sync."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy.orm import Session

from vifin.config import settings
from vifin.errors import ExternalApiError
from vifin.models.transaction import ClassificationSource
from vifin.schemas.webhook import SepayWebhookPayload, SyncResult
from vifin.services import bank_account_service
from vifin.services.webhook_service import IngestStatus, ingest_payload, validate_payload

logger = logging.getLogger(__name__)


class SepayClient:

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.api_key = api_key or settings.sepay_api_key
        self.base_url = (base_url or settings.sepay_base_url).rstrip("/")
        self._transport = transport

    def _request(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.api_key:
            raise ExternalApiError("Sepay API key is not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            with httpx.Client(
                base_url=self.base_url,
                headers=headers,
                timeout=settings.sepay_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = client.get(path, params=params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Sepay API %s returned %s", path, e.response.status_code)
            raise ExternalApiError(
                f"Sepay API error: {e.response.status_code}",
                details={"path": path}
            )
        except (httpx.RequestError, ValueError) as e:
            logger.error("Sepay API %s unreachable: %s", path, e)
            raise ExternalApiError(f"Sepay API unreachable: {e}")

    def test_connection(self) -> bool:
        self._request("/transactions/list", {"limit": 1})
        return True

    def get_bank_accounts(self) -> List[Dict[str, Any]]:
        data = self._request("/bankaccounts/list")
        return data.get("bankaccounts", [])

    def get_transactions(
        self,
        account_number: Optional[str] = None,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"limit": limit}
        if account_number:
            params["account_number"] = account_number
        if from_date:
            params["transaction_date_min"] = from_date.strftime("%Y-%m-%d %H:%M:%S")
        if to_date:
            params["transaction_date_max"] = to_date.strftime("%Y-%m-%d %H:%M:%S")

        data = self._request("/transactions/list", params)
        return data.get("transactions", [])


def to_webhook_payload(item: Dict[str, Any]) -> SepayWebhookPayload:
    """Map a /transactions/list item onto the webhook shape."""
    amount_in = float(item.get("amount_in") or 0)
    amount_out = float(item.get("amount_out") or 0)
    return SepayWebhookPayload(
        id=int(item["id"]) if item.get("id") is not None else None,
        gateway=item.get("bank_brand_name"),
        transaction_date=item.get("transaction_date"),
        account_number=str(item.get("account_number") or ""),
        sub_account=item.get("sub_account"),
        code=item.get("code"),
        content=item.get("transaction_content"),
        transfer_type="in" if amount_in > 0 else "out",
        transfer_amount=amount_in if amount_in > 0 else amount_out,
        reference_code=item.get("reference_number"),
        accumulated=item.get("accumulated"),
    )


def sync_transactions(
    db: Session,
    user_id: str,
    account_number: str,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
    limit: int = 100,
    client: Optional[SepayClient] = None
) -> SyncResult:
    """Pull recent transactions for one account and ingest those not seen yet."""
    client = client or SepayClient()
    items = client.get_transactions(account_number, from_date, to_date, limit)
    account = bank_account_service.find_or_create_account(db, user_id, account_number)

    result = SyncResult()
    for item in items:
        try:
            payload = to_webhook_payload(item)
            if validate_payload(payload):
                result.errors += 1
                continue
            outcome = ingest_payload(db, payload, account, ClassificationSource.AUTO)
        except Exception:
            db.rollback()
            logger.exception("Failed to sync Sepay transaction %s", item.get("id"))
            result.errors += 1
            continue

        if outcome.status == IngestStatus.duplicate:
            result.skipped += 1
        else:
            result.synced += 1

    logger.info(
        "Sepay sync for user %s: %d synced, %d skipped, %d errors",
        user_id, result.synced, result.skipped, result.errors
    )
    return result
