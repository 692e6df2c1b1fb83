"""
Sepay webhook and sync endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Query
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from vifin.config import settings
from vifin.database import get_db
from vifin.dependencies import get_current_user_id
from vifin.schemas.account import BankAccountResponse
from vifin.schemas.transaction import TransactionResponse
from vifin.schemas.webhook import (
    WebhookResponse,
    SimulateWebhookRequest,
    LinkAccountRequest,
    SyncRequest,
    SyncResult,
)
from vifin.services import bank_account_service, sepay_client, webhook_service

router = APIRouter(prefix="/sepay", tags=["sepay"])


@router.post("/webhook", response_model=WebhookResponse, response_model_exclude_none=True)
async def receive_webhook(request: Request, db: Session = Depends(get_db)):
    """
    Public endpoint Sepay pushes transactions to.

    The signature covers the raw bytes, so the body is read before parsing.
    """
    body = await request.body()
    signature = request.headers.get(settings.sepay_signature_header)
    timestamp = request.headers.get(settings.sepay_timestamp_header)
    return await run_in_threadpool(webhook_service.handle_webhook, db, body, signature, timestamp)


@router.post("/webhook/simulate", response_model=WebhookResponse, response_model_exclude_none=True)
def simulate_webhook(
    data: SimulateWebhookRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Run a synthetic transaction through the ingestion pipeline."""
    result = webhook_service.simulate_webhook(
        db, user_id, data.amount, data.content, data.transfer_type, data.account_id
    )
    return WebhookResponse(message="Transaction processed", transaction_id=result.transaction.id)


@router.get("/webhook/logs", response_model=list[TransactionResponse])
def webhook_logs(
    limit: int = Query(50, ge=1, le=200),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Recent transactions received from external sources."""
    return webhook_service.get_webhook_logs(db, user_id, limit)


@router.post("/link-account", response_model=BankAccountResponse)
def link_account(
    data: LinkAccountRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Register a bank account so incoming webhooks can be routed to the user."""
    return bank_account_service.link_account(
        db, user_id, data.account_number, data.bank_code, data.account_alias
    )


@router.post("/sync", response_model=SyncResult)
def sync(
    data: SyncRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Pull transactions from the Sepay API for one account."""
    return sepay_client.sync_transactions(
        db, user_id, data.account_number, data.from_date, data.to_date, data.limit
    )


@router.get("/test")
def test_connection(user_id: str = Depends(get_current_user_id)):
    """Check the configured Sepay API key."""
    client = sepay_client.SepayClient()
    client.test_connection()
    return {"success": True, "message": "Sepay connection OK"}
