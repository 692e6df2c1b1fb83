"""
Sepay webhook ingestion.

Each notification goes through signature check, validation, dedup,
account resolution, categorization, persistence and alerting. Apart from
a signature failure in production, every outcome is acknowledged so the
aggregator never retries a payload that was already handled or cannot be.
"""

import enum
import hashlib
import hmac
import json
import logging
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, NamedTuple, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vifin.config import settings
from vifin.errors import AuthenticationError, NotFoundError
from vifin.models.bank_account import BankAccount
from vifin.models.transaction import Transaction, TransactionType, ClassificationSource
from vifin.schemas.webhook import SepayWebhookPayload, WebhookResponse
from vifin.services import alerts_service, bank_account_service
from vifin.services.categorization_service import CategorizationService
from vifin.services.text_normalizer import clean_description

logger = logging.getLogger(__name__)

SEPAY_SOURCE = "sepay"

DATE_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y",
]


class IngestStatus(str, enum.Enum):
    processed = "processed"
    duplicate = "duplicate"


class IngestResult(NamedTuple):
    status: IngestStatus
    transaction: Transaction


def verify_signature(
    body: bytes,
    signature: str,
    timestamp: Optional[str],
    secret: str,
    tolerance_seconds: int,
    now_ms: Optional[int] = None
) -> bool:
    """
    Check an HMAC-SHA256 hex signature over the raw body.

    With a timestamp (epoch milliseconds) the signed data is
    ``"<timestamp>.<body>"`` and the timestamp must be within tolerance.
    """
    if timestamp:
        try:
            timestamp_ms = int(timestamp)
        except ValueError:
            logger.warning("Webhook timestamp %r is not an integer", timestamp)
            return False
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        if abs(now_ms - timestamp_ms) > tolerance_seconds * 1000:
            logger.warning("Webhook timestamp outside the %ss tolerance window", tolerance_seconds)
            return False
        data = timestamp.encode() + b"." + body
    else:
        data = body

    expected = hmac.new(secret.encode(), data, hashlib.sha256).hexdigest()
    return hmac.compare_digest(signature.strip().lower(), expected)


def sign_payload(body: bytes, secret: str, timestamp: Optional[str] = None) -> str:
    """Signature a sender would attach; used by the simulator and tests."""
    data = timestamp.encode() + b"." + body if timestamp else body
    return hmac.new(secret.encode(), data, hashlib.sha256).hexdigest()


def transaction_code(payload: SepayWebhookPayload, source: str = SEPAY_SOURCE) -> str:
    """Idempotency key: the reference code, else ``<source>_<id>``."""
    reference = (payload.reference_code or "").strip()
    if reference:
        return reference
    return f"{source}_{payload.id}"


def validate_payload(payload: SepayWebhookPayload) -> Optional[str]:
    """Reason the payload cannot be ingested, or None."""
    if not payload.account_number or not payload.account_number.strip():
        return "Invalid payload - missing accountNumber"
    if payload.transfer_amount is None:
        return "Invalid payload - missing transferAmount"
    if not (payload.reference_code or "").strip() and payload.id is None:
        return "Invalid payload - missing referenceCode and id"
    return None


def parse_transaction_date(value: Optional[str]) -> datetime:
    """Parse Sepay/sheet dates; naive UTC now when missing or unreadable."""
    if value:
        text = str(value).strip()
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Unparseable transaction date %r, using current time", text)
        else:
            if parsed.tzinfo is not None:
                parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
            return parsed
    return datetime.utcnow()


def resolve_account(db: Session, account_number: str) -> Tuple[Optional[BankAccount], bool]:
    """Find the receiving account. Returns (account, used_fallback)."""
    account = bank_account_service.find_account_by_number(db, account_number)
    if account:
        return account, False

    if settings.webhook_fallback_to_any_account:
        fallback = bank_account_service.get_fallback_account(db)
        if fallback:
            logger.warning(
                "No account matches *%s, routing to fallback account %s",
                account_number[-4:], fallback.id
            )
            return fallback, True
    return None, False


def _find_existing(db: Session, user_id: str, external_id: str) -> Optional[Transaction]:
    return db.query(Transaction).filter(
        Transaction.user_id == user_id,
        Transaction.external_txn_id == external_id
    ).first()


def ingest_payload(
    db: Session,
    payload: SepayWebhookPayload,
    account: BankAccount,
    classification_source: ClassificationSource = ClassificationSource.AUTO,
    source: str = SEPAY_SOURCE
) -> IngestResult:
    """
    Dedup, categorize, persist and alert one validated payload for an account.

    Pattern reinforcement and the insert commit together, so a delivery that
    loses the race on the (user, external id) constraint leaves no trace.
    """
    user_id = account.user_id
    external_id = transaction_code(payload, source)

    existing = _find_existing(db, user_id, external_id)
    if existing:
        logger.info("Duplicate delivery %s for user %s", external_id, user_id)
        return IngestResult(IngestStatus.duplicate, existing)

    description = payload.content or payload.description or ""
    category = CategorizationService(db).categorize(description, user_id)

    is_income = (payload.transfer_type or "").strip().lower() == "in"
    transaction = Transaction(
        user_id=user_id,
        bank_account_id=account.id,
        external_txn_id=external_id,
        amount=abs(Decimal(payload.transfer_amount)),
        type=TransactionType.income if is_income else TransactionType.expense,
        raw_description=description,
        normalized_description=clean_description(description),
        posted_at=parse_transaction_date(payload.transaction_date),
        category_id=category.id,
        classification_source=classification_source,
    )
    db.add(transaction)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = _find_existing(db, user_id, external_id)
        if existing is None:
            raise
        logger.info("Concurrent duplicate delivery %s for user %s", external_id, user_id)
        return IngestResult(IngestStatus.duplicate, existing)

    db.refresh(transaction)
    logger.info(
        "Stored %s transaction %s (%s) in category %s",
        transaction.type.value, transaction.id, external_id, category.name
    )

    alerts_service.run_transaction_checks(db, transaction)
    return IngestResult(IngestStatus.processed, transaction)


def _check_signature(body: bytes, signature: Optional[str], timestamp: Optional[str]) -> bool:
    """False means acknowledge and drop; raises in production."""
    secret = settings.sepay_webhook_secret
    if not secret:
        return True

    if not signature:
        if settings.is_production:
            raise AuthenticationError("Missing webhook signature")
        logger.warning("Unsigned webhook accepted outside production")
        return True

    valid = verify_signature(
        body, signature, timestamp, secret, settings.webhook_timestamp_tolerance_seconds
    )
    if valid:
        return True
    if settings.is_production:
        raise AuthenticationError("Invalid webhook signature")
    logger.warning("Invalid webhook signature, acknowledging without processing")
    return False


def handle_webhook(
    db: Session,
    body: bytes,
    signature: Optional[str] = None,
    timestamp: Optional[str] = None
) -> WebhookResponse:
    """Run a raw Sepay delivery through the pipeline and build the acknowledgement."""
    if not _check_signature(body, signature, timestamp):
        return WebhookResponse(message="Received")

    try:
        payload = SepayWebhookPayload.model_validate(json.loads(body or b"null"))
    except ValueError as e:
        logger.warning("Malformed webhook body: %s", e)
        return WebhookResponse(message="Invalid payload - malformed body")

    problem = validate_payload(payload)
    if problem:
        logger.warning("%s (id=%s)", problem, payload.id)
        return WebhookResponse(message=problem)

    try:
        account, used_fallback = resolve_account(db, payload.account_number)
        if account is None:
            logger.warning("No account matches *%s", payload.account_number[-4:])
            return WebhookResponse(message="No matching user found")

        result = ingest_payload(db, payload, account)
    except Exception as e:
        db.rollback()
        logger.exception("Webhook processing failed for id=%s", payload.id)
        return WebhookResponse(message=f"Error processing webhook: {e}")

    if result.status == IngestStatus.duplicate:
        return WebhookResponse(message="Duplicate transaction", transaction_id=result.transaction.id)

    message = "Transaction processed (fallback account)" if used_fallback else "Transaction processed"
    return WebhookResponse(message=message, transaction_id=result.transaction.id)


def simulate_webhook(
    db: Session,
    user_id: str,
    amount: Decimal,
    content: str,
    transfer_type: str = "out",
    account_id: Optional[str] = None
) -> IngestResult:
    """Push a synthetic delivery for one of the user's accounts through the pipeline."""
    query = db.query(BankAccount).filter(
        BankAccount.user_id == user_id,
        BankAccount.status == bank_account_service.ACTIVE
    )
    if account_id:
        query = query.filter(BankAccount.id == account_id)
    account = query.order_by(BankAccount.created_at.asc()).first()
    if not account:
        raise NotFoundError("No active bank account to simulate against")

    now = datetime.utcnow()
    payload = SepayWebhookPayload(
        id=int(now.timestamp() * 1000),
        gateway=account.bank_name,
        transaction_date=now.strftime("%Y-%m-%d %H:%M:%S"),
        account_number=account.account_number_mask or "",
        content=content,
        transfer_type=transfer_type,
        transfer_amount=amount,
        reference_code=f"SIM_{int(now.timestamp() * 1000)}",
    )
    return ingest_payload(db, payload, account)


def get_webhook_logs(db: Session, user_id: str, limit: int = 50) -> List[Transaction]:
    """Most recent transactions that arrived with an external id."""
    return db.query(Transaction).filter(
        Transaction.user_id == user_id,
        Transaction.external_txn_id.isnot(None)
    ).order_by(Transaction.created_at.desc()).limit(limit).all()
