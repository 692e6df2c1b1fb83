"""Service for anomaly alert detection and management."""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Dict, Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from vifin.config import settings
from vifin.errors import NotFoundError
from vifin.models.alert import Alert, AlertType
from vifin.models.category import Category
from vifin.models.transaction import Transaction, TransactionType

logger = logging.getLogger(__name__)

UNUSUAL_SPENDING_WINDOW_DAYS = 30
SPIKE_BASELINE_MONTHS = 3


def create_alert(
    db: Session,
    user_id: str,
    alert_type: AlertType,
    message: str,
    payload: Optional[Dict[str, Any]] = None
) -> Alert:
    alert = Alert(
        user_id=user_id,
        alert_type=alert_type,
        message=message,
        payload=payload,
    )
    db.add(alert)
    db.commit()
    db.refresh(alert)
    logger.info("Created %s alert %s for user %s", alert_type.value, alert.id, user_id)
    return alert


def find_existing_alert(
    db: Session,
    user_id: str,
    alert_type: AlertType,
    **payload_match: Any
) -> Optional[Alert]:
    """Return an alert of this type whose payload has all the given keys."""
    candidates = db.query(Alert).filter(
        Alert.user_id == user_id,
        Alert.alert_type == alert_type
    ).all()

    for alert in candidates:
        payload = alert.payload or {}
        if all(payload.get(key) == value for key, value in payload_match.items()):
            return alert
    return None


def _month_start(moment: datetime, months_back: int = 0) -> datetime:
    year, month = moment.year, moment.month - months_back
    while month < 1:
        month += 12
        year -= 1
    return datetime(year, month, 1)


def _category_spending(db: Session, user_id: str, category_id: str, start: datetime, end: datetime) -> Decimal:
    total = db.query(func.sum(Transaction.amount)).filter(
        Transaction.user_id == user_id,
        Transaction.category_id == category_id,
        Transaction.type == TransactionType.expense,
        Transaction.posted_at >= start,
        Transaction.posted_at < end
    ).scalar()
    return Decimal(str(total)) if total is not None else Decimal("0")


def check_large_transaction(db: Session, transaction: Transaction) -> Optional[Alert]:
    """Amount at or above the absolute threshold."""
    threshold = Decimal(str(settings.large_transaction_threshold))
    amount = Decimal(str(transaction.amount))
    if amount < threshold:
        return None

    return create_alert(
        db,
        transaction.user_id,
        AlertType.LARGE_TRANSACTION,
        f"Large transaction: {amount:,.0f} VND",
        {
            "transactionId": transaction.id,
            "amount": float(amount),
            "threshold": float(threshold),
        },
    )


def check_unusual_spending(db: Session, transaction: Transaction) -> Optional[Alert]:
    """Amount well above the trailing 30-day average expense."""
    window_start = transaction.posted_at - timedelta(days=UNUSUAL_SPENDING_WINDOW_DAYS)

    count, average = db.query(func.count(Transaction.id), func.avg(Transaction.amount)).filter(
        Transaction.user_id == transaction.user_id,
        Transaction.type == TransactionType.expense,
        Transaction.id != transaction.id,
        Transaction.posted_at >= window_start,
        Transaction.posted_at <= transaction.posted_at
    ).one()

    if count < settings.unusual_spending_min_history or not average:
        return None

    average = Decimal(str(average))
    multiplier = Decimal(str(settings.unusual_spending_multiplier))
    amount = Decimal(str(transaction.amount))
    if amount <= average * multiplier:
        return None

    return create_alert(
        db,
        transaction.user_id,
        AlertType.UNUSUAL_SPENDING,
        f"Unusual spending: {amount:,.0f} VND is {amount / average:.1f}x your 30-day average",
        {
            "transactionId": transaction.id,
            "amount": float(amount),
            "average": float(round(average, 2)),
            "multiplier": float(multiplier),
        },
    )


def check_category_spike(db: Session, transaction: Transaction) -> Optional[Alert]:
    """This month's category spending against the average of the three months before."""
    if not transaction.category_id:
        return None

    month_start = _month_start(transaction.posted_at)
    next_month_start = (month_start + timedelta(days=32)).replace(day=1)
    month_key = month_start.strftime("%Y-%m")

    # Keyed on the posted month, not on created_at: posted_at is bank local time
    existing = find_existing_alert(
        db, transaction.user_id, AlertType.CATEGORY_SPIKE,
        categoryId=transaction.category_id, month=month_key
    )
    if existing:
        return None

    current = _category_spending(db, transaction.user_id, transaction.category_id, month_start, next_month_start)
    baseline_start = _month_start(transaction.posted_at, SPIKE_BASELINE_MONTHS)
    historical = _category_spending(db, transaction.user_id, transaction.category_id, baseline_start, month_start)
    average = historical / SPIKE_BASELINE_MONTHS
    if average <= 0:
        return None

    percentage = current / average * 100
    if percentage < Decimal(str(settings.category_spike_threshold)):
        return None

    category = db.query(Category).filter(Category.id == transaction.category_id).first()
    category_name = category.name if category else "this category"

    return create_alert(
        db,
        transaction.user_id,
        AlertType.CATEGORY_SPIKE,
        f"Spending on {category_name} is at {percentage:.0f}% of your 3-month average",
        {
            "categoryId": transaction.category_id,
            "categoryName": category_name,
            "month": month_key,
            "currentSpending": float(current),
            "averageSpending": float(round(average, 2)),
            "percentage": float(round(percentage, 1)),
        },
    )


def run_transaction_checks(db: Session, transaction: Transaction) -> List[Alert]:
    """Run every anomaly check for a freshly persisted expense."""
    if not settings.alerts_enabled or transaction.type != TransactionType.expense:
        return []

    alerts = []
    for check in (check_large_transaction, check_unusual_spending, check_category_spike):
        try:
            alert = check(db, transaction)
        except Exception:
            # The transaction is already stored; a failed check must not undo it
            db.rollback()
            logger.exception("Alert check %s failed for transaction %s", check.__name__, transaction.id)
            continue
        if alert:
            alerts.append(alert)
    return alerts


def get_alerts(
    db: Session,
    user_id: str,
    unread_only: bool = False,
    alert_type: Optional[AlertType] = None,
    limit: int = 50
) -> List[Alert]:
    """Get alerts with optional filters."""
    query = db.query(Alert).filter(Alert.user_id == user_id)

    if unread_only:
        query = query.filter(Alert.is_read == False)

    if alert_type:
        query = query.filter(Alert.alert_type == alert_type)

    return query.order_by(Alert.created_at.desc()).limit(limit).all()


def get_unread_count(db: Session, user_id: str) -> int:
    return db.query(Alert).filter(
        Alert.user_id == user_id,
        Alert.is_read == False
    ).count()


def mark_as_read(db: Session, alert_id: str, user_id: str) -> Alert:
    alert = db.query(Alert).filter(Alert.id == alert_id, Alert.user_id == user_id).first()
    if not alert:
        raise NotFoundError("Alert not found")
    alert.is_read = True
    db.commit()
    db.refresh(alert)
    return alert


def mark_all_read(db: Session, user_id: str) -> int:
    """Mark all alerts as read. Returns count updated."""
    result = db.query(Alert).filter(
        Alert.user_id == user_id,
        Alert.is_read == False
    ).update({Alert.is_read: True})
    db.commit()
    return result


def delete_alert(db: Session, alert_id: str, user_id: str) -> None:
    alert = db.query(Alert).filter(Alert.id == alert_id, Alert.user_id == user_id).first()
    if not alert:
        raise NotFoundError("Alert not found")
    db.delete(alert)
    db.commit()
