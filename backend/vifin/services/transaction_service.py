"""Transaction queries, manual entry and bulk category changes."""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from vifin.errors import NotFoundError, ValidationError
from vifin.models.bank_account import BankAccount
from vifin.models.transaction import Transaction, TransactionType, ClassificationSource
from vifin.schemas.transaction import TransactionCreate, BulkCategorizeResponse
from vifin.services import bank_account_service, pattern_store
from vifin.services.categorization_service import CategorizationService
from vifin.services.text_normalizer import clean_description

logger = logging.getLogger(__name__)


def list_transactions(
    db: Session,
    user_id: str,
    page: int = 1,
    per_page: int = 50,
    bank_account_id: Optional[str] = None,
    category_id: Optional[str] = None,
    txn_type: Optional[TransactionType] = None,
    source: Optional[ClassificationSource] = None,
    search: Optional[str] = None
) -> Tuple[List[Transaction], int]:
    query = db.query(Transaction).filter(Transaction.user_id == user_id)

    if bank_account_id:
        query = query.filter(Transaction.bank_account_id == bank_account_id)
    if category_id:
        query = query.filter(Transaction.category_id == category_id)
    if txn_type:
        query = query.filter(Transaction.type == txn_type)
    if source:
        query = query.filter(Transaction.classification_source == source)
    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Transaction.raw_description.ilike(search_term),
                Transaction.normalized_description.ilike(search_term)
            )
        )

    total = query.count()
    transactions = query.order_by(Transaction.posted_at.desc()).offset((page - 1) * per_page).limit(per_page).all()
    return transactions, total


def get_transaction(db: Session, transaction_id: str, user_id: str) -> Transaction:
    transaction = db.query(Transaction).filter(
        Transaction.id == transaction_id,
        Transaction.user_id == user_id
    ).first()
    if not transaction:
        raise NotFoundError("Transaction not found")
    return transaction


def create_transaction(db: Session, user_id: str, data: TransactionCreate) -> Transaction:
    """Record a manually entered transaction."""
    category = pattern_store.get_visible_category(db, data.category_id, user_id)
    if not category:
        raise ValidationError("Category not found")
    if category.type.value != data.type.value:
        raise ValidationError(
            f"Category type ({category.type.value}) does not match transaction type ({data.type.value})"
        )

    if data.bank_account_id:
        account = db.query(BankAccount).filter(
            BankAccount.id == data.bank_account_id,
            BankAccount.user_id == user_id
        ).first()
        if not account:
            raise NotFoundError("Bank account not found")
    else:
        account = bank_account_service.get_or_create_manual_account(db, user_id)

    description = data.description or "Manual transaction"
    transaction = Transaction(
        user_id=user_id,
        bank_account_id=account.id,
        amount=data.amount,
        type=data.type,
        raw_description=description,
        normalized_description=clean_description(description),
        posted_at=data.posted_at or datetime.utcnow(),
        category_id=category.id,
        classification_source=ClassificationSource.MANUAL,
    )
    db.add(transaction)
    db.commit()
    db.refresh(transaction)
    return transaction


def update_transaction(
    db: Session,
    transaction_id: str,
    user_id: str,
    category_id: Optional[str] = None,
    notes: Optional[str] = None,
    notes_set: bool = False
) -> Transaction:
    """Change notes and/or category; a category change counts as a manual correction."""
    transaction = get_transaction(db, transaction_id, user_id)

    if notes_set:
        transaction.notes = notes
        db.commit()

    if category_id is not None:
        transaction = CategorizationService(db).update_category(transaction_id, category_id, user_id)

    db.refresh(transaction)
    return transaction


def bulk_update_category(
    db: Session,
    transaction_ids: List[str],
    category_id: str,
    user_id: str
) -> BulkCategorizeResponse:
    """
    Move many transactions to one category in a single commit.

    Ids that are unknown or belong to someone else are reported back
    instead of failing the batch.
    """
    category = pattern_store.get_visible_category(db, category_id, user_id)
    if not category:
        raise ValidationError("Category not found")

    success_ids = []
    failed_ids = []
    for txn_id in transaction_ids:
        transaction = db.query(Transaction).filter(
            Transaction.id == txn_id,
            Transaction.user_id == user_id
        ).first()
        if not transaction:
            failed_ids.append(txn_id)
            continue
        transaction.category_id = category.id
        transaction.classification_source = ClassificationSource.MANUAL
        success_ids.append(txn_id)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Bulk category update for user %s: %d updated, %d failed",
        user_id, len(success_ids), len(failed_ids)
    )
    return BulkCategorizeResponse(
        success_count=len(success_ids),
        failed_count=len(failed_ids),
        failed_ids=failed_ids,
    )
