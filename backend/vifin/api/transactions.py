"""
Transaction API endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from vifin.database import get_db
from vifin.dependencies import get_current_user_id
from vifin.models.transaction import TransactionType, ClassificationSource
from vifin.schemas.transaction import (
    TransactionCreate,
    TransactionResponse,
    TransactionUpdate,
    TransactionListResponse,
    BulkCategorizeRequest,
    BulkCategorizeResponse,
)
from vifin.services import transaction_service

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=TransactionListResponse)
def list_transactions(
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    bank_account_id: Optional[str] = None,
    category_id: Optional[str] = None,
    type: Optional[TransactionType] = None,
    source: Optional[ClassificationSource] = None,
    search: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """List transactions with filtering and pagination"""
    transactions, total = transaction_service.list_transactions(
        db,
        user_id,
        page=page,
        per_page=per_page,
        bank_account_id=bank_account_id,
        category_id=category_id,
        txn_type=type,
        source=source,
        search=search,
    )
    pages = (total + per_page - 1) // per_page

    return TransactionListResponse(
        items=[TransactionResponse.model_validate(t) for t in transactions],
        total=total,
        page=page,
        pages=pages
    )


@router.post("", response_model=TransactionResponse, status_code=201)
def create_transaction(
    data: TransactionCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Record a manual transaction"""
    return transaction_service.create_transaction(db, user_id, data)


@router.post("/bulk-categorize", response_model=BulkCategorizeResponse)
def bulk_categorize(
    data: BulkCategorizeRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Set the category of several transactions at once"""
    return transaction_service.bulk_update_category(db, data.transaction_ids, data.category_id, user_id)


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return transaction_service.get_transaction(db, transaction_id, user_id)


@router.patch("/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: str,
    data: TransactionUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Update notes or category; a category change is learned from"""
    return transaction_service.update_transaction(
        db,
        transaction_id,
        user_id,
        category_id=data.category_id,
        notes=data.notes,
        notes_set="notes" in data.model_fields_set,
    )
