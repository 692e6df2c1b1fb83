"""
Categorization endpoints: manual corrections and learned patterns.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vifin.database import get_db
from vifin.dependencies import get_current_user_id
from vifin.schemas.pattern import PatternResponse, PatternList, CategoryUpdateRequest, AutoCategorizeResponse
from vifin.schemas.transaction import TransactionResponse
from vifin.services.categorization_service import CategorizationService

router = APIRouter(prefix="/categorization", tags=["categorization"])


@router.patch("/transactions/{transaction_id}/category", response_model=TransactionResponse)
def update_transaction_category(
    transaction_id: str,
    data: CategoryUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Set a transaction's category by hand and learn patterns from it."""
    return CategorizationService(db).update_category(transaction_id, data.category_id, user_id)


@router.post("/auto-categorize", response_model=AutoCategorizeResponse)
def auto_categorize(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    updated = CategorizationService(db).auto_categorize_pending(user_id)
    return AutoCategorizeResponse(updated=updated)


@router.get("/patterns", response_model=PatternList)
def list_patterns(
    type: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """The caller's learned patterns, optionally filtered by type."""
    patterns = CategorizationService(db).get_patterns(user_id, type)
    return PatternList(
        items=[PatternResponse.model_validate(p) for p in patterns],
        total=len(patterns)
    )


@router.delete("/patterns/{pattern_id}", status_code=204)
def delete_pattern(
    pattern_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    CategorizationService(db).delete_pattern(pattern_id, user_id)
