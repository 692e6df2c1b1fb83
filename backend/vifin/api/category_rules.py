"""
Keyword rule endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vifin.database import get_db
from vifin.dependencies import get_current_user_id
from vifin.schemas.category import CategorySummary
from vifin.schemas.category_rule import (
    CategoryRuleCreate,
    CategoryRuleUpdate,
    CategoryRuleResponse,
    RuleFromTransactionRequest,
    RuleTestRequest,
    RuleTestResponse,
)
from vifin.services import category_rule_service

router = APIRouter(prefix="/category-rules", tags=["category-rules"])


@router.get("", response_model=List[CategoryRuleResponse])
def list_rules(
    category_id: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    if category_id:
        return category_rule_service.get_rules_by_category(db, category_id)
    return category_rule_service.get_all_rules(db)


@router.post("", response_model=CategoryRuleResponse, status_code=201)
def create_rule(
    data: CategoryRuleCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return category_rule_service.create_rule(db, data.category_id, data.keyword, data.priority)


@router.post("/from-transaction", response_model=CategoryRuleResponse)
def create_rule_from_transaction(
    data: RuleFromTransactionRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create a rule from a transaction's description, or promote the matching one."""
    return category_rule_service.create_rule_from_transaction(
        db, data.transaction_id, data.category_id, user_id
    )


@router.post("/test", response_model=RuleTestResponse)
def test_rules(
    data: RuleTestRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Show which rule, if any, would categorize a description."""
    match = category_rule_service.categorize_by_rules(db, data.description)
    if not match:
        return RuleTestResponse(matched=False)
    return RuleTestResponse(
        matched=True,
        category=CategorySummary.model_validate(match.category),
        rule_id=match.rule.id,
        keyword=match.rule.keyword,
        confidence=match.confidence,
    )


@router.patch("/{rule_id}", response_model=CategoryRuleResponse)
def update_rule(
    rule_id: int,
    data: CategoryRuleUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return category_rule_service.update_rule(
        db, rule_id, keyword=data.keyword, priority=data.priority, is_active=data.is_active
    )


@router.delete("/{rule_id}", status_code=204)
def delete_rule(
    rule_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    category_rule_service.delete_rule(db, rule_id)
