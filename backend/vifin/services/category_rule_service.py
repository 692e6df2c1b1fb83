"""Static keyword rules: lowest priority number wins, first match only."""

import logging
from typing import List, NamedTuple, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vifin.errors import NotFoundError, ValidationError
from vifin.models.category import Category
from vifin.models.category_rule import CategoryRule
from vifin.models.transaction import Transaction
from vifin.services.pattern_learner import extract_keywords
from vifin.services.text_normalizer import normalize

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 5


class RuleMatch(NamedTuple):
    category: Category
    rule: CategoryRule
    confidence: float


def categorize_by_rules(db: Session, description: str) -> Optional[RuleMatch]:
    """First active rule whose normalized keyword occurs in the description."""
    normalized = normalize(description)
    if not normalized:
        return None

    rules = db.query(CategoryRule).filter(
        CategoryRule.is_active == True
    ).order_by(CategoryRule.priority.asc(), CategoryRule.id.asc()).all()

    for rule in rules:
        if rule.keyword_normalized and rule.keyword_normalized in normalized:
            confidence = max(0.5, 1 - rule.priority * 0.1)
            return RuleMatch(rule.category, rule, round(confidence, 2))
    return None


def get_all_rules(db: Session) -> List[CategoryRule]:
    return db.query(CategoryRule).order_by(
        CategoryRule.priority.asc(),
        CategoryRule.keyword.asc()
    ).all()


def get_rules_by_category(db: Session, category_id: str) -> List[CategoryRule]:
    return db.query(CategoryRule).filter(
        CategoryRule.category_id == category_id
    ).order_by(CategoryRule.priority.asc(), CategoryRule.keyword.asc()).all()


def _get_rule(db: Session, rule_id: int) -> CategoryRule:
    rule = db.query(CategoryRule).filter(CategoryRule.id == rule_id).first()
    if not rule:
        raise NotFoundError("Rule not found")
    return rule


def create_rule(db: Session, category_id: str, keyword: str, priority: int = DEFAULT_PRIORITY) -> CategoryRule:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError("Category not found")

    keyword = keyword.strip()
    existing = db.query(CategoryRule).filter(
        CategoryRule.keyword == keyword,
        CategoryRule.category_id == category_id
    ).first()
    if existing:
        raise ValidationError("Rule with this keyword already exists for this category")

    rule = CategoryRule(
        category_id=category_id,
        keyword=keyword,
        keyword_normalized=normalize(keyword),
        priority=priority,
        is_active=True,
    )
    db.add(rule)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError("Rule with this keyword already exists for this category")
    db.refresh(rule)
    return rule


def update_rule(
    db: Session,
    rule_id: int,
    keyword: Optional[str] = None,
    priority: Optional[int] = None,
    is_active: Optional[bool] = None
) -> CategoryRule:
    rule = _get_rule(db, rule_id)

    if keyword is not None:
        rule.keyword = keyword.strip()
        rule.keyword_normalized = normalize(keyword)
    if priority is not None:
        rule.priority = priority
    if is_active is not None:
        rule.is_active = is_active

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError("Rule with this keyword already exists for this category")
    db.refresh(rule)
    return rule


def delete_rule(db: Session, rule_id: int) -> None:
    rule = _get_rule(db, rule_id)
    db.delete(rule)
    db.commit()


def create_rule_from_transaction(db: Session, transaction_id: str, category_id: str, user_id: str) -> CategoryRule:
    """Turn a transaction's leading keyword into a rule, or promote the existing one."""
    transaction = db.query(Transaction).filter(
        Transaction.id == transaction_id,
        Transaction.user_id == user_id
    ).first()
    if not transaction:
        raise NotFoundError("Transaction not found")

    keywords = extract_keywords(transaction.normalized_description or transaction.raw_description)
    if not keywords:
        raise ValidationError("Could not extract keywords from transaction description")

    keyword = keywords[0].upper()
    existing = db.query(CategoryRule).filter(
        CategoryRule.keyword_normalized == normalize(keyword),
        CategoryRule.category_id == category_id
    ).first()

    if existing:
        existing.priority = max(0, existing.priority - 1)
        db.commit()
        db.refresh(existing)
        logger.info("Promoted rule %s (%s) to priority %d", existing.id, existing.keyword, existing.priority)
        return existing

    return create_rule(db, category_id, keyword, DEFAULT_PRIORITY)
