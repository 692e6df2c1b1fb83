"""Storage operations for categorization patterns and default categories."""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import case, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vifin.models.category import Category, CategoryType, UNCATEGORIZED_KEY
from vifin.models.category_pattern import CategoryPattern, PatternType, MAX_CONFIDENCE

logger = logging.getLogger(__name__)


def get_visible_patterns(db: Session, user_id: str, pattern_type: PatternType) -> List[CategoryPattern]:
    """Global and user-owned patterns of one type, strongest first."""
    return db.query(CategoryPattern).filter(
        CategoryPattern.pattern_type == pattern_type,
        or_(CategoryPattern.user_id == user_id, CategoryPattern.user_id.is_(None))
    ).order_by(
        CategoryPattern.confidence.desc(),
        CategoryPattern.usage_count.desc(),
        CategoryPattern.id.asc()
    ).all()


def reinforce_pattern(db: Session, pattern: CategoryPattern, step: Decimal) -> None:
    """
    Bump usage by one and confidence by ``step``, saturating at 1.0.

    Runs as a single UPDATE so concurrent reinforcements do not lose
    increments. The caller owns the commit.
    """
    raised = CategoryPattern.confidence + step
    db.query(CategoryPattern).filter(CategoryPattern.id == pattern.id).update(
        {
            CategoryPattern.usage_count: CategoryPattern.usage_count + 1,
            CategoryPattern.confidence: case((raised > MAX_CONFIDENCE, MAX_CONFIDENCE), else_=raised),
        },
        synchronize_session=False,
    )
    db.expire(pattern)


def upsert_pattern(
    db: Session,
    user_id: str,
    text: str,
    pattern_type: PatternType,
    category_id: str,
    seed_confidence: Decimal,
    step: Decimal
) -> CategoryPattern:
    """Reinforce the (user, text, type, category) pattern, creating it at the seed confidence."""
    existing = db.query(CategoryPattern).filter(
        CategoryPattern.user_id == user_id,
        CategoryPattern.pattern == text,
        CategoryPattern.pattern_type == pattern_type,
        CategoryPattern.category_id == category_id
    ).first()

    if existing:
        reinforce_pattern(db, existing, step)
        return existing

    pattern = CategoryPattern(
        user_id=user_id,
        pattern=text,
        pattern_type=pattern_type,
        category_id=category_id,
        confidence=seed_confidence,
        usage_count=1
    )
    db.add(pattern)
    db.flush()
    return pattern


def list_user_patterns(
    db: Session,
    user_id: str,
    pattern_type: Optional[PatternType] = None
) -> List[CategoryPattern]:
    query = db.query(CategoryPattern).filter(CategoryPattern.user_id == user_id)
    if pattern_type:
        query = query.filter(CategoryPattern.pattern_type == pattern_type)
    return query.order_by(CategoryPattern.created_at.desc(), CategoryPattern.id.desc()).all()


def get_user_pattern(db: Session, pattern_id: int, user_id: str) -> Optional[CategoryPattern]:
    return db.query(CategoryPattern).filter(
        CategoryPattern.id == pattern_id,
        CategoryPattern.user_id == user_id
    ).first()


def get_visible_category(db: Session, category_id: str, user_id: str) -> Optional[Category]:
    """A category the user may assign: their own or a global default."""
    return db.query(Category).filter(
        Category.id == category_id,
        or_(Category.user_id == user_id, Category.is_default == True)
    ).first()


def find_category_by_name(db: Session, name: str, user_id: str) -> Optional[Category]:
    """Resolve a category by name, preferring the user's own over the default."""
    candidates = db.query(Category).filter(
        Category.name == name,
        or_(Category.user_id == user_id, Category.is_default == True)
    ).all()
    if not candidates:
        return None
    owned = [c for c in candidates if c.user_id == user_id]
    return owned[0] if owned else candidates[0]


def _get_uncategorized(db: Session) -> Optional[Category]:
    return db.query(Category).filter(Category.default_key == UNCATEGORIZED_KEY).first()


def ensure_uncategorized(db: Session) -> Category:
    """
    Get the global "Uncategorized" category, creating it on first use.

    The unique ``default_key`` makes concurrent creators converge on one row:
    the loser's insert fails and it reads the winner's.
    """
    category = _get_uncategorized(db)
    if category:
        return category

    category = Category(
        name="Uncategorized",
        type=CategoryType.expense,
        is_default=True,
        default_key=UNCATEGORIZED_KEY,
        priority=100,
        icon="help_outline",
        color="#9E9E9E",
    )
    db.add(category)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Uncategorized category created concurrently, reusing existing row")
        return db.query(Category).filter(Category.default_key == UNCATEGORIZED_KEY).one()

    db.refresh(category)
    logger.info("Created Uncategorized category %s", category.id)
    return category
