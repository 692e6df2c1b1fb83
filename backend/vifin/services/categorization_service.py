"""Pattern-based transaction categorization."""

import logging
import re
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from vifin.errors import NotFoundError, ValidationError
from vifin.models.category import Category
from vifin.models.category_pattern import CategoryPattern, PatternType
from vifin.models.transaction import Transaction, ClassificationSource
from vifin.services import pattern_store
from vifin.services.merchant_extractor import extract_merchant
from vifin.services.pattern_learner import learn_pattern
from vifin.services.text_normalizer import normalize

logger = logging.getLogger(__name__)

MATCH_STEP = Decimal("0.05")

# Fallback when no MCC pattern exists; resolved by category name
MCC_CATEGORY_NAMES = {
    "5411": "Food",  # Grocery stores
    "5812": "Food",  # Restaurants
    "5814": "Food",  # Fast food
    "4121": "Transport",  # Taxis
    "4131": "Transport",  # Bus lines
    "5541": "Transport",  # Service stations
    "5542": "Transport",  # Fuel dispensers
    "4900": "Bills",  # Utilities
    "4814": "Bills",  # Telecom
    "7832": "Entertainment",  # Cinemas
    "7922": "Entertainment",  # Theatre
    "5999": "Shopping",  # Misc retail
}


def _is_regex(pattern: str) -> bool:
    return len(pattern) > 2 and pattern.startswith("/") and pattern.endswith("/")


class CategorizationService:
    """
    Picks a category for a description in strict tier order:
    merchant patterns, then keyword patterns, then MCC. Anything left
    over lands in "Uncategorized".

    A hit reinforces the matched pattern; the caller commits.
    """

    def __init__(self, db: Session):
        self.db = db

    def categorize(self, description: str, user_id: str, mcc: Optional[str] = None) -> Category:
        category = self.match_category(description, user_id, mcc)
        if category:
            return category
        return pattern_store.ensure_uncategorized(self.db)

    def match_category(self, description: str, user_id: str, mcc: Optional[str] = None) -> Optional[Category]:
        """Run the three tiers; None when nothing matched."""
        merchant = extract_merchant(description)
        if merchant:
            category = self._match_merchant(merchant, user_id)
            if category:
                return category

        category = self._match_keyword(description or "", user_id)
        if category:
            return category

        if mcc:
            return self._match_mcc(mcc.strip(), user_id)

        return None

    def _hit(self, pattern: CategoryPattern) -> Category:
        category = pattern.category
        pattern_store.reinforce_pattern(self.db, pattern, MATCH_STEP)
        return category

    def _match_merchant(self, merchant: str, user_id: str) -> Optional[Category]:
        merchant_lower = merchant.lower()
        for pattern in pattern_store.get_visible_patterns(self.db, user_id, PatternType.merchant):
            text = pattern.pattern.lower()
            if text and (merchant_lower == text or text in merchant_lower):
                logger.debug("Merchant %r matched pattern %s", merchant, pattern.id)
                return self._hit(pattern)
        return None

    def _match_keyword(self, description: str, user_id: str) -> Optional[Category]:
        normalized = normalize(description)
        if not normalized:
            return None

        for pattern in pattern_store.get_visible_patterns(self.db, user_id, PatternType.keyword):
            text = pattern.pattern
            if _is_regex(text):
                try:
                    matched = re.search(text[1:-1], normalized, re.IGNORECASE) is not None
                except re.error as e:
                    logger.warning("Skipping invalid regex pattern %s (%r): %s", pattern.id, text, e)
                    continue
            else:
                needle = normalize(text)
                matched = bool(needle) and needle in normalized

            if matched:
                logger.debug("Description matched keyword pattern %s", pattern.id)
                return self._hit(pattern)
        return None

    def _match_mcc(self, mcc: str, user_id: str) -> Optional[Category]:
        for pattern in pattern_store.get_visible_patterns(self.db, user_id, PatternType.mcc):
            if pattern.pattern.strip() == mcc:
                return self._hit(pattern)

        name = MCC_CATEGORY_NAMES.get(mcc)
        if name:
            return pattern_store.find_category_by_name(self.db, name, user_id)
        return None

    def update_category(self, transaction_id: str, category_id: str, user_id: str) -> Transaction:
        """Apply a manual category and learn from it."""
        transaction = self.db.query(Transaction).filter(
            Transaction.id == transaction_id,
            Transaction.user_id == user_id
        ).first()
        if not transaction:
            raise NotFoundError("Transaction not found")

        category = pattern_store.get_visible_category(self.db, category_id, user_id)
        if not category:
            raise NotFoundError("Category not found")

        transaction.category_id = category.id
        transaction.classification_source = ClassificationSource.MANUAL
        self.db.commit()
        self.db.refresh(transaction)

        learn_pattern(
            self.db,
            transaction.normalized_description or transaction.raw_description,
            category.id,
            user_id
        )
        return transaction

    def auto_categorize_pending(self, user_id: str) -> int:
        """Re-run categorization over uncategorized transactions. Returns the number changed."""
        uncategorized = pattern_store.ensure_uncategorized(self.db)

        pending: List[Transaction] = self.db.query(Transaction).filter(
            Transaction.user_id == user_id,
            or_(Transaction.category_id.is_(None), Transaction.category_id == uncategorized.id)
        ).all()

        updated = 0
        for transaction in pending:
            description = transaction.normalized_description or transaction.raw_description
            category = self.categorize(description, user_id, transaction.mcc)
            if category.id != transaction.category_id:
                transaction.category_id = category.id
                transaction.classification_source = ClassificationSource.AUTO
                updated += 1

        self.db.commit()
        logger.info("Auto-categorized %d of %d pending transactions for user %s", updated, len(pending), user_id)
        return updated

    def get_patterns(self, user_id: str, pattern_type: Optional[str] = None) -> List[CategoryPattern]:
        """The user's own patterns, newest first."""
        parsed_type = None
        if pattern_type:
            try:
                parsed_type = PatternType(pattern_type)
            except ValueError:
                raise ValidationError(
                    f"Invalid pattern type: {pattern_type}",
                    details=[{"field": "type", "message": "must be one of merchant, keyword, mcc"}]
                )
        return pattern_store.list_user_patterns(self.db, user_id, parsed_type)

    def delete_pattern(self, pattern_id: int, user_id: str) -> None:
        pattern = pattern_store.get_user_pattern(self.db, pattern_id, user_id)
        if not pattern:
            raise NotFoundError("Pattern not found")
        self.db.delete(pattern)
        self.db.commit()
