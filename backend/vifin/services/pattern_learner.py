"""Learn categorization patterns from manual corrections."""

import logging
import re
from decimal import Decimal
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vifin.models.category_pattern import PatternType
from vifin.services.merchant_extractor import extract_merchant
from vifin.services.pattern_store import upsert_pattern
from vifin.services.text_normalizer import normalize

logger = logging.getLogger(__name__)

MERCHANT_SEED_CONFIDENCE = Decimal("0.90")
KEYWORD_SEED_CONFIDENCE = Decimal("0.70")
LEARNING_STEP = Decimal("0.10")
MAX_KEYWORDS = 3

STOP_WORDS = {
    # English
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "from", "up", "about", "into", "over", "after",
    "payment", "purchase", "transaction", "transfer",
    # Vietnamese banking filler, already diacritic-free
    "chuyen", "tien", "thanh", "toan", "giao", "dich", "ma", "so", "ngay",
    "thang", "nam", "qua", "tai", "khoan", "ngan", "hang", "vnd", "dong",
}

_NON_WORD = re.compile(r"[^a-z0-9\s]")


def extract_keywords(description: str, limit: int = MAX_KEYWORDS) -> List[str]:
    """First ``limit`` distinct meaningful words of the normalized description."""
    words = _NON_WORD.sub(" ", normalize(description)).split()

    keywords = []
    for word in words:
        if len(word) <= 2 or word.isdigit() or word in STOP_WORDS:
            continue
        if word in keywords:
            continue
        keywords.append(word)
        if len(keywords) >= limit:
            break
    return keywords


def _upsert_learned_patterns(db: Session, description: str, category_id: str, user_id: str) -> None:
    merchant = extract_merchant(description)
    if merchant:
        upsert_pattern(
            db, user_id, merchant.lower(), PatternType.merchant, category_id,
            MERCHANT_SEED_CONFIDENCE, LEARNING_STEP
        )

    for keyword in extract_keywords(description):
        upsert_pattern(
            db, user_id, keyword, PatternType.keyword, category_id,
            KEYWORD_SEED_CONFIDENCE, LEARNING_STEP
        )


def learn_pattern(db: Session, description: str, category_id: str, user_id: str) -> None:
    """
    Record a user's category choice for a description.

    Upserts one merchant pattern (seeded at 0.9) and up to three keyword
    patterns (seeded at 0.7); existing ones gain 0.1 confidence, capped at 1.0.
    """
    if not description or not description.strip():
        return

    try:
        _upsert_learned_patterns(db, description, category_id, user_id)
        db.commit()
    except IntegrityError:
        # Another request created one of the patterns first; the retry reinforces it
        db.rollback()
        logger.info("Pattern learned concurrently for user %s, retrying", user_id)
        _upsert_learned_patterns(db, description, category_id, user_id)
        db.commit()

    logger.debug("Learned patterns for user %s -> category %s", user_id, category_id)
