"""Tests for learning patterns from manual corrections."""

import pytest
from sqlalchemy.exc import IntegrityError

from vifin.models.category_pattern import CategoryPattern, PatternType
from vifin.services import pattern_learner
from vifin.services.pattern_learner import extract_keywords, learn_pattern
from vifin.services.pattern_store import upsert_pattern


def user_patterns(db, user_id, pattern_type):
    return {
        p.pattern: p
        for p in db.query(CategoryPattern).filter(
            CategoryPattern.user_id == user_id,
            CategoryPattern.pattern_type == pattern_type
        ).all()
    }


class TestExtractKeywords:
    """Test keyword selection."""

    def test_drops_stop_words_and_short_tokens(self):
        """Vietnamese filler, numbers and short words are skipped."""
        assert extract_keywords("Thanh toán tiền điện EVN tháng 7") == ["dien", "evn"]

    def test_limits_to_three(self):
        assert extract_keywords("highlands coffee vincom center landmark") == [
            "highlands", "coffee", "vincom"
        ]

    def test_unique_in_original_order(self):
        assert extract_keywords("pizza pizza hut pizza") == ["pizza", "hut"]

    def test_punctuation_split(self):
        assert extract_keywords("NOW.VN*ORDER-1234") == ["now", "order"]

    def test_empty(self):
        assert extract_keywords("") == []


class TestLearnPattern:
    """Test upserts and reinforcement."""

    def test_seeds_merchant_and_keywords(self, db_session, sample_user, food_category):
        """First correction creates a 0.9 merchant and 0.7 keyword patterns."""
        learn_pattern(db_session, "STARBUCKS - NEW YORK", food_category.id, sample_user.id)

        merchants = user_patterns(db_session, sample_user.id, PatternType.merchant)
        keywords = user_patterns(db_session, sample_user.id, PatternType.keyword)

        assert set(merchants) == {"starbucks"}
        assert float(merchants["starbucks"].confidence) == pytest.approx(0.90)
        assert merchants["starbucks"].usage_count == 1
        assert set(keywords) == {"starbucks", "new", "york"}
        assert all(float(p.confidence) == pytest.approx(0.70) for p in keywords.values())

    def test_repeat_reinforces(self, db_session, sample_user, food_category):
        """Repeated corrections raise confidence by 0.1 up to 1.0."""
        for _ in range(3):
            learn_pattern(db_session, "STARBUCKS - NEW YORK", food_category.id, sample_user.id)

        merchants = user_patterns(db_session, sample_user.id, PatternType.merchant)
        keywords = user_patterns(db_session, sample_user.id, PatternType.keyword)
        for pattern in list(merchants.values()) + list(keywords.values()):
            db_session.refresh(pattern)

        assert float(merchants["starbucks"].confidence) == pytest.approx(1.0)
        assert merchants["starbucks"].usage_count == 3
        assert float(keywords["york"].confidence) == pytest.approx(0.90)

    def test_confidence_never_decreases(self, db_session, sample_user, food_category):
        seen = []
        for _ in range(5):
            learn_pattern(db_session, "BAEMIN 0042", food_category.id, sample_user.id)
            pattern = user_patterns(db_session, sample_user.id, PatternType.keyword)["baemin"]
            db_session.refresh(pattern)
            seen.append(float(pattern.confidence))
        assert seen == sorted(seen)
        assert max(seen) <= 1.0

    def test_same_text_other_category_is_separate(self, db_session, sample_user, food_category, transport_category):
        """Patterns are keyed by category too."""
        learn_pattern(db_session, "GRAB 0042", food_category.id, sample_user.id)
        learn_pattern(db_session, "GRAB 0042", transport_category.id, sample_user.id)

        rows = db_session.query(CategoryPattern).filter(
            CategoryPattern.pattern == "grab",
            CategoryPattern.pattern_type == PatternType.keyword
        ).all()
        assert {p.category_id for p in rows} == {food_category.id, transport_category.id}

    def test_blank_description_ignored(self, db_session, sample_user, food_category):
        learn_pattern(db_session, "   ", food_category.id, sample_user.id)
        assert db_session.query(CategoryPattern).count() == 0

    def test_conflicting_insert_is_retried(self, db_session, sample_user, food_category, monkeypatch):
        """A unique-key clash rolls back and the retry reinforces the existing rows."""
        learn_pattern(db_session, "STARBUCKS - NEW YORK", food_category.id, sample_user.id)

        calls = []

        def clash_once(*args, **kwargs):
            calls.append(args)
            if len(calls) == 1:
                raise IntegrityError("INSERT INTO category_patterns", {}, Exception("UNIQUE constraint failed"))
            return upsert_pattern(*args, **kwargs)

        monkeypatch.setattr(pattern_learner, "upsert_pattern", clash_once)
        learn_pattern(db_session, "STARBUCKS - NEW YORK", food_category.id, sample_user.id)

        merchants = user_patterns(db_session, sample_user.id, PatternType.merchant)
        assert list(merchants) == ["starbucks"]
        db_session.refresh(merchants["starbucks"])
        assert merchants["starbucks"].usage_count == 2
        assert float(merchants["starbucks"].confidence) == pytest.approx(1.0)
