"""Tests for categorization and pattern endpoints."""

import pytest

from vifin.models.category_pattern import CategoryPattern, PatternType
from vifin.models.transaction import ClassificationSource


class TestCategoryCorrection:
    """Test PATCH of a transaction's category."""

    def test_update_learns_patterns(self, client, db_session, sample_user, food_category, make_transaction):
        txn = make_transaction(description="HIGHLANDS COFFEE - VINCOM")
        response = client.patch(
            f"/api/v1/categorization/transactions/{txn.id}/category",
            json={"category_id": food_category.id},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["category_id"] == food_category.id
        assert data["classification_source"] == ClassificationSource.MANUAL.value

        patterns = client.get("/api/v1/categorization/patterns", params={"type": "merchant"}).json()
        assert [p["pattern"] for p in patterns["items"]] == ["highlands coffee"]
        assert float(patterns["items"][0]["confidence"]) == pytest.approx(0.9)

    def test_unknown_transaction(self, client, food_category):
        response = client.patch(
            "/api/v1/categorization/transactions/missing/category",
            json={"category_id": food_category.id},
        )
        assert response.status_code == 404
        assert response.json() == {"status": 404, "message": "Transaction not found"}

    def test_unknown_category(self, client, make_transaction):
        txn = make_transaction()
        response = client.patch(
            f"/api/v1/categorization/transactions/{txn.id}/category",
            json={"category_id": "missing"},
        )
        assert response.status_code == 404

    def test_missing_body_field(self, client, make_transaction):
        txn = make_transaction()
        response = client.patch(f"/api/v1/categorization/transactions/{txn.id}/category", json={})
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert body["errors"][0]["field"] == "body.category_id"

    def test_requires_user(self, client, food_category, make_transaction):
        txn = make_transaction()
        response = client.patch(
            f"/api/v1/categorization/transactions/{txn.id}/category",
            json={"category_id": food_category.id},
            headers={"X-User-Id": ""},
        )
        assert response.status_code == 401


class TestPatterns:
    """Test pattern listing and deletion."""

    def _own_pattern(self, db_session, user, category, pattern_type=PatternType.keyword, text="bun cha"):
        pattern = CategoryPattern(
            pattern=text,
            pattern_type=pattern_type,
            category_id=category.id,
            user_id=user.id,
        )
        db_session.add(pattern)
        db_session.commit()
        db_session.refresh(pattern)
        return pattern

    def test_list_only_own(self, client, db_session, sample_user, other_user, food_category, sample_patterns):
        """Global and other users' patterns are not listed."""
        self._own_pattern(db_session, sample_user, food_category)
        self._own_pattern(db_session, other_user, food_category, text="pho")
        data = client.get("/api/v1/categorization/patterns").json()
        assert data["total"] == 1
        assert data["items"][0]["pattern"] == "bun cha"
        assert data["items"][0]["category"]["name"] == "Food"

    def test_filter_by_type(self, client, db_session, sample_user, food_category):
        self._own_pattern(db_session, sample_user, food_category)
        self._own_pattern(db_session, sample_user, food_category, PatternType.mcc, "5812")
        data = client.get("/api/v1/categorization/patterns", params={"type": "mcc"}).json()
        assert [p["pattern"] for p in data["items"]] == ["5812"]

    def test_invalid_type(self, client):
        response = client.get("/api/v1/categorization/patterns", params={"type": "bogus"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid pattern type: bogus"

    def test_delete(self, client, db_session, sample_user, food_category):
        pattern = self._own_pattern(db_session, sample_user, food_category)
        response = client.delete(f"/api/v1/categorization/patterns/{pattern.id}")
        assert response.status_code == 204
        assert db_session.query(CategoryPattern).count() == 0

    def test_delete_other_users_pattern(self, client, db_session, other_user, food_category):
        pattern = self._own_pattern(db_session, other_user, food_category)
        response = client.delete(f"/api/v1/categorization/patterns/{pattern.id}")
        assert response.status_code == 404
        assert db_session.query(CategoryPattern).count() == 1


class TestAutoCategorize:
    """Test the bulk re-run endpoint."""

    def test_auto_categorize(self, client, sample_patterns, food_category, make_transaction):
        make_transaction(description="GRAB FOOD DON HANG")
        response = client.post("/api/v1/categorization/auto-categorize")
        assert response.status_code == 200
        assert response.json() == {"updated": 1}
