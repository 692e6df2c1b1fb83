"""Tests for transactions API endpoints."""

import pytest

from vifin.models.bank_account import BankAccount
from vifin.models.category_pattern import CategoryPattern
from vifin.models.transaction import Transaction


class TestTransactionsAPI:
    """Test transactions endpoints."""

    def test_list_transactions_empty(self, client):
        """Should return empty paginated list."""
        response = client.get("/api/v1/transactions")
        assert response.status_code == 200
        data = response.json()
        assert data["items"] == []
        assert data["total"] == 0

    def test_list_transactions_with_data(self, client, make_transaction, food_category):
        """Should return transactions with their category."""
        make_transaction(category=food_category)
        response = client.get("/api/v1/transactions")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["category"]["name"] == "Food"

    def test_list_scoped_to_user(self, client, db_session, other_user, make_transaction):
        make_transaction()
        response = client.get("/api/v1/transactions", headers={"X-User-Id": other_user.id})
        assert response.json()["total"] == 0

    def test_pagination(self, client, make_transaction):
        for _ in range(3):
            make_transaction()
        data = client.get("/api/v1/transactions", params={"per_page": 2, "page": 2}).json()
        assert data["total"] == 3
        assert data["pages"] == 2
        assert len(data["items"]) == 1

    def test_get_transaction(self, client, make_transaction):
        """Should return single transaction."""
        txn = make_transaction()
        response = client.get(f"/api/v1/transactions/{txn.id}")
        assert response.status_code == 200
        assert response.json()["id"] == txn.id

    def test_get_missing(self, client):
        response = client.get("/api/v1/transactions/missing")
        assert response.status_code == 404

    def test_search_transactions(self, client, make_transaction):
        """Should filter by search term."""
        make_transaction(description="GRAB FOOD DON HANG")
        data = client.get("/api/v1/transactions", params={"search": "grab"}).json()
        assert len(data["items"]) == 1

        data = client.get("/api/v1/transactions", params={"search": "xyz"}).json()
        assert len(data["items"]) == 0

    def test_filter_by_type(self, client, make_transaction):
        from vifin.models.transaction import TransactionType

        make_transaction()
        make_transaction(txn_type=TransactionType.income, description="LUONG")
        data = client.get("/api/v1/transactions", params={"type": "income"}).json()
        assert [t["raw_description"] for t in data["items"]] == ["LUONG"]

    def test_update_notes(self, client, make_transaction):
        txn = make_transaction()
        response = client.patch(f"/api/v1/transactions/{txn.id}", json={"notes": "team lunch"})
        assert response.status_code == 200
        assert response.json()["notes"] == "team lunch"

    def test_update_category_learns(self, client, db_session, make_transaction, food_category):
        """A category change is treated as a manual correction."""
        txn = make_transaction(description="BAEMIN 0042")
        response = client.patch(f"/api/v1/transactions/{txn.id}", json={"category_id": food_category.id})
        assert response.status_code == 200
        assert response.json()["classification_source"] == "MANUAL"
        assert db_session.query(CategoryPattern).count() > 0


class TestCreateTransaction:
    """Test manual entry."""

    def test_create_manual(self, client, db_session, food_category):
        response = client.post("/api/v1/transactions", json={
            "amount": 35000,
            "type": "expense",
            "category_id": food_category.id,
            "description": "Bánh mì",
        })
        assert response.status_code == 201
        data = response.json()
        assert data["classification_source"] == "MANUAL"
        assert data["normalized_description"] == "BANH MI"
        assert data["external_txn_id"] is None

        account = db_session.query(BankAccount).filter(BankAccount.id == data["bank_account_id"]).one()
        assert account.bank_name == "Manual Entry"

    def test_manual_entries_share_account(self, client, db_session, food_category):
        for _ in range(2):
            client.post("/api/v1/transactions", json={
                "amount": 1000, "type": "expense", "category_id": food_category.id,
            })
        assert db_session.query(BankAccount).count() == 1
        assert db_session.query(Transaction).count() == 2

    def test_type_mismatch(self, client, salary_category):
        response = client.post("/api/v1/transactions", json={
            "amount": 1000, "type": "expense", "category_id": salary_category.id,
        })
        assert response.status_code == 400

    def test_non_positive_amount(self, client, food_category):
        response = client.post("/api/v1/transactions", json={
            "amount": 0, "type": "expense", "category_id": food_category.id,
        })
        assert response.status_code == 400
        assert response.json()["message"] == "Validation failed"


class TestBulkCategorize:
    """Test bulk category reassignment."""

    def test_partial_failure_reported(self, client, db_session, make_transaction, food_category):
        first = make_transaction()
        second = make_transaction()
        response = client.post("/api/v1/transactions/bulk-categorize", json={
            "transaction_ids": [first.id, "missing", second.id],
            "category_id": food_category.id,
        })
        assert response.status_code == 200
        assert response.json() == {"success_count": 2, "failed_count": 1, "failed_ids": ["missing"]}

        db_session.expire_all()
        assert {t.category_id for t in db_session.query(Transaction).all()} == {food_category.id}

    def test_other_users_ids_fail(self, client, make_transaction, other_user, food_category):
        txn = make_transaction()
        response = client.post(
            "/api/v1/transactions/bulk-categorize",
            json={"transaction_ids": [txn.id], "category_id": food_category.id},
            headers={"X-User-Id": other_user.id},
        )
        assert response.json()["failed_ids"] == [txn.id]

    def test_unknown_category(self, client, make_transaction):
        txn = make_transaction()
        response = client.post("/api/v1/transactions/bulk-categorize", json={
            "transaction_ids": [txn.id],
            "category_id": "missing",
        })
        assert response.status_code == 400

    def test_empty_ids(self, client, food_category):
        response = client.post("/api/v1/transactions/bulk-categorize", json={
            "transaction_ids": [],
            "category_id": food_category.id,
        })
        assert response.status_code == 400
