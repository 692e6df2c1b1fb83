"""Tests for anomaly alert checks and alert management."""

import pytest
from datetime import datetime, timedelta

from vifin.config import settings
from vifin.errors import NotFoundError
from vifin.models.alert import Alert, AlertType
from vifin.models.transaction import TransactionType
from vifin.services import alerts_service
from vifin.services.alerts_service import (
    check_category_spike,
    check_large_transaction,
    check_unusual_spending,
    run_transaction_checks,
)


JUNE_15 = datetime(2024, 6, 15, 12, 0)


class TestLargeTransaction:
    """Test the absolute threshold check."""

    def test_at_threshold_fires(self, db_session, make_transaction):
        txn = make_transaction(amount="5000000")
        alert = check_large_transaction(db_session, txn)
        assert alert.alert_type == AlertType.LARGE_TRANSACTION
        assert alert.payload["transactionId"] == txn.id
        assert alert.payload["amount"] == 5_000_000

    def test_below_threshold(self, db_session, make_transaction):
        txn = make_transaction(amount="4999999")
        assert check_large_transaction(db_session, txn) is None


class TestUnusualSpending:
    """Test the 30-day average check."""

    def _history(self, make_transaction, count):
        for day in range(count):
            make_transaction(amount="100000", posted_at=JUNE_15 - timedelta(days=day + 1))

    def test_fires_above_multiplier(self, db_session, make_transaction):
        self._history(make_transaction, 5)
        txn = make_transaction(amount="400000", posted_at=JUNE_15)
        alert = check_unusual_spending(db_session, txn)
        assert alert.alert_type == AlertType.UNUSUAL_SPENDING
        assert alert.payload["average"] == pytest.approx(100000)

    def test_equal_to_multiple_does_not_fire(self, db_session, make_transaction):
        self._history(make_transaction, 5)
        txn = make_transaction(amount="300000", posted_at=JUNE_15)
        assert check_unusual_spending(db_session, txn) is None

    def test_needs_history(self, db_session, make_transaction):
        """Fewer than five prior expenses never fire."""
        self._history(make_transaction, 4)
        txn = make_transaction(amount="4000000", posted_at=JUNE_15)
        assert check_unusual_spending(db_session, txn) is None

    def test_old_history_ignored(self, db_session, make_transaction):
        for day in range(5):
            make_transaction(amount="100000", posted_at=JUNE_15 - timedelta(days=40 + day))
        txn = make_transaction(amount="400000", posted_at=JUNE_15)
        assert check_unusual_spending(db_session, txn) is None


class TestCategorySpike:
    """Test month-over-baseline category spending."""

    def _baseline(self, make_transaction, category):
        for month in (3, 4, 5):
            make_transaction(amount="300000", category=category, posted_at=datetime(2024, month, 10))

    def test_fires_over_threshold(self, db_session, make_transaction, food_category):
        self._baseline(make_transaction, food_category)
        txn = make_transaction(amount="500000", category=food_category, posted_at=JUNE_15)

        alert = check_category_spike(db_session, txn)
        assert alert.alert_type == AlertType.CATEGORY_SPIKE
        assert alert.payload["categoryId"] == food_category.id
        assert alert.payload["month"] == "2024-06"
        assert alert.payload["percentage"] == pytest.approx(166.7)

    def test_below_threshold(self, db_session, make_transaction, food_category):
        self._baseline(make_transaction, food_category)
        txn = make_transaction(amount="400000", category=food_category, posted_at=JUNE_15)
        assert check_category_spike(db_session, txn) is None

    def test_once_per_category_and_month(self, db_session, make_transaction, food_category):
        """A second spike in the same month is suppressed."""
        self._baseline(make_transaction, food_category)
        first = make_transaction(amount="500000", category=food_category, posted_at=JUNE_15)
        assert check_category_spike(db_session, first) is not None

        second = make_transaction(amount="200000", category=food_category, posted_at=JUNE_15 + timedelta(days=1))
        assert check_category_spike(db_session, second) is None
        assert db_session.query(Alert).count() == 1

    def test_once_per_month_when_posted_ahead_of_clock(self, db_session, make_transaction, food_category):
        """Bank local time can run ahead of UTC; dedup must follow the posted month."""
        next_month_start = datetime(2099, 7, 1)
        for month in (4, 5, 6):
            make_transaction(amount="300000", category=food_category, posted_at=datetime(2099, month, 10))

        first = make_transaction(
            amount="500000", category=food_category, posted_at=next_month_start + timedelta(hours=3)
        )
        assert check_category_spike(db_session, first) is not None

        second = make_transaction(
            amount="200000", category=food_category, posted_at=next_month_start + timedelta(hours=4)
        )
        assert check_category_spike(db_session, second) is None
        assert db_session.query(Alert).filter(Alert.alert_type == AlertType.CATEGORY_SPIKE).count() == 1

    def test_no_baseline(self, db_session, make_transaction, food_category):
        txn = make_transaction(amount="9000000", category=food_category, posted_at=JUNE_15)
        assert check_category_spike(db_session, txn) is None

    def test_uncategorized_skipped(self, db_session, make_transaction):
        txn = make_transaction(amount="500000", posted_at=JUNE_15)
        assert check_category_spike(db_session, txn) is None


class TestRunTransactionChecks:
    """Test check orchestration."""

    def test_income_skipped(self, db_session, make_transaction):
        txn = make_transaction(amount="90000000", txn_type=TransactionType.income)
        assert run_transaction_checks(db_session, txn) == []

    def test_disabled(self, db_session, make_transaction, monkeypatch):
        monkeypatch.setattr(settings, "alerts_enabled", False)
        txn = make_transaction(amount="90000000")
        assert run_transaction_checks(db_session, txn) == []

    def test_failing_check_does_not_stop_others(self, db_session, make_transaction, monkeypatch):
        def broken(db, transaction):
            raise RuntimeError("boom")

        monkeypatch.setattr(alerts_service, "check_unusual_spending", broken)
        txn = make_transaction(amount="90000000")
        alerts = alerts_service.run_transaction_checks(db_session, txn)
        assert [a.alert_type for a in alerts] == [AlertType.LARGE_TRANSACTION]


class TestAlertManagement:
    """Test listing and read state."""

    def _alerts(self, db_session, user):
        for i in range(3):
            alerts_service.create_alert(db_session, user.id, AlertType.INFO, f"Alert {i}")

    def test_unread_count_and_mark(self, db_session, sample_user):
        self._alerts(db_session, sample_user)
        assert alerts_service.get_unread_count(db_session, sample_user.id) == 3

        first = alerts_service.get_alerts(db_session, sample_user.id)[0]
        alerts_service.mark_as_read(db_session, first.id, sample_user.id)
        assert alerts_service.get_unread_count(db_session, sample_user.id) == 2

        assert alerts_service.mark_all_read(db_session, sample_user.id) == 2
        assert alerts_service.get_unread_count(db_session, sample_user.id) == 0

    def test_filters(self, db_session, sample_user):
        self._alerts(db_session, sample_user)
        alerts_service.create_alert(db_session, sample_user.id, AlertType.SUCCESS, "Done")
        only_success = alerts_service.get_alerts(db_session, sample_user.id, alert_type=AlertType.SUCCESS)
        assert len(only_success) == 1

    def test_scoped_to_user(self, db_session, sample_user, other_user):
        self._alerts(db_session, sample_user)
        alert = alerts_service.get_alerts(db_session, sample_user.id)[0]
        assert alerts_service.get_alerts(db_session, other_user.id) == []
        with pytest.raises(NotFoundError):
            alerts_service.mark_as_read(db_session, alert.id, other_user.id)
        with pytest.raises(NotFoundError):
            alerts_service.delete_alert(db_session, alert.id, other_user.id)

    def test_delete(self, db_session, sample_user):
        self._alerts(db_session, sample_user)
        alert = alerts_service.get_alerts(db_session, sample_user.id)[0]
        alerts_service.delete_alert(db_session, alert.id, sample_user.id)
        assert db_session.query(Alert).count() == 2
