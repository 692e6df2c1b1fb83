"""Shared test fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from datetime import datetime
from decimal import Decimal

from vifin.config import settings
from vifin.database import Base, get_db as database_get_db
from vifin.dependencies import get_db as dependencies_get_db
from vifin.main import app
from vifin.models.user import User
from vifin.models.bank_account import BankAccount
from vifin.models.category import Category, CategoryType
from vifin.models.category_pattern import CategoryPattern, PatternType
from vifin.models.transaction import Transaction, TransactionType, ClassificationSource


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test using in-memory SQLite."""
    # Use StaticPool to ensure all connections use the same in-memory database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Pin settings that tests rely on, whatever the local .env says."""
    monkeypatch.setattr(settings, "environment", "test")
    monkeypatch.setattr(settings, "sepay_webhook_secret", None)
    monkeypatch.setattr(settings, "sepay_api_key", None)
    monkeypatch.setattr(settings, "webhook_fallback_to_any_account", False)
    monkeypatch.setattr(settings, "alerts_enabled", True)
    monkeypatch.setattr(settings, "large_transaction_threshold", 5_000_000)
    monkeypatch.setattr(settings, "unusual_spending_multiplier", 3.0)
    monkeypatch.setattr(settings, "unusual_spending_min_history", 5)
    monkeypatch.setattr(settings, "category_spike_threshold", 150.0)


@pytest.fixture
def sample_user(db_session):
    """Create a sample user."""
    user = User(email="an.nguyen@example.com", name="Nguyen Van An")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def other_user(db_session):
    user = User(email="binh.tran@example.com", name="Tran Thi Binh")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def client(db_session, sample_user):
    """Create a test client with database override, authenticated as sample_user."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    # Override both get_db functions (some routes use vifin.database, others vifin.dependencies)
    app.dependency_overrides[database_get_db] = override_get_db
    app.dependency_overrides[dependencies_get_db] = override_get_db
    with TestClient(app, headers={"X-User-Id": sample_user.id}) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_account(db_session, sample_user):
    """Create a sample bank account ending in 6789."""
    account = BankAccount(
        user_id=sample_user.id,
        bank_name="Vietcombank",
        account_alias="Vietcombank - 6789",
        account_number_mask="******6789",
        status="active",
    )
    db_session.add(account)
    db_session.commit()
    db_session.refresh(account)
    return account


@pytest.fixture
def food_category(db_session):
    category = Category(
        name="Food",
        type=CategoryType.expense,
        is_default=True,
        default_key="expense:food",
        priority=1,
        icon="restaurant",
        color="#FF6B6B",
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def transport_category(db_session):
    category = Category(
        name="Transport",
        type=CategoryType.expense,
        is_default=True,
        default_key="expense:transport",
        priority=2,
        icon="directions_car",
        color="#4ECDC4",
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def salary_category(db_session):
    category = Category(
        name="Salary",
        type=CategoryType.income,
        is_default=True,
        default_key="income:salary",
        priority=1,
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def sample_patterns(db_session, food_category, transport_category):
    """Global keyword patterns: "grab food" is Food, plain "grab" is Transport."""
    patterns = [
        CategoryPattern(
            pattern="grab food",
            pattern_type=PatternType.keyword,
            category_id=food_category.id,
            confidence=Decimal("0.80"),
            usage_count=0,
        ),
        CategoryPattern(
            pattern="grab",
            pattern_type=PatternType.keyword,
            category_id=transport_category.id,
            confidence=Decimal("0.60"),
            usage_count=0,
        ),
    ]
    db_session.add_all(patterns)
    db_session.commit()
    for pattern in patterns:
        db_session.refresh(pattern)
    return patterns


@pytest.fixture
def make_transaction(db_session, sample_user, sample_account):
    """Factory for transactions owned by sample_user."""
    counter = {"n": 0}

    def _make(
        amount="100000",
        description="GRAB FOOD DON HANG",
        category=None,
        txn_type=TransactionType.expense,
        posted_at=None,
        external_id=None,
        source=ClassificationSource.AUTO,
    ):
        counter["n"] += 1
        txn = Transaction(
            user_id=sample_user.id,
            bank_account_id=sample_account.id,
            external_txn_id=external_id or f"TEST{counter['n']:04d}",
            amount=Decimal(amount),
            type=txn_type,
            raw_description=description,
            normalized_description=description.upper(),
            posted_at=posted_at or datetime(2024, 6, 15, 10, 0),
            category_id=category.id if category else None,
            classification_source=source,
        )
        db_session.add(txn)
        db_session.commit()
        db_session.refresh(txn)
        return txn

    return _make
