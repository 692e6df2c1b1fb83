"""
Transaction database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Enum, Numeric, Text, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
import enum
from vifin.database import Base


class TransactionType(str, enum.Enum):
    """Direction of money; the amount itself is always positive."""
    income = "income"
    expense = "expense"


class ClassificationSource(str, enum.Enum):
    """Who assigned the transaction's category."""
    AUTO = "AUTO"
    MANUAL = "MANUAL"
    GOOGLE_SHEETS = "GOOGLE_SHEETS"


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    bank_account_id = Column(String(36), ForeignKey("bank_accounts.id"), nullable=False)
    external_txn_id = Column(String(255), nullable=True)  # Idempotency key from the source
    amount = Column(Numeric(15, 2), nullable=False)
    type = Column(Enum(TransactionType), nullable=False)
    raw_description = Column(Text, nullable=False, default="")
    normalized_description = Column(Text, nullable=True)
    posted_at = Column(DateTime, nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=True)
    classification_source = Column(Enum(ClassificationSource), default=ClassificationSource.AUTO, nullable=False)
    mcc = Column(String(4), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="transactions")
    bank_account = relationship("BankAccount", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")

    __table_args__ = (
        # At-most-once ingestion; NULL external ids (manual entries) never collide
        UniqueConstraint("user_id", "external_txn_id", name="uq_transaction_user_external"),
        Index("idx_transaction_user_posted", "user_id", "posted_at"),
        Index("idx_transaction_category", "category_id"),
    )
