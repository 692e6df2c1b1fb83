"""
Bank provider, connection and account models.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from vifin.database import Base


class BankProvider(Base):
    """External bank or aggregator, e.g. Sepay."""

    __tablename__ = "bank_providers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    code = Column(String(50), unique=True, nullable=False)
    auth_type = Column(String(50), nullable=False, default="api_key")
    api_base_url = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    connections = relationship("BankConnection", back_populates="provider")


class BankConnection(Base):
    """Link between a user and a provider."""

    __tablename__ = "bank_connections"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    bank_provider_id = Column(String(36), ForeignKey("bank_providers.id"), nullable=False)
    status = Column(String(20), default="active", nullable=False)  # active, manual, revoked
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    provider = relationship("BankProvider", back_populates="connections")
    accounts = relationship("BankAccount", back_populates="connection")


class BankAccount(Base):
    """A user's bank account, matched on ingestion by its masked number."""

    __tablename__ = "bank_accounts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    connection_id = Column(String(36), ForeignKey("bank_connections.id"), nullable=True)
    bank_name = Column(String(100), nullable=False)
    account_alias = Column(String(100), nullable=True)
    account_number_mask = Column(String(50), nullable=True)  # ******6789
    account_type = Column(String(20), default="checking", nullable=False)
    currency = Column(String(3), default="VND", nullable=False)
    status = Column(String(20), default="active", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="bank_accounts")
    connection = relationship("BankConnection", back_populates="accounts")
    transactions = relationship("Transaction", back_populates="bank_account")

    __table_args__ = (
        Index("idx_bank_account_user_status", "user_id", "status"),
    )
