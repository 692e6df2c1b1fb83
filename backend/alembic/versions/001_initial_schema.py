"""initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19 09:00:00
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None

category_type = sa.Enum("income", "expense", name="categorytype")
transaction_type = sa.Enum("income", "expense", name="transactiontype")
classification_source = sa.Enum("AUTO", "MANUAL", "GOOGLE_SHEETS", name="classificationsource")
pattern_type = sa.Enum("merchant", "keyword", "mcc", name="patterntype")
alert_type = sa.Enum(
    "BUDGET_WARNING", "BUDGET_EXCEEDED", "LARGE_TRANSACTION", "UNUSUAL_SPENDING",
    "CATEGORY_SPIKE", "INFO", "SUCCESS",
    name="alerttype",
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "bank_providers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("auth_type", sa.String(50), nullable=False),
        sa.Column("api_base_url", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "bank_connections",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("bank_provider_id", sa.String(36), sa.ForeignKey("bank_providers.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_bank_connections_user_id", "bank_connections", ["user_id"])

    op.create_table(
        "bank_accounts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("connection_id", sa.String(36), sa.ForeignKey("bank_connections.id"), nullable=True),
        sa.Column("bank_name", sa.String(100), nullable=False),
        sa.Column("account_alias", sa.String(100), nullable=True),
        sa.Column("account_number_mask", sa.String(50), nullable=True),
        sa.Column("account_type", sa.String(20), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("idx_bank_account_user_status", "bank_accounts", ["user_id", "status"])

    op.create_table(
        "categories",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("type", category_type, nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("default_key", sa.String(100), nullable=True, unique=True),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("color", sa.String(7), nullable=True),
        sa.Column("icon", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_categories_user_id", "categories", ["user_id"])

    op.create_table(
        "category_patterns",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("pattern", sa.String(255), nullable=False),
        sa.Column("pattern_type", pattern_type, nullable=False),
        sa.Column("category_id", sa.String(36), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("confidence", sa.Numeric(4, 2), nullable=False),
        sa.Column("usage_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "pattern", "pattern_type", "category_id", name="uq_pattern_owner_category"),
    )
    op.create_index("idx_pattern_type_user", "category_patterns", ["pattern_type", "user_id"])

    op.create_table(
        "category_rules",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("category_id", sa.String(36), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("keyword", sa.String(255), nullable=False),
        sa.Column("keyword_normalized", sa.String(255), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("keyword", "category_id", name="uq_rule_keyword_category"),
    )
    op.create_index("ix_category_rules_category_id", "category_rules", ["category_id"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("bank_account_id", sa.String(36), sa.ForeignKey("bank_accounts.id"), nullable=False),
        sa.Column("external_txn_id", sa.String(255), nullable=True),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("type", transaction_type, nullable=False),
        sa.Column("raw_description", sa.Text(), nullable=False),
        sa.Column("normalized_description", sa.Text(), nullable=True),
        sa.Column("posted_at", sa.DateTime(), nullable=False),
        sa.Column("category_id", sa.String(36), sa.ForeignKey("categories.id"), nullable=True),
        sa.Column("classification_source", classification_source, nullable=False),
        sa.Column("mcc", sa.String(4), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "external_txn_id", name="uq_transaction_user_external"),
    )
    op.create_index("ix_transactions_posted_at", "transactions", ["posted_at"])
    op.create_index("idx_transaction_user_posted", "transactions", ["user_id", "posted_at"])
    op.create_index("idx_transaction_category", "transactions", ["category_id"])

    op.create_table(
        "alerts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("alert_type", alert_type, nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_alerts_is_read", "alerts", ["is_read"])
    op.create_index("ix_alerts_created_at", "alerts", ["created_at"])
    op.create_index("idx_alert_user_type", "alerts", ["user_id", "alert_type"])


def downgrade() -> None:
    op.drop_table("alerts")
    op.drop_table("transactions")
    op.drop_table("category_rules")
    op.drop_table("category_patterns")
    op.drop_table("categories")
    op.drop_table("bank_accounts")
    op.drop_table("bank_connections")
    op.drop_table("bank_providers")
    op.drop_table("users")
