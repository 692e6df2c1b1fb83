"""
Database models package.
"""

from vifin.models.user import User
from vifin.models.bank_account import BankProvider, BankConnection, BankAccount
from vifin.models.category import Category, CategoryType, UNCATEGORIZED_KEY
from vifin.models.category_pattern import CategoryPattern, PatternType
from vifin.models.category_rule import CategoryRule
from vifin.models.transaction import Transaction, TransactionType, ClassificationSource
from vifin.models.alert import Alert, AlertType

__all__ = [
    "User",
    "BankProvider",
    "BankConnection",
    "BankAccount",
    "Category",
    "CategoryType",
    "UNCATEGORIZED_KEY",
    "CategoryPattern",
    "PatternType",
    "CategoryRule",
    "Transaction",
    "TransactionType",
    "ClassificationSource",
    "Alert",
    "AlertType",
]
