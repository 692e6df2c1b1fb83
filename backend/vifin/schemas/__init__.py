"""
Pydantic schemas package.
"""

from vifin.schemas.account import BankAccountResponse, BankAccountList
from vifin.schemas.alert import AlertResponse, AlertsListResponse, UnreadCountResponse
from vifin.schemas.category import CategorySummary, CategoryResponse, CategoryList
from vifin.schemas.category_rule import (
    CategoryRuleCreate,
    CategoryRuleUpdate,
    CategoryRuleResponse,
    RuleFromTransactionRequest,
    RuleTestRequest,
    RuleTestResponse,
)
from vifin.schemas.pattern import PatternResponse, PatternList, CategoryUpdateRequest, AutoCategorizeResponse
from vifin.schemas.sheets import SheetSyncRequest, SheetImportRequest, SheetPreviewResponse
from vifin.schemas.transaction import (
    TransactionCreate,
    TransactionUpdate,
    TransactionResponse,
    TransactionListResponse,
    BulkCategorizeRequest,
    BulkCategorizeResponse,
)
from vifin.schemas.webhook import (
    SepayWebhookPayload,
    WebhookResponse,
    SimulateWebhookRequest,
    LinkAccountRequest,
    SyncRequest,
    SyncResult,
)

__all__ = [
    "BankAccountResponse",
    "BankAccountList",
    "AlertResponse",
    "AlertsListResponse",
    "UnreadCountResponse",
    "CategorySummary",
    "CategoryResponse",
    "CategoryList",
    "CategoryRuleCreate",
    "CategoryRuleUpdate",
    "CategoryRuleResponse",
    "RuleFromTransactionRequest",
    "RuleTestRequest",
    "RuleTestResponse",
    "PatternResponse",
    "PatternList",
    "CategoryUpdateRequest",
    "AutoCategorizeResponse",
    "SheetSyncRequest",
    "SheetImportRequest",
    "SheetPreviewResponse",
    "TransactionCreate",
    "TransactionUpdate",
    "TransactionResponse",
    "TransactionListResponse",
    "BulkCategorizeRequest",
    "BulkCategorizeResponse",
    "SepayWebhookPayload",
    "WebhookResponse",
    "SimulateWebhookRequest",
    "LinkAccountRequest",
    "SyncRequest",
    "SyncResult",
]
