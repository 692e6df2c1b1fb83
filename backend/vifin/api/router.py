"""
Main API router.
"""

from fastapi import APIRouter
from vifin.api import (
    accounts,
    alerts,
    categories,
    categorization,
    category_rules,
    sheets,
    transactions,
    webhooks,
)

api_router = APIRouter()

api_router.include_router(webhooks.router)
api_router.include_router(accounts.router)
api_router.include_router(categories.router)
api_router.include_router(categorization.router)
api_router.include_router(category_rules.router)
api_router.include_router(transactions.router)
api_router.include_router(alerts.router)
api_router.include_router(sheets.router)
