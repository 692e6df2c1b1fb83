"""
Bank account API endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vifin.database import get_db
from vifin.dependencies import get_current_user_id
from vifin.schemas.account import BankAccountResponse, BankAccountList
from vifin.schemas.webhook import LinkAccountRequest
from vifin.services import bank_account_service

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("", response_model=BankAccountList)
def list_accounts(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """List the caller's active bank accounts."""
    accounts = bank_account_service.list_user_accounts(db, user_id)
    return BankAccountList(
        items=[BankAccountResponse.model_validate(a) for a in accounts],
        total=len(accounts)
    )


@router.post("/link", response_model=BankAccountResponse, status_code=201)
def link_account(
    data: LinkAccountRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return bank_account_service.link_account(
        db, user_id, data.account_number, data.bank_code, data.account_alias
    )
