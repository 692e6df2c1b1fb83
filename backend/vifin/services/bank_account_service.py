"""Bank account lookup, creation and linking."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from vifin.config import settings
from vifin.models.bank_account import BankAccount, BankConnection, BankProvider

logger = logging.getLogger(__name__)

ACTIVE = "active"

SEPAY_PROVIDER_CODE = "SEPAY"
MANUAL_PROVIDER_CODE = "MANUAL"

BANK_NAMES = {
    "MBBANK": "MB Bank",
    "VCB": "Vietcombank",
    "TCB": "Techcombank",
    "BIDV": "BIDV",
    "ACB": "ACB",
    "VPB": "VPBank",
    "TPB": "TPBank",
    "MSB": "MSB",
    "SHB": "SHB",
    "VIB": "VIB",
    "SACOMBANK": "Sacombank",
    "STB": "Sacombank",
    "AGRIBANK": "Agribank",
    "VIETINBANK": "VietinBank",
    "CTG": "VietinBank",
    "MOMO": "MoMo",
    "ZALOPAY": "ZaloPay",
    "VNPAY": "VNPay",
}


def get_bank_name(code: Optional[str]) -> str:
    if not code:
        return "Unknown Bank"
    return BANK_NAMES.get(code.strip().upper(), code.strip())


def last_four(account_number: str) -> str:
    digits = "".join(ch for ch in account_number if ch.isalnum())
    return digits[-4:]


def mask_account_number(account_number: str) -> str:
    """0123456789 -> ******6789"""
    tail = last_four(account_number)
    hidden = max(len(account_number.strip()) - len(tail), 0)
    return "*" * hidden + tail


def _matches(account: BankAccount, account_number: str) -> bool:
    mask = account.account_number_mask or ""
    if not mask:
        return False
    return mask.endswith(last_four(account_number)) or account_number.strip() in mask


def find_account_by_number(
    db: Session,
    account_number: str,
    user_id: Optional[str] = None
) -> Optional[BankAccount]:
    """Active account whose stored mask ends with the incoming number's last 4 digits."""
    if not account_number or len(last_four(account_number)) < 4:
        return None

    query = db.query(BankAccount).filter(
        BankAccount.status == ACTIVE,
        BankAccount.account_number_mask.isnot(None)
    )
    if user_id:
        query = query.filter(BankAccount.user_id == user_id)

    for account in query.order_by(BankAccount.created_at.asc()).all():
        if _matches(account, account_number):
            return account
    return None


def get_fallback_account(db: Session) -> Optional[BankAccount]:
    return db.query(BankAccount).filter(
        BankAccount.status == ACTIVE
    ).order_by(BankAccount.created_at.asc()).first()


def list_user_accounts(db: Session, user_id: str) -> List[BankAccount]:
    return db.query(BankAccount).filter(
        BankAccount.user_id == user_id,
        BankAccount.status == ACTIVE
    ).order_by(BankAccount.created_at.asc()).all()


def _get_or_create_provider(db: Session, code: str, name: str, auth_type: str, api_base_url: Optional[str]) -> BankProvider:
    provider = db.query(BankProvider).filter(BankProvider.code == code).first()
    if not provider:
        provider = BankProvider(code=code, name=name, auth_type=auth_type, api_base_url=api_base_url)
        db.add(provider)
        db.flush()
    return provider


def _get_or_create_connection(db: Session, user_id: str, provider: BankProvider) -> BankConnection:
    connection = db.query(BankConnection).filter(
        BankConnection.user_id == user_id,
        BankConnection.bank_provider_id == provider.id
    ).first()
    if not connection:
        connection = BankConnection(user_id=user_id, bank_provider_id=provider.id, status=ACTIVE)
        db.add(connection)
        db.flush()
    return connection


def _sepay_connection(db: Session, user_id: str) -> BankConnection:
    provider = _get_or_create_provider(db, SEPAY_PROVIDER_CODE, "Sepay", "api_key", settings.sepay_base_url)
    return _get_or_create_connection(db, user_id, provider)


def find_or_create_account(
    db: Session,
    user_id: str,
    account_number: str,
    bank_code: Optional[str] = None
) -> BankAccount:
    """Account of this user matching the number, created under the Sepay connection if missing."""
    account = find_account_by_number(db, account_number, user_id=user_id)
    if account:
        return account

    connection = _sepay_connection(db, user_id)
    bank_name = get_bank_name(bank_code)
    account = BankAccount(
        user_id=user_id,
        connection_id=connection.id,
        bank_name=bank_name,
        account_alias=f"{bank_name} - {last_four(account_number)}",
        account_number_mask=mask_account_number(account_number),
        account_type="checking",
        currency="VND",
        status=ACTIVE,
    )
    db.add(account)
    db.commit()
    db.refresh(account)
    logger.info("Created bank account %s (%s) for user %s", account.id, account.account_number_mask, user_id)
    return account


def link_account(
    db: Session,
    user_id: str,
    account_number: str,
    bank_code: str,
    account_alias: Optional[str] = None
) -> BankAccount:
    """Register (or refresh) the user's account so webhooks for it can be routed."""
    bank_name = get_bank_name(bank_code)
    alias = account_alias or f"{bank_name} - {last_four(account_number)}"

    account = find_account_by_number(db, account_number, user_id=user_id)
    if account:
        account.bank_name = bank_name
        account.account_alias = alias
        account.account_number_mask = mask_account_number(account_number)
        db.commit()
        db.refresh(account)
        return account

    connection = _sepay_connection(db, user_id)
    account = BankAccount(
        user_id=user_id,
        connection_id=connection.id,
        bank_name=bank_name,
        account_alias=alias,
        account_number_mask=mask_account_number(account_number),
        status=ACTIVE,
    )
    db.add(account)
    db.commit()
    db.refresh(account)
    logger.info("Linked %s account %s for user %s", bank_name, account.account_number_mask, user_id)
    return account


def get_or_create_manual_account(db: Session, user_id: str) -> BankAccount:
    """Per-user holder account for manually entered transactions."""
    account = db.query(BankAccount).filter(
        BankAccount.user_id == user_id,
        BankAccount.bank_name == "Manual Entry"
    ).first()
    if account:
        return account

    provider = _get_or_create_provider(db, MANUAL_PROVIDER_CODE, "Manual Entry", "none", None)
    connection = _get_or_create_connection(db, user_id, provider)
    account = BankAccount(
        user_id=user_id,
        connection_id=connection.id,
        bank_name="Manual Entry",
        account_type="manual",
        status=ACTIVE,
    )
    db.add(account)
    db.commit()
    db.refresh(account)
    return account
