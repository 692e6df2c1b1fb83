"""
Parser for the Sepay Google Sheets export.

Columns: bank, date, account number, sub account, code, content,
type (in/out), amount, reference code, running balance.
"""

import csv
import hashlib
import io
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Sequence, Tuple

from vifin.schemas.webhook import SepayWebhookPayload
from vifin.services.text_normalizer import normalize

logger = logging.getLogger(__name__)

BANK_COL = 0
DATE_COL = 1
ACCOUNT_COL = 2
SUB_ACCOUNT_COL = 3
CODE_COL = 4
CONTENT_COL = 5
TYPE_COL = 6
AMOUNT_COL = 7
REFERENCE_COL = 8
ACCUMULATED_COL = 9

MIN_COLUMNS = 8
INCOMING_TYPES = {"in", "tien vao", "thu"}

_AMOUNT_NOISE = re.compile(r"[,\s₫đĐ]|VND", re.IGNORECASE)
_DOTTED_THOUSANDS = re.compile(r"^\d{1,3}(\.\d{3})+$")


class SheetParser:
    """Turns sheet rows into webhook payloads"""

    def parse_csv(self, text: str) -> List[List[str]]:
        """Split exported CSV text into rows, dropping blank lines"""
        reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
        return [row for row in reader if row and any(cell.strip() for cell in row)]

    def get_preview(self, rows: Sequence[Sequence[Any]], limit: int = 5) -> Tuple[List[str], List[List[str]]]:
        """Return headers and the first data rows"""
        if not rows:
            return [], []
        headers = [self._cell(rows[0], i) for i in range(len(rows[0]))]
        preview = [[self._cell(row, i) for i in range(len(row))] for row in rows[1:limit + 1]]
        return headers, preview

    def parse(self, rows: Sequence[Sequence[Any]], has_header: bool = True) -> List[SepayWebhookPayload]:
        """Convert every usable row; the first row is treated as a header"""
        payloads = []
        data_rows = rows[1:] if has_header else rows
        for row in data_rows:
            try:
                payload = self.to_payload(row)
            except (InvalidOperation, ValueError) as e:
                logger.warning("Skipping sheet row %s: %s", row, e)
                continue
            if payload:
                payloads.append(payload)
        return payloads

    def to_payload(self, row: Sequence[Any]) -> Optional[SepayWebhookPayload]:
        """One row -> payload, or None if the row lacks an account number or amount"""
        if len(row) < MIN_COLUMNS:
            return None

        account_number = self._cell(row, ACCOUNT_COL)
        amount = self._clean_amount(self._cell(row, AMOUNT_COL))
        if not account_number or amount is None:
            return None

        reference = self._cell(row, REFERENCE_COL)
        accumulated = self._clean_amount(self._cell(row, ACCUMULATED_COL))

        return SepayWebhookPayload(
            id=self.row_id(row),
            gateway=self._cell(row, BANK_COL) or None,
            transaction_date=self._cell(row, DATE_COL) or None,
            account_number=account_number,
            sub_account=self._cell(row, SUB_ACCOUNT_COL) or None,
            code=self._cell(row, CODE_COL) or None,
            content=self._cell(row, CONTENT_COL),
            transfer_type=self._parse_type(self._cell(row, TYPE_COL)),
            transfer_amount=abs(amount),
            reference_code=reference or None,
            accumulated=accumulated,
        )

    def row_id(self, row: Sequence[Any]) -> int:
        """Stable numeric id so re-imports of a row without reference code dedup"""
        key = "|".join(
            self._cell(row, col)
            for col in (BANK_COL, DATE_COL, ACCOUNT_COL, CONTENT_COL, TYPE_COL, AMOUNT_COL)
        )
        return int(hashlib.sha256(key.encode()).hexdigest()[:15], 16)

    def _cell(self, row: Sequence[Any], index: int) -> str:
        if index >= len(row) or row[index] is None:
            return ""
        return str(row[index]).strip()

    def _parse_type(self, value: str) -> str:
        return "in" if normalize(value) in INCOMING_TYPES else "out"

    def _clean_amount(self, amount_str: str) -> Optional[Decimal]:
        """Clean and parse amount string"""
        if not amount_str:
            return None

        amount_str = _AMOUNT_NOISE.sub("", amount_str)
        if _DOTTED_THOUSANDS.match(amount_str):
            amount_str = amount_str.replace(".", "")
        if not amount_str:
            return None

        try:
            return Decimal(amount_str)
        except InvalidOperation:
            return None
