"""
Merchant name extraction from free-text bank descriptions.

Rules are tried in order and the first one that yields a usable name wins:

    STARBUCKS - NEW YORK        -> STARBUCKS
    POS WALMART SUPERCENTER 12  -> WALMART SUPERCENTER
    AMAZON.COM *SEATTLE WA      -> AMAZON.COM
    NETFLIX #12345              -> NETFLIX
    TARGET STORE NEW YORK NY    -> TARGET
    WWW.PAYPAL.COM              -> PAYPAL
    SHELL 20231115              -> SHELL
    SPOTIFY CARD 1234           -> SPOTIFY
"""

import re
from typing import Callable, List, NamedTuple, Optional

from vifin.services.text_normalizer import strip_diacritics

GENERIC_WORDS = {
    "PAYMENT",
    "TRANSFER",
    "WITHDRAWAL",
    "DEPOSIT",
    "TRANSACTION",
    "PURCHASE",
    "DEBIT",
    "CREDIT",
    "FEE",
    "CHARGE",
}

_DISALLOWED_CHARS = re.compile(r"[^A-Z0-9\s&'.]", re.IGNORECASE)


class MerchantRule(NamedTuple):
    name: str
    extract: Callable[[str], Optional[str]]


def _regex_rule(name: str, pattern: str) -> MerchantRule:
    """Rule that returns the first capture group of an anchored pattern."""
    compiled = re.compile(pattern, re.IGNORECASE)

    def extract(text: str) -> Optional[str]:
        match = compiled.match(text)
        return match.group(1) if match else None

    return MerchantRule(name, extract)


def looks_like_merchant_name(text: str) -> bool:
    """At least 3 chars, not all digits, not a generic banking word."""
    if len(text) < 3:
        return False
    if text.isdigit():
        return False
    return text.upper() not in GENERIC_WORDS


def _first_words(text: str) -> Optional[str]:
    words = text.split()
    if not words or len(words[0]) < 3:
        return None
    candidate = " ".join(words[:3])
    return candidate if looks_like_merchant_name(candidate) else None


MERCHANT_RULES: List[MerchantRule] = [
    _regex_rule("dash", r"^([A-Z0-9\s&'.]+?)\s*-\s*"),
    _regex_rule("pos_atm", r"^(?:POS|ATM)\s+(.+?)(?:\s+\d|$)"),
    _regex_rule("asterisk", r"^(.+?)\s*\*\s*"),
    _regex_rule("hash", r"^(.+?)\s*#\s*"),
    _regex_rule("city_state", r"^([A-Z][A-Z0-9\s&'.]{2,}?)(?:\s+[A-Z]{2,}){2,}"),
    _regex_rule("domain", r"^(?:WWW\.)?([A-Z0-9]+)\.(?:COM|NET|ORG)"),
    _regex_rule("trailing_date", r"^(.+?)\s+\d{8}$"),
    _regex_rule("trailing_card", r"^(.+?)\s+(?:CARD|XXXX)\s*\d+$"),
    _regex_rule("leading_token", r"^([A-Z][A-Z\s&'.]{2,}?)(?:\s+\d|\s+[^A-Z\s])"),
    MerchantRule("first_words", _first_words),
]


def clean_merchant_name(name: str) -> str:
    """Keep letters, digits, space, &, ' and . then single-space and upper-case."""
    stripped = _DISALLOWED_CHARS.sub("", name)
    return " ".join(stripped.split()).upper()


def extract_merchant(description: Optional[str]) -> Optional[str]:
    """Return a canonical merchant token for a description, or None."""
    if not description or not description.strip():
        return None

    text = strip_diacritics(description.strip())

    for rule in MERCHANT_RULES:
        candidate = rule.extract(text)
        if candidate is None:
            continue
        merchant = clean_merchant_name(candidate)
        # A rule that cleans down to nothing did not really match
        if merchant:
            return merchant

    return None
