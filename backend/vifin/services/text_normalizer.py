"""Vietnamese-aware text normalization for matching and storage."""

import unicodedata

MAX_DESCRIPTION_LENGTH = 500

# Base letter -> every toned/modified lowercase form of it
_VIETNAMESE_VARIANTS = {
    "a": "àáảãạăằắẳẵặâầấẩẫậ",
    "e": "èéẻẽẹêềếểễệ",
    "i": "ìíỉĩị",
    "o": "òóỏõọôồốổỗộơờớởỡợ",
    "u": "ùúủũụưừứửữự",
    "y": "ỳýỷỹỵ",
    "d": "đ",
}


def _build_table() -> dict:
    table = {}
    for base, variants in _VIETNAMESE_VARIANTS.items():
        for ch in variants:
            table[ord(ch)] = base
            table[ord(ch.upper())] = base.upper()
    return table


DIACRITIC_TABLE = _build_table()


def strip_diacritics(text: str) -> str:
    """Replace Vietnamese accented letters with their base letter, keeping case."""
    # Compose first so decomposed input hits the table too
    return unicodedata.normalize("NFC", text).translate(DIACRITIC_TABLE)


def normalize(text: str) -> str:
    """
    Matching form of a string: diacritics stripped, lowercased, trimmed.

    normalize("Chuyển tiền ĐIỆN") == "chuyen tien dien"
    """
    if not text:
        return ""
    return strip_diacritics(text).lower().strip()


def clean_description(text: str) -> str:
    """Storage form of a bank description: ASCII-folded, single-spaced, upper-case."""
    if not text:
        return ""
    cleaned = " ".join(strip_diacritics(text).split()).upper()
    return cleaned[:MAX_DESCRIPTION_LENGTH]
