# services/extractors/normalizers.py
"""
Pure field normalizers shared by every extraction strategy.

None of these raise: bad input degrades to an empty string (or to the
input itself, for ``absolutize``).
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

DEFAULT_ORIGIN = "https://www.finn.no"
DEFAULT_CURRENCY = "kr"

# ISO codes that render with a local suffix instead of the code itself
CURRENCY_SUFFIXES = {
    "NOK": "kr",
    "SEK": "kr",
    "DKK": "kr",
    "KR": "kr",
    "EUR": "€",
}

# 2+ digits, optionally in 3-digit groups split by (non-breaking) spaces or
# dots, an optional decimal tail (dropped), then a currency marker
_FREE_TEXT_PRICE = re.compile(
    r"(?<![\d,])(\d{1,3}(?:[ \u00a0\u202f.]\d{3})+|\d{2,})(?:,\d{1,2})?\s*(?:kr\b|nok\b|,-)",
    re.IGNORECASE,
)


def absolutize(href: Optional[str], origin: str = DEFAULT_ORIGIN) -> str:
    """Turn a protocol-relative or root-relative href into an absolute URL."""
    if not href:
        return ""
    href = href.strip()
    if href.startswith("//"):
        return "https:" + href
    if href.startswith("/"):
        return origin.rstrip("/") + href
    return href


def best_image_from_srcset(srcset: Optional[str]) -> str:
    """
    Pick the last ``url descriptor`` pair of a srcset (highest resolution)
    and return its URL.
    """
    if not srcset:
        return ""
    parts = [p.strip() for p in srcset.split(",") if p.strip()]
    if not parts:
        return ""
    return parts[-1].split()[0]


def _to_decimal(amount: Union[int, float, str, Decimal, None]) -> Optional[Decimal]:
    if amount is None or isinstance(amount, bool):
        return None
    try:
        if isinstance(amount, str):
            amount = re.sub(r"\s", "", amount).replace(",", ".")
            if not amount:
                return None
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value


def format_price(
    amount: Union[int, float, str, Decimal, None] = None,
    currency_code: Optional[str] = None,
    display: Optional[str] = None,
) -> str:
    """
    ``display`` wins verbatim; otherwise ``amount`` is rendered with space
    thousands separators and a currency suffix (``245 000 kr``).
    """
    if display and display.strip():
        return display.strip()

    value = _to_decimal(amount)
    if value is None:
        return ""

    code = (currency_code or DEFAULT_CURRENCY).strip() or DEFAULT_CURRENCY
    suffix = CURRENCY_SUFFIXES.get(code.upper(), code)

    if value == value.to_integral_value():
        number = f"{int(value):,}".replace(",", " ")
    else:
        number = f"{value:,.2f}".replace(",", " ").replace(".", ",")
    return f"{number} {suffix}"


def extract_price_from_free_text(text: Optional[str]) -> str:
    """Find the first ``245 000 kr`` / ``245000,-`` style amount in ``text``."""
    if not text:
        return ""
    match = _FREE_TEXT_PRICE.search(text)
    if not match:
        return ""
    digits = re.sub(r"\D", "", match.group(1))
    if len(digits) < 2:
        return ""
    return format_price(int(digits), DEFAULT_CURRENCY, None)
