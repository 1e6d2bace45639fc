# services/extractors/aliases.py
"""
Alias-priority field lookup for untyped JSON listing objects.

The upstream API and the embedded app state name the same fields
differently from release to release (``heading`` vs ``title``,
``ad_id`` vs ``id`` ...).  Each logical field has a fixed priority list;
the first alias holding a non-empty value wins.
"""

from typing import Any, Dict, Iterable, Optional

from .normalizers import absolutize, format_price

TITLE_KEYS = ("heading", "title", "name")
IMAGE_KEYS = ("image", "image_url", "imageUrl", "images", "thumbnail", "photo")
LINK_KEYS = ("canonical_url", "canonicalUrl", "url", "link", "href")
ID_KEYS = ("ad_id", "adId", "finnkode", "id")
PRICE_KEYS = ("price", "price_total", "totalPrice", "amount")

# keys inside nested objects
_IMAGE_URL_KEYS = ("url", "src", "href", "uri", "path")
_PRICE_DISPLAY_KEYS = ("display", "formatted", "text", "label")
_PRICE_AMOUNT_KEYS = ("amount", "value", "total", "price")
_PRICE_CURRENCY_KEYS = ("currency_code", "currencyCode", "currency")


def is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, dict, tuple)):
        return len(value) > 0
    return True


def first_present(obj: Dict[str, Any], keys: Iterable[str]) -> Optional[Any]:
    """Value of the first alias in ``keys`` that ``obj`` holds and is non-empty."""
    for key in keys:
        if key in obj and is_present(obj[key]):
            return obj[key]
    return None


def text_value(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def image_value(value: Any) -> str:
    """Resolve a string, ``{"url": ...}`` object, or list of either to one URL."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, dict):
        found = first_present(value, _IMAGE_URL_KEYS)
        return image_value(found) if found is not None else ""
    if isinstance(value, (list, tuple)):
        for entry in value:
            resolved = image_value(entry)
            if resolved:
                return resolved
    return ""


def price_value(value: Any, default_currency: str) -> str:
    """
    Render whatever a listing exposes as its price.

    Accepts a bare number, a numeric string, a display string, or an object
    with amount/currency (or a preformatted display) inside.
    """
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        return format_price(value, default_currency, None)
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.replace(" ", "").isdigit():
            return format_price(stripped, default_currency, None)
        return format_price(None, None, stripped)
    if isinstance(value, dict):
        display = first_present(value, _PRICE_DISPLAY_KEYS)
        amount = first_present(value, _PRICE_AMOUNT_KEYS)
        currency = first_present(value, _PRICE_CURRENCY_KEYS)
        if isinstance(amount, dict):
            return price_value(amount, text_value(currency) or default_currency)
        return format_price(
            amount,
            text_value(currency) or default_currency,
            display if isinstance(display, str) else None,
        )
    return ""


def link_value(obj: Dict[str, Any], origin: str, link_template: str) -> str:
    """Direct link field, else the identifier pushed through ``link_template``."""
    direct = first_present(obj, LINK_KEYS)
    if isinstance(direct, str):
        return absolutize(direct, origin)
    identifier = first_present(obj, ID_KEYS)
    if identifier is not None and link_template and not isinstance(identifier, (dict, list)):
        return link_template.format(id=identifier)
    return ""


def map_listing(obj: Dict[str, Any], origin: str, link_template: str, currency: str) -> Dict[str, str]:
    """Map one listing-like JSON object to candidate fields."""
    return {
        "title": text_value(first_present(obj, TITLE_KEYS)),
        "link": link_value(obj, origin, link_template),
        "image": absolutize(image_value(first_present(obj, IMAGE_KEYS)), origin),
        "price": price_value(first_present(obj, PRICE_KEYS), currency),
    }
