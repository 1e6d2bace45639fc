# services/extractors/structured_data.py
"""
schema.org JSON-LD extraction.

Listing pages embed ``<script type="application/ld+json">`` blocks holding
either an ``ItemList`` of products or the product nodes themselves, often
wrapped in a list or an ``@graph``.
"""

import json
from typing import Any, Dict, Iterator, List, Optional

from bs4 import BeautifulSoup
from loguru import logger

from models.listing import DocumentKind, ItemCandidate, RawDocument, StrategyName

from .aliases import image_value, text_value
from .base import ExtractionStrategy
from .normalizers import absolutize, format_price

PRODUCT_TYPES = {"Product", "Car", "Vehicle", "IndividualProduct", "ProductModel"}
LIST_TYPES = {"ItemList", "OfferCatalog", "SearchResultsPage", "CollectionPage"}


def _types(node: Dict[str, Any]) -> set:
    declared = node.get("@type")
    if isinstance(declared, str):
        return {declared}
    if isinstance(declared, list):
        return {t for t in declared if isinstance(t, str)}
    return set()


def _iter_roots(payload: Any) -> Iterator[Dict[str, Any]]:
    """Flatten top-level lists and ``@graph`` containers."""
    if isinstance(payload, list):
        for entry in payload:
            yield from _iter_roots(entry)
    elif isinstance(payload, dict):
        if isinstance(payload.get("@graph"), list):
            yield from _iter_roots(payload["@graph"])
        else:
            yield payload


class StructuredDataExtractor(ExtractionStrategy):
    """Maps schema.org ``ItemList`` / ``Product`` nodes to candidates."""

    name = StrategyName.STRUCTURED_MARKUP
    kind = DocumentKind.HTML

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------
    def extract_blocks(self, html: str) -> List[Any]:
        """Every JSON-LD payload in the page; malformed blocks are skipped."""
        soup = BeautifulSoup(html, "html.parser")
        payloads = []
        for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
            raw = script.string or script.get_text()
            if not raw or not raw.strip():
                continue
            try:
                payloads.append(json.loads(raw))
            except ValueError as exc:
                logger.debug(f"structured_markup: skipping malformed JSON-LD block: {exc}")
        return payloads

    def _iter_products(self, node: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
        types = _types(node)
        if types & LIST_TYPES:
            elements = node.get("itemListElement") or node.get("mainEntity") or []
            if isinstance(elements, dict):
                elements = [elements]
            for element in elements if isinstance(elements, list) else []:
                if not isinstance(element, dict):
                    continue
                # CollectionPage.mainEntity is usually the ItemList itself
                if _types(element) & LIST_TYPES:
                    yield from self._iter_products(element)
                    continue
                if _types(element) & PRODUCT_TYPES:
                    yield element
                    continue
                item = element.get("item")
                if isinstance(item, dict):
                    if _types(item) & LIST_TYPES:
                        yield from self._iter_products(item)
                    else:
                        yield item
                elif element.get("url") or isinstance(item, str):
                    # bare ListItem: {"url": ..., "name": ...}
                    yield {"name": element.get("name"), "url": element.get("url") or item,
                           "image": element.get("image")}
        elif types & PRODUCT_TYPES:
            yield node

    # ------------------------------------------------------------------
    # Field mapping
    # ------------------------------------------------------------------
    @staticmethod
    def _offer(product: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        offers = product.get("offers")
        if isinstance(offers, list):
            offers = next((o for o in offers if isinstance(o, dict)), None)
        return offers if isinstance(offers, dict) else None

    def _price(self, product: Dict[str, Any]) -> str:
        offers = self._offer(product)
        if offers is None:
            return ""
        amount = offers.get("price")
        if amount is None:
            amount = offers.get("lowPrice")
        if isinstance(amount, dict):
            amount = amount.get("value")
        currency = offers.get("priceCurrency") or self.profile.currency
        return format_price(amount, currency, None)

    def _map_product(self, product: Dict[str, Any]) -> Dict[str, str]:
        origin = self.profile.origin
        url = product.get("url")
        if not isinstance(url, str) or not url.strip():
            offers = self._offer(product)
            url = offers.get("url") if offers is not None else ""
        return {
            "title": text_value(product.get("name")),
            "link": absolutize(url if isinstance(url, str) else "", origin),
            "image": absolutize(image_value(product.get("image")), origin),
            "price": self._price(product),
        }

    def _extract(self, doc: RawDocument) -> List[ItemCandidate]:
        candidates: List[ItemCandidate] = []
        for payload in self.extract_blocks(doc.body):
            for root in _iter_roots(payload):
                for product in self._iter_products(root):
                    fields = self._map_product(product)
                    if fields["link"] or fields["title"]:
                        candidates.append(self._candidate(fields))
        logger.debug(f"structured_markup: {len(candidates)} product nodes")
        return candidates
