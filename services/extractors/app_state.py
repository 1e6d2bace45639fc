# services/extractors/app_state.py
import json
from typing import Any, Iterator, List, Optional

from bs4 import BeautifulSoup
from loguru import logger

from core.exceptions import ParseFailure
from models.listing import DocumentKind, ItemCandidate, RawDocument, StrategyName

from .aliases import IMAGE_KEYS, TITLE_KEYS, first_present, image_value, map_listing, text_value
from .base import ExtractionStrategy

# JSON from a script tag is at most a few hundred levels deep in practice
MAX_DEPTH = 200


# children of a listing that describe its photo or its seller, not other listings
_LISTING_DETAIL_KEYS = frozenset(IMAGE_KEYS) | {"seller", "dealer", "organisation", "organization", "logo"}


def looks_like_listing(node: Any) -> bool:
    """An object with both a usable title-like and image-like field."""
    if not isinstance(node, dict):
        return False
    title = text_value(first_present(node, TITLE_KEYS))
    image = image_value(first_present(node, IMAGE_KEYS))
    return bool(title) and bool(image)


def iter_listing_nodes(node: Any, depth: int = 0) -> Iterator[dict]:
    """
    Depth-first walk over parsed JSON yielding every listing-like object.

    Matching objects are descended into as well, so a page-level object
    that happens to carry a title and an og-image does not hide the
    listings below it.  Photo and seller children of a match are skipped.
    """
    if depth > MAX_DEPTH:
        return
    if isinstance(node, dict):
        matched = looks_like_listing(node)
        if matched:
            yield node
        for key, value in node.items():
            if matched and key in _LISTING_DETAIL_KEYS:
                continue
            yield from iter_listing_nodes(value, depth + 1)
    elif isinstance(node, list):
        for value in node:
            yield from iter_listing_nodes(value, depth + 1)


class AppStateStrategy(ExtractionStrategy):
    """Serialized application state (``<script id="__NEXT_DATA__">``)."""

    name = StrategyName.APP_STATE
    kind = DocumentKind.HTML

    def _find_state(self, soup: BeautifulSoup) -> Optional[str]:
        for script_id in self.profile.app_state_script_ids:
            script = soup.find("script", id=script_id)
            if script is not None:
                return script.string or script.get_text()
        return None

    def _extract(self, doc: RawDocument) -> List[ItemCandidate]:
        soup = BeautifulSoup(doc.body, "html.parser")
        raw_state = self._find_state(soup)
        if not raw_state:
            return []

        try:
            state = json.loads(raw_state)
        except ValueError as exc:
            raise ParseFailure(f"app state is not valid JSON: {exc}") from exc

        p = self.profile
        candidates = [
            self._candidate(map_listing(node, p.origin, p.item_link_template, p.currency))
            for node in iter_listing_nodes(state)
        ]
        logger.debug(f"app_state: {len(candidates)} listing-like objects")
        return candidates
