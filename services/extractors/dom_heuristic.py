# services/extractors/dom_heuristic.py
import re
from typing import List, Optional, Set

from bs4 import BeautifulSoup, Tag
from loguru import logger

from models.listing import DocumentKind, ItemCandidate, RawDocument, StrategyName

from .base import ExtractionStrategy
from .normalizers import absolutize, best_image_from_srcset

# "kr" as a word, or the Norwegian ",-" price suffix
CURRENCY_MARKER = re.compile(r"\bkr\b|,-|\bNOK\b", re.IGNORECASE)


class DomHeuristicStrategy(ExtractionStrategy):
    """
    Last resort over server-rendered search results.

    Finds anchors pointing at listing URLs, climbs to the enclosing card and
    reads title, image and price from inside that card only.  When no anchor
    matches, the raw text is scanned for listing URLs and link-only items
    are produced.
    """

    name = StrategyName.DOM_HEURISTIC
    kind = DocumentKind.HTML

    # ------------------------------------------------------------------
    # Card helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _card_for(anchor: Tag) -> Tag:
        return anchor.find_parent("article") or anchor.find_parent("li") or anchor.parent or anchor

    def _title(self, card: Tag, anchor: Tag) -> str:
        for selector in self.profile.title_selectors:
            el = card.select_one(selector)
            if el is not None:
                text = el.get_text(" ", strip=True)
                if text:
                    return text
        return (
            (anchor.get("title") or "").strip()
            or anchor.get_text(" ", strip=True)
            or self.profile.untitled_placeholder
        )

    @staticmethod
    def _image(card: Tag) -> str:
        img = card.find("img")
        if img is not None:
            src = img.get("src") or img.get("data-src")
            if src:
                return src
        source = card.find("source", srcset=True)
        if source is not None:
            picked = best_image_from_srcset(source["srcset"])
            if picked:
                return picked
        if img is not None and img.get("srcset"):
            return best_image_from_srcset(img["srcset"])
        return ""

    def _price(self, card: Tag) -> str:
        for selector in self.profile.price_selectors:
            el = card.select_one(selector)
            if el is not None:
                text = el.get_text(" ", strip=True)
                if text:
                    return text
        for el in card.find_all(True):
            if el.find(True) is not None:
                continue
            text = el.get_text(" ", strip=True)
            if text and CURRENCY_MARKER.search(text):
                return text
        return ""

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------
    def _scan_cards(self, soup: BeautifulSoup, pattern: "re.Pattern[str]") -> List[ItemCandidate]:
        origin = self.profile.origin
        candidates: List[ItemCandidate] = []
        for anchor in soup.find_all("a", href=pattern):
            link = absolutize(anchor["href"], origin)
            if not link:
                continue
            card = self._card_for(anchor)
            candidates.append(self._candidate({
                "title": self._title(card, anchor),
                "link": link,
                "image": absolutize(self._image(card), origin),
                "price": self._price(card),
            }))
        return candidates

    def _scan_raw(self, body: str, pattern: "re.Pattern[str]") -> List[ItemCandidate]:
        seen: Set[str] = set()
        candidates: List[ItemCandidate] = []
        for match in pattern.finditer(body):
            link = absolutize(match.group(0), self.profile.origin)
            if link in seen:
                continue
            seen.add(link)
            candidates.append(self._candidate({
                "title": self.profile.link_only_title,
                "link": link,
            }))
        return candidates

    def _extract(self, doc: RawDocument) -> List[ItemCandidate]:
        pattern: Optional["re.Pattern[str]"] = self.profile.listing_regex
        if pattern is None:
            logger.debug("dom_heuristic: no listing URL patterns configured")
            return []

        soup = BeautifulSoup(doc.body, "html.parser")
        candidates = self._scan_cards(soup, pattern)
        if candidates:
            logger.debug(f"dom_heuristic: {len(candidates)} card anchors")
            return candidates

        candidates = self._scan_raw(doc.body, pattern)
        if candidates:
            logger.info(f"dom_heuristic: no cards found, {len(candidates)} link-only items from raw text")
        return candidates
