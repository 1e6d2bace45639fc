# services/extractors/feed.py
from typing import List, Optional

from bs4 import BeautifulSoup, Tag
from loguru import logger

from core.exceptions import ParseFailure
from models.listing import DocumentKind, ItemCandidate, RawDocument, StrategyName

from .normalizers import absolutize, extract_price_from_free_text, format_price
from .base import ExtractionStrategy


class FeedStrategy(ExtractionStrategy):
    """
    Vendor Atom feed.

    Entries carry the listing link as ``<link rel="alternate">``, the photo
    as ``<media:content url=...>`` (or an enclosure link) and the price in
    a vendor namespace element such as ``<f:price name="main">``.
    """

    name = StrategyName.FEED
    kind = DocumentKind.ATOM_XML

    # ------------------------------------------------------------------
    # Field pickers
    # ------------------------------------------------------------------
    @staticmethod
    def _pick_link(entry: Tag) -> str:
        links = [l for l in entry.find_all("link", recursive=False) if l.get("href")]
        for link in links:
            if (link.get("rel") or "alternate") == "alternate":
                return link["href"]
        return links[0]["href"] if links else ""

    @staticmethod
    def _pick_image(entry: Tag) -> str:
        # media:content / media:thumbnail - matched on the url attribute so the
        # namespace prefix does not matter
        for tag in entry.find_all(["content", "thumbnail"]):
            if tag.get("url"):
                return tag["url"]
        for link in entry.find_all("link", recursive=False):
            if link.get("rel") == "enclosure" and link.get("href"):
                return link["href"]
        return ""

    def _pick_price(self, entry: Tag) -> str:
        prices = entry.find_all("price")
        chosen: Optional[Tag] = None
        for tag in prices:
            if tag.get("name") == "main":
                chosen = tag
                break
        if chosen is None and prices:
            chosen = prices[0]
        if chosen is not None:
            value_tag = chosen.find("value")
            raw = (value_tag or chosen).get_text(strip=True)
            formatted = format_price(raw, chosen.get("currency") or self.profile.currency, None)
            if formatted:
                return formatted

        for field in ("summary", "content", "description"):
            tag = entry.find(field, recursive=False)
            if tag is None:
                continue
            text = BeautifulSoup(tag.get_text(" "), "html.parser").get_text(" ")
            price = extract_price_from_free_text(text)
            if price:
                return price
        return ""

    # ------------------------------------------------------------------
    def _extract(self, doc: RawDocument) -> List[ItemCandidate]:
        if not doc.body.lstrip("\ufeff \t\r\n").startswith("<"):
            raise ParseFailure("feed body is not XML")
        soup = BeautifulSoup(doc.body, "xml")
        if soup.find("feed") is None:
            raise ParseFailure("no <feed> root element")

        origin = self.profile.origin
        candidates: List[ItemCandidate] = []
        for entry in soup.find_all("entry"):
            title_tag = entry.find("title", recursive=False)
            fields = {
                "title": title_tag.get_text(strip=True) if title_tag else "",
                "link": absolutize(self._pick_link(entry), origin),
                "image": absolutize(self._pick_image(entry), origin),
                "price": self._pick_price(entry),
            }
            if not fields["link"] and not fields["title"]:
                continue
            candidates.append(self._candidate(fields))

        logger.debug(f"feed: {len(candidates)} candidates")
        return candidates
