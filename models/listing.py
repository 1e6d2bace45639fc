# models/listing.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ----------------------------------------------------------------------
#  Enumerations
# ----------------------------------------------------------------------
class DocumentKind(str, Enum):
    HTML = "html"
    JSON = "json"
    ATOM_XML = "atom_xml"


class StrategyName(str, Enum):
    STRUCTURED_API = "structured_api"
    FEED = "feed"
    APP_STATE = "app_state"
    STRUCTURED_MARKUP = "structured_markup"
    DOM_HEURISTIC = "dom_heuristic"


def is_absolute_url(url: str) -> bool:
    """True when ``url`` carries both a scheme and a host."""
    if not url:
        return False
    parsed = urlparse(url)
    return bool(parsed.scheme and parsed.netloc)


# ----------------------------------------------------------------------
#  Fetched payload
# ----------------------------------------------------------------------
class RawDocument(BaseModel):
    """A fetched document, exactly as the upstream returned it."""

    model_config = ConfigDict(frozen=True)

    kind: DocumentKind
    body: str = ""
    source_url: str = ""
    http_status: int = 200


# ----------------------------------------------------------------------
#  Extracted records
# ----------------------------------------------------------------------
class ItemRecord(BaseModel):
    """
    One listing as returned to callers.

    String fields are stripped; ``None`` becomes an empty string so the
    JSON envelope always carries all four keys.
    """

    model_config = ConfigDict(frozen=True)

    title: str = ""
    link: str = ""
    image: str = ""
    price: str = ""

    @field_validator("title", "link", "image", "price", mode="before")
    @classmethod
    def _strip_and_blank(cls, v: Any) -> str:
        if v is None:
            return ""
        if not isinstance(v, str):
            v = str(v)
        return " ".join(v.split()) if v.strip() else ""

    @property
    def dedup_key(self) -> str:
        """``link`` when present, otherwise ``title|image``."""
        if self.link:
            return self.link
        return f"{self.title}|{self.image}"


class ItemCandidate(ItemRecord):
    """A record before deduplication, tagged with the strategy that produced it."""

    source_strategy: StrategyName

    def to_record(self) -> ItemRecord:
        return ItemRecord(title=self.title, link=self.link, image=self.image, price=self.price)


# ----------------------------------------------------------------------
#  Run outcome
# ----------------------------------------------------------------------
class ErrorInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    attempted: Tuple[StrategyName, ...] = ()
    status: Optional[int] = None


class ExtractionResult(BaseModel):
    """Read-only snapshot of one extraction run."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    items: Tuple[ItemRecord, ...] = Field(default_factory=tuple)
    strategy_used: Optional[StrategyName] = None
    error: Optional[ErrorInfo] = None

    @property
    def count(self) -> int:
        return len(self.items)

    def to_envelope(self, source: Optional[str] = None) -> Dict[str, Any]:
        """Render the JSON envelope served by ``/finn`` and ``/cars``."""
        envelope: Dict[str, Any] = {
            "ok": self.ok,
            "items": [item.model_dump() for item in self.items],
            "count": self.count,
        }
        if source:
            envelope["source"] = source
        if self.strategy_used is not None:
            envelope["strategy"] = self.strategy_used.value
        if self.error is not None:
            envelope["error"] = self.error.message
            envelope["code"] = self.error.code
            if self.error.attempted:
                envelope["attempted"] = [s.value for s in self.error.attempted]
        return envelope
