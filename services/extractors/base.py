# services/extractors/base.py
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from loguru import logger

from core.exceptions import ParseFailure
from models.item_factory import candidate_from_mapping
from models.listing import DocumentKind, ItemCandidate, RawDocument, StrategyName
from services.sources.config_loader import SourceProfile


class ExtractionStrategy(ABC):
    """
    One self-contained way of turning a document into item candidates.

    Subclasses declare the document ``kind`` they understand and implement
    ``_extract``.  The public ``extract`` never raises: a parse failure (or
    any other surprise inside a strategy) is logged and reported as "no
    candidates" so the orchestrator can move on to the next strategy.
    """

    name: StrategyName
    kind: DocumentKind

    def __init__(self, profile: Optional[SourceProfile] = None):
        self.profile = profile or SourceProfile()

    def accepts(self, doc: RawDocument) -> bool:
        return doc.kind == self.kind

    def extract(self, doc: RawDocument) -> List[ItemCandidate]:
        try:
            return self._extract(doc)
        except ParseFailure as exc:
            logger.info(f"{self.name.value}: could not parse {doc.source_url or 'document'}: {exc}")
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning(f"{self.name.value}: extraction error on {doc.source_url or 'document'}: {exc!r}")
        return []

    @abstractmethod
    def _extract(self, doc: RawDocument) -> List[ItemCandidate]:
        ...

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------
    def _candidate(self, fields: Dict[str, Any]) -> ItemCandidate:
        return candidate_from_mapping(fields, self.name)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name.value} kind={self.kind.value}>"
