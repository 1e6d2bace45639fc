# services/extractors/structured_api.py
import json
from typing import Any, List, Optional, Sequence

from loguru import logger

from core.exceptions import ParseFailure
from models.listing import DocumentKind, ItemCandidate, RawDocument, StrategyName

from .aliases import map_listing
from .base import ExtractionStrategy


class StructuredApiStrategy(ExtractionStrategy):
    """Vendor search API payload: ``{"docs": [{...}, ...]}`` or a variant of it."""

    name = StrategyName.STRUCTURED_API
    kind = DocumentKind.JSON

    def _find_docs(self, payload: Any) -> Optional[List[Any]]:
        """Walk each configured path; the first one ending in a list wins."""
        for path in self.profile.docs_paths:
            node = payload
            for key in path:
                if not isinstance(node, dict) or key not in node:
                    node = None
                    break
                node = node[key]
            if isinstance(node, list):
                return node
        return None

    def _extract(self, doc: RawDocument) -> List[ItemCandidate]:
        try:
            payload = json.loads(doc.body)
        except (TypeError, ValueError) as exc:
            raise ParseFailure(f"invalid JSON: {exc}") from exc

        docs: Optional[Sequence[Any]] = self._find_docs(payload)
        if docs is None:
            logger.debug("structured_api: no docs list at any configured path")
            return []

        p = self.profile
        candidates: List[ItemCandidate] = []
        for entry in docs:
            if not isinstance(entry, dict):
                continue
            fields = map_listing(entry, p.origin, p.item_link_template, p.currency)
            if not fields["link"] and not fields["title"]:
                continue
            candidates.append(self._candidate(fields))

        logger.debug(f"structured_api: {len(candidates)} candidates from {len(docs)} docs")
        return candidates
