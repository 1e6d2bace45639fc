# services/extractors/orchestrator.py
"""
Runs the extraction strategies over one fetched document.

Strategies are tried in priority order, restricted to those that understand
the document's kind.  The first one that yields anything wins; its
candidates are normalised and deduplicated (stable, first seen wins).
"""

import time
from typing import Iterable, List, Optional, Sequence, Set

from loguru import logger
from prometheus_client import Counter, Histogram

from models.listing import (
    ErrorInfo,
    ExtractionResult,
    ItemCandidate,
    ItemRecord,
    RawDocument,
    StrategyName,
    is_absolute_url,
)
from services.sources.config_loader import SourceProfile

from .app_state import AppStateStrategy
from .base import ExtractionStrategy
from .dom_heuristic import DomHeuristicStrategy
from .feed import FeedStrategy
from .normalizers import absolutize
from .structured_api import StructuredApiStrategy
from .structured_data import StructuredDataExtractor

# Priority order - do not sort
STRATEGY_CLASSES = (
    StructuredApiStrategy,
    FeedStrategy,
    AppStateStrategy,
    StructuredDataExtractor,
    DomHeuristicStrategy,
)

NO_STRATEGY_MATCHED = "NO_STRATEGY_MATCHED"

EXTRACTION_RUNS = Counter('extraction_runs_total', 'Extraction runs', ['kind'])
STRATEGY_WINS = Counter('extraction_strategy_wins_total', 'Runs won by each strategy', ['strategy'])
NO_MATCH_TOTAL = Counter('extraction_no_match_total', 'Runs where no strategy recovered items')
EXTRACTION_DURATION = Histogram('extraction_duration_seconds', 'Time spent in run_extraction')


def build_strategies(profile: Optional[SourceProfile] = None) -> List[ExtractionStrategy]:
    """Instantiate every strategy, in priority order, for one source profile."""
    return [cls(profile) for cls in STRATEGY_CLASSES]


def normalize_candidate(candidate: ItemCandidate, origin: str) -> Optional[ItemCandidate]:
    """
    Repair relative links/images; blank links that are still not absolute.

    Returns ``None`` for candidates with neither a link nor a title.
    """
    link = absolutize(candidate.link, origin)
    if link and not is_absolute_url(link):
        logger.debug(f"Dropping non-absolute link {candidate.link!r}")
        link = ""
    image = absolutize(candidate.image, origin)
    if not link and not candidate.title:
        return None
    if link == candidate.link and image == candidate.image:
        return candidate
    return candidate.model_copy(update={"link": link, "image": image})


def dedupe_candidates(candidates: Iterable[ItemCandidate]) -> List[ItemRecord]:
    """
    Stable dedup keyed by ``link`` (``title|image`` when the link is empty).
    First occurrence wins; order is preserved.
    """
    seen: Set[str] = set()
    records: List[ItemRecord] = []
    for candidate in candidates:
        key = candidate.dedup_key
        if key in seen:
            continue
        seen.add(key)
        records.append(candidate.to_record())
    return records


def run_extraction(
    doc: RawDocument,
    profile: Optional[SourceProfile] = None,
    strategies: Optional[Sequence[ExtractionStrategy]] = None,
) -> ExtractionResult:
    """Extract, normalise and deduplicate items from one document."""
    profile = profile or SourceProfile()
    if strategies is None:
        strategies = build_strategies(profile)

    EXTRACTION_RUNS.labels(kind=doc.kind.value).inc()
    started = time.perf_counter()
    attempted: List[StrategyName] = []

    with EXTRACTION_DURATION.time():
        for strategy in strategies:
            if not strategy.accepts(doc):
                continue
            attempted.append(strategy.name)

            raw = strategy.extract(doc)
            if not raw:
                logger.debug(f"{strategy.name.value} found nothing, escalating")
                continue

            normalized = [c for c in (normalize_candidate(c, profile.origin) for c in raw) if c is not None]
            items = dedupe_candidates(normalized)
            if not items:
                logger.debug(f"{strategy.name.value} candidates were all unusable, escalating")
                continue

            STRATEGY_WINS.labels(strategy=strategy.name.value).inc()
            logger.info(
                f"Extracted {len(items)} items ({len(raw)} candidates) from "
                f"{doc.source_url or doc.kind.value} via {strategy.name.value} "
                f"in {time.perf_counter() - started:.3f}s"
            )
            return ExtractionResult(ok=True, items=tuple(items), strategy_used=strategy.name)

    NO_MATCH_TOTAL.inc()
    names = ", ".join(s.value for s in attempted) or "none"
    logger.warning(f"No strategy recovered items from {doc.source_url or doc.kind.value} (tried: {names})")
    return ExtractionResult(
        ok=False,
        error=ErrorInfo(
            code=NO_STRATEGY_MATCHED,
            message=f"No extraction strategy recovered any items (tried: {names})",
            attempted=tuple(attempted),
            status=doc.http_status,
        ),
    )
