# services/listings/listing_service.py
from datetime import timedelta
from typing import Any, Dict, Optional, Tuple

from loguru import logger
from prometheus_client import Counter

from core.exceptions import ConfigurationError, FetchFailure, MissingIdentifierError
from models.listing import RawDocument
from models.listing_request import ListingRequest, SourceMode
from services.cache.cache_service import CacheService
from services.extractors.orchestrator import build_strategies, run_extraction
from services.fetch.gateway import FetchGateway
from services.sources.config_loader import SourceProfile

LISTING_REQUESTS = Counter('listing_requests_total', 'Listing requests served', ['source'])
LISTING_CACHE_HITS = Counter('listing_cache_hits_total', 'Listing requests answered from cache')


class ListingService:
    """
    Sequences fetching and extraction for one listing request.

    ``run_extraction`` handles exactly one document; choosing which
    document(s) to fetch - including the JSON -> Atom fallback when the
    vendor API refuses JSON - happens here.
    """

    def __init__(
        self,
        gateway: FetchGateway,
        profile: SourceProfile,
        default_org_id: str,
        cache_service: Optional[CacheService] = None,
        cache_ttl: int = 300,
    ):
        self.gateway = gateway
        self.profile = profile
        self.default_org_id = default_org_id
        self.cache_service = cache_service
        self.cache_ttl = cache_ttl
        self.strategies = build_strategies(profile)

    # ------------------------------------------------------------------
    def _resolve_org_id(self, request: ListingRequest) -> str:
        if request.org_id is None:
            return self.default_org_id
        if not request.org_id:
            raise MissingIdentifierError("orgId must not be empty")
        return request.org_id

    def _resolve_mode(self, mode: SourceMode) -> SourceMode:
        if mode is SourceMode.AUTO:
            return SourceMode.API if self.gateway.has_api_key else SourceMode.HTML
        if mode is SourceMode.API and not self.gateway.has_api_key:
            raise ConfigurationError("source=api requires a vendor API key")
        return mode

    async def _fetch_api_document(self, org_id: str) -> Tuple[RawDocument, str]:
        """JSON search API first; the Atom feed when JSON cannot be served."""
        try:
            return await self.gateway.fetch_api_json(org_id), "api"
        except FetchFailure as exc:
            logger.warning(
                f"JSON API unavailable for org {org_id} "
                f"(status={exc.upstream_status}), falling back to Atom feed"
            )
        return await self.gateway.fetch_atom_feed(org_id), "feed"

    # ------------------------------------------------------------------
    async def get_listings(self, request: ListingRequest) -> Dict[str, Any]:
        """Return the response envelope for ``request``; raises ``ListingException``."""
        org_id = self._resolve_org_id(request)
        mode = self._resolve_mode(request.source)
        options = {"source": mode.value}

        if self.cache_service is not None:
            cached = await self.cache_service.get_cached_result(org_id, options)
            if cached is not None:
                LISTING_CACHE_HITS.inc()
                return {**cached, "cached": True}

        if mode is SourceMode.API:
            doc, source = await self._fetch_api_document(org_id)
        else:
            doc, source = await self.gateway.fetch_search_page(org_id), "html"

        result = run_extraction(doc, self.profile, self.strategies)
        LISTING_REQUESTS.labels(source=source).inc()
        logger.info(
            f"FINN scrape ({source}) orgId={org_id} count={result.count} "
            f"strategy={result.strategy_used.value if result.strategy_used else None}"
        )

        envelope = result.to_envelope(source=source)
        if result.ok and self.cache_service is not None:
            await self.cache_service.cache_result(
                org_id, options, envelope, ttl=timedelta(seconds=self.cache_ttl)
            )
        return envelope
