# services/fetch/gateway.py
"""
Network boundary: retrieves raw documents from the listings site.

``Fetcher`` is the narrow ``fetch(url, headers) -> (status, body)``
contract; ``HttpxFetcher`` implements it over ``httpx.AsyncClient`` and
retries transport errors only.  ``FetchGateway`` knows which endpoint and
headers each document kind needs and turns non-2xx answers into
``FetchFailure``.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Protocol

import httpx
from loguru import logger
from prometheus_client import Counter, Histogram
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from core.exceptions import ConfigurationError, FetchFailure
from models.listing import DocumentKind, RawDocument
from services.sources.config_loader import SourceProfile

FETCH_REQUESTS = Counter('fetch_requests_total', 'Upstream fetches', ['channel'])
FETCH_FAILURES = Counter('fetch_failures_total', 'Failed upstream fetches', ['channel'])
FETCH_DURATION = Histogram('fetch_duration_seconds', 'Time spent fetching upstream documents')


@dataclass(frozen=True)
class FetchResponse:
    status: int
    body: str


class Fetcher(Protocol):
    async def fetch(self, url: str, headers: Mapping[str, str]) -> FetchResponse:
        ...


class HttpxFetcher:
    """``Fetcher`` over a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
        max_attempts: int = 3,
        backoff: float = 0.5,
    ):
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._owns_client = client is None
        self.max_attempts = max(1, max_attempts)
        self.backoff = backoff

    async def fetch(self, url: str, headers: Mapping[str, str]) -> FetchResponse:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential(multiplier=self.backoff, max=4),
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(f"Retrying {url} (attempt {attempt.retry_state.attempt_number}/{self.max_attempts})")
                    resp = await self._client.get(url, headers=dict(headers))
        except httpx.TransportError as exc:
            raise FetchFailure(f"Could not reach upstream: {exc}", url=url) from exc
        return FetchResponse(status=resp.status_code, body=resp.text)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class FetchGateway:
    """Endpoint and header selection per document kind."""

    def __init__(
        self,
        fetcher: Fetcher,
        profile: SourceProfile,
        api_key: Optional[str] = None,
        user_agent: str = "Mozilla/5.0",
        accept_language: str = "nb-NO,nb;q=0.9,no;q=0.8,en;q=0.5",
    ):
        self.fetcher = fetcher
        self.profile = profile
        self.api_key = api_key
        self.user_agent = user_agent
        self.accept_language = accept_language

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    # ------------------------------------------------------------------
    # Headers
    # ------------------------------------------------------------------
    def _html_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept-Language": self.accept_language,
            "Cache-Control": "no-cache",
        }

    def _api_headers(self, accept: str) -> Dict[str, str]:
        if not self.api_key:
            raise ConfigurationError("Vendor API key is not configured")
        return {
            self.profile.api_key_header: self.api_key,
            "Accept": accept,
            "User-Agent": self.user_agent,
        }

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------
    async def _get(self, channel: str, kind: DocumentKind, url: str, headers: Dict[str, str]) -> RawDocument:
        FETCH_REQUESTS.labels(channel=channel).inc()
        logger.debug(f"Fetching {channel} document {url}")
        try:
            with FETCH_DURATION.time():
                resp = await self.fetcher.fetch(url, headers)
        except FetchFailure:
            FETCH_FAILURES.labels(channel=channel).inc()
            raise

        if not 200 <= resp.status < 300:
            FETCH_FAILURES.labels(channel=channel).inc()
            logger.warning(f"Upstream answered {resp.status} for {url}")
            raise FetchFailure(
                f"Upstream returned HTTP {resp.status}",
                upstream_status=resp.status,
                url=url,
            )
        return RawDocument(kind=kind, body=resp.body, source_url=url, http_status=resp.status)

    async def fetch_search_page(self, org_id: str) -> RawDocument:
        url = self.profile.search_url.format(org_id=org_id)
        return await self._get("html", DocumentKind.HTML, url, self._html_headers())

    async def fetch_api_json(self, org_id: str) -> RawDocument:
        headers = self._api_headers("application/json")
        url = self.profile.api_url.format(org_id=org_id)
        return await self._get("api", DocumentKind.JSON, url, headers)

    async def fetch_atom_feed(self, org_id: str) -> RawDocument:
        headers = self._api_headers("application/atom+xml")
        url = self.profile.api_url.format(org_id=org_id)
        return await self._get("feed", DocumentKind.ATOM_XML, url, headers)
