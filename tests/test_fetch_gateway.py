# tests/test_fetch_gateway.py
import httpx
import pytest

from core.exceptions import ConfigurationError, FetchFailure
from models.listing import DocumentKind
from services.fetch.gateway import FetchGateway, FetchResponse, HttpxFetcher


class RecordingFetcher:
    """Fetcher stub returning canned responses and remembering the calls."""

    def __init__(self, status=200, body="<html></html>"):
        self.status = status
        self.body = body
        self.calls = []

    async def fetch(self, url, headers):
        self.calls.append((url, dict(headers)))
        return FetchResponse(status=self.status, body=self.body)


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# -------------------------------------------------------------------
# FetchGateway
# -------------------------------------------------------------------
@pytest.mark.asyncio
async def test_search_page_request(profile):
    fetcher = RecordingFetcher(body="<html>ok</html>")
    gateway = FetchGateway(fetcher, profile, user_agent="TestAgent/1.0")

    doc = await gateway.fetch_search_page("4008599")

    assert doc.kind is DocumentKind.HTML
    assert doc.body == "<html>ok</html>"
    url, headers = fetcher.calls[0]
    assert url == "https://www.finn.no/mobility/search/car?orgId=4008599"
    assert headers["User-Agent"] == "TestAgent/1.0"
    assert headers["Accept-Language"].startswith("nb-NO")
    assert headers["Cache-Control"] == "no-cache"


@pytest.mark.asyncio
async def test_api_requests_carry_the_key(profile):
    fetcher = RecordingFetcher(body='{"docs": []}')
    gateway = FetchGateway(fetcher, profile, api_key="secret")

    json_doc = await gateway.fetch_api_json("123")
    feed_doc = await gateway.fetch_atom_feed("123")

    assert json_doc.kind is DocumentKind.JSON
    assert feed_doc.kind is DocumentKind.ATOM_XML
    (json_url, json_headers), (feed_url, feed_headers) = fetcher.calls
    assert json_url == feed_url == "https://cache.api.finn.no/iad/search/car-norway?orgId=123"
    assert json_headers["x-FINN-apikey"] == "secret"
    assert json_headers["Accept"] == "application/json"
    assert feed_headers["Accept"] == "application/atom+xml"


@pytest.mark.asyncio
async def test_api_without_key_is_a_configuration_error(profile):
    fetcher = RecordingFetcher()
    gateway = FetchGateway(fetcher, profile)

    assert gateway.has_api_key is False
    with pytest.raises(ConfigurationError):
        await gateway.fetch_api_json("123")
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_non_2xx_becomes_fetch_failure(profile):
    gateway = FetchGateway(RecordingFetcher(status=403, body="Forbidden"), profile)

    with pytest.raises(FetchFailure) as exc_info:
        await gateway.fetch_search_page("1")

    assert exc_info.value.upstream_status == 403
    assert exc_info.value.status_code == 502
    assert exc_info.value.to_dict()["upstreamStatus"] == 403


# -------------------------------------------------------------------
# HttpxFetcher
# -------------------------------------------------------------------
@pytest.mark.asyncio
async def test_httpx_fetcher_passes_headers_and_status():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["ua"] = request.headers.get("User-Agent")
        return httpx.Response(404, text="not here")

    fetcher = HttpxFetcher(client=_client(handler))
    resp = await fetcher.fetch("https://www.finn.no/x", {"User-Agent": "UA"})

    assert resp == FetchResponse(status=404, body="not here")
    assert seen["ua"] == "UA"


@pytest.mark.asyncio
async def test_httpx_fetcher_retries_transport_errors():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request.url)
        if len(attempts) < 2:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, text="ok")

    fetcher = HttpxFetcher(client=_client(handler), max_attempts=3, backoff=0)
    resp = await fetcher.fetch("https://www.finn.no/", {})

    assert resp.body == "ok"
    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_httpx_fetcher_gives_up_with_fetch_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    fetcher = HttpxFetcher(client=_client(handler), max_attempts=2, backoff=0)
    with pytest.raises(FetchFailure) as exc_info:
        await fetcher.fetch("https://www.finn.no/", {})

    assert exc_info.value.upstream_status is None
    assert exc_info.value.url == "https://www.finn.no/"
