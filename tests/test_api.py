# tests/test_api.py
import pytest
from fastapi.testclient import TestClient

from api.v1.endpoints.cars import get_car_store
from api.v1.endpoints.listings import get_listing_service
from core.exceptions import FetchFailure, MissingIdentifierError
from main import app
from models.listing_request import SourceMode
from services.store.car_store import CarStore


class StubListingService:
    def __init__(self, envelope=None, error=None):
        self.envelope = envelope or {"ok": True, "items": [], "count": 0, "source": "html"}
        self.error = error
        self.requests = []

    async def get_listings(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.envelope


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _use(service):
    app.dependency_overrides[get_listing_service] = lambda: service
    return service


def test_ping(client):
    response = client.get("/ping")
    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert "time" in body


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.parametrize("path", ["/finn", "/cars"])
def test_listing_routes_pass_parameters(client, path):
    service = _use(StubListingService())

    response = client.get(path, params={"orgId": "123", "source": "html"})

    assert response.status_code == 200
    assert response.json()["ok"] is True
    request = service.requests[0]
    assert request.org_id == "123"
    assert request.source is SourceMode.HTML


def test_omitted_org_id_stays_none(client):
    service = _use(StubListingService())
    client.get("/finn")
    assert service.requests[0].org_id is None
    assert service.requests[0].source is SourceMode.AUTO


def test_no_match_envelope_is_200(client):
    envelope = {"ok": False, "items": [], "count": 0, "error": "none", "code": "NO_STRATEGY_MATCHED"}
    _use(StubListingService(envelope=envelope))

    response = client.get("/finn")
    assert response.status_code == 200
    assert response.json()["code"] == "NO_STRATEGY_MATCHED"


def test_fetch_failure_is_502(client):
    _use(StubListingService(error=FetchFailure("Upstream returned HTTP 403", upstream_status=403)))

    response = client.get("/finn")

    assert response.status_code == 502
    assert response.json() == {
        "ok": False,
        "items": [],
        "error": "Upstream returned HTTP 403",
        "code": "FETCH_FAILED",
        "upstreamStatus": 403,
    }


def test_empty_org_id_is_400(client):
    _use(StubListingService(error=MissingIdentifierError("orgId must not be empty")))

    response = client.get("/finn", params={"orgId": ""})

    assert response.status_code == 400
    assert response.json()["code"] == "MISSING_IDENTIFIER"


def test_invalid_source_is_422(client):
    _use(StubListingService())

    response = client.get("/finn", params={"source": "carrier-pigeon"})

    assert response.status_code == 422
    body = response.json()
    assert body["ok"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert body["details"]


def test_cars_endpoint_lists_active_cars(client, tmp_path):
    store = CarStore(tmp_path / "cars.json")
    store.upsert({"orderNo": "1", "make": "Volvo"})
    store.upsert({"orderNo": "2", "make": "Saab"})
    store.deactivate("2")
    app.dependency_overrides[get_car_store] = lambda: store

    response = client.get("/api/cars")

    assert response.status_code == 200
    assert response.json() == [{"orderNo": "1", "active": True, "make": "Volvo"}]
