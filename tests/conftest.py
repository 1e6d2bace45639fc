# tests/conftest.py
import pytest

from models.listing import DocumentKind, RawDocument
from services.sources.config_loader import get_source_profile


@pytest.fixture
def profile():
    """The FINN profile from configs/sources.yaml."""
    return get_source_profile("finn")


@pytest.fixture
def html_doc():
    def _make(body: str) -> RawDocument:
        return RawDocument(
            kind=DocumentKind.HTML,
            body=body,
            source_url="https://www.finn.no/mobility/search/car?orgId=4008599",
        )
    return _make


@pytest.fixture
def json_doc():
    def _make(body: str) -> RawDocument:
        return RawDocument(kind=DocumentKind.JSON, body=body, source_url="https://cache.api.finn.no/iad/search")
    return _make


@pytest.fixture
def atom_doc():
    def _make(body: str) -> RawDocument:
        return RawDocument(kind=DocumentKind.ATOM_XML, body=body, source_url="https://cache.api.finn.no/iad/search")
    return _make
