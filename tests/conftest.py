"""Shared helpers for the details service tests.

The Google Books API is never contacted: external-mode apps get an
httpx.MockTransport whose handler returns canned search results.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from main import Settings, create_app


def make_volume(
    authors=("Lewis Carroll",),
    published_date="2000-01-05",
    print_type="BOOK",
    language="en",
    page_count=96,
    publisher="Courier Corporation",
    identifiers=(("ISBN_10", "111"), ("ISBN_13", "222")),
):
    return {
        "kind": "books#volume",
        "id": "vol_123",
        "volumeInfo": {
            "title": "Alice's Adventures in Wonderland",
            "authors": list(authors),
            "publisher": publisher,
            "publishedDate": published_date,
            "industryIdentifiers": [{"type": t, "identifier": i} for t, i in identifiers],
            "pageCount": page_count,
            "printType": print_type,
            "language": language,
        },
    }


def make_search_result(*volumes):
    return {"kind": "books#volumes", "totalItems": len(volumes), "items": list(volumes)}


def make_settings(**overrides) -> Settings:
    values = {"rate_limit_enabled": False}
    values.update(overrides)
    return Settings(**values)


def make_client(settings=None, handler=None) -> TestClient:
    transport = httpx.MockTransport(handler) if handler else None
    return TestClient(create_app(settings or make_settings(), transport=transport))


def external_client(handler, **overrides) -> TestClient:
    return make_client(make_settings(enable_external_book_service=True, **overrides), handler)


class RecordingHandler:
    """MockTransport handler that answers with a fixed payload and keeps the requests it saw."""

    def __init__(self, payload=None, status_code=200, content=None):
        self.payload = payload
        self.status_code = status_code
        self.content = content
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.payload)


@pytest.fixture
def mock_client():
    return make_client()
