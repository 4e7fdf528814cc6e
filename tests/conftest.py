"""Shared test fixtures for specbind.

Provides the raw Swagger 2.0 and OpenAPI 3.0 petstore documents, their
adapted :class:`~specbind.models.ApiDocument` forms, and a small helper for
recording requests through :class:`httpx.MockTransport`.  No test touches
the network.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest
import yaml

from specbind.models import ApiDocument
from specbind.parser import adapt_document

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Raw spec fixtures (plain dicts loaded from fixture files)
# ---------------------------------------------------------------------------


@pytest.fixture
def swagger2_raw() -> dict[str, Any]:
    """Load the raw Swagger 2.0 petstore document."""
    with open(FIXTURES_DIR / "petstore_swagger2.json") as f:
        return json.load(f)


@pytest.fixture
def openapi3_raw() -> dict[str, Any]:
    """Load the raw OpenAPI 3.0 petstore document."""
    with open(FIXTURES_DIR / "petstore_3.0.yaml") as f:
        return yaml.safe_load(f)


# ---------------------------------------------------------------------------
# Adapted documents
# ---------------------------------------------------------------------------


@pytest.fixture
def swagger2_doc(swagger2_raw: dict[str, Any]) -> ApiDocument:
    return adapt_document(swagger2_raw)


@pytest.fixture
def openapi3_doc(openapi3_raw: dict[str, Any]) -> ApiDocument:
    return adapt_document(openapi3_raw)


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class RecordingTransport(httpx.MockTransport):
    """A MockTransport that keeps every request it handled."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture
def json_transport() -> Callable[..., RecordingTransport]:
    """Factory for a transport answering every request with fixed JSON."""

    def _make(payload: Any = None, status_code: int = 200) -> RecordingTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            if payload is None:
                return httpx.Response(status_code)
            return httpx.Response(status_code, json=payload)

        return RecordingTransport(handler)

    return _make
