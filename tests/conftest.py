"""Shared test fixtures for all test modules."""

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from promhealth.adapters.http import HttpEndpointSource


class FakeEndpointSource:
    """EndpointSourcePort fake returning canned bodies per URL.

    A body may be an exception instance, which is raised instead. A list of
    bodies is consumed one per fetch, the last one repeating.
    """

    def __init__(self, bodies: dict[str, str | Exception | list[str | Exception]]) -> None:
        self._bodies = bodies
        self.requested: list[str] = []

    async def fetch(self, url: str) -> str:
        self.requested.append(url)
        body = self._bodies[url]
        if isinstance(body, list):
            body = body.pop(0) if len(body) > 1 else body[0]
        if isinstance(body, Exception):
            raise body
        return body


@pytest.fixture
def fake_source() -> Callable[..., FakeEndpointSource]:
    """Factory fixture for FakeEndpointSource."""

    def _source(bodies: dict[str, str | Exception | list[str | Exception]]) -> FakeEndpointSource:
        return FakeEndpointSource(bodies)

    return _source


@pytest.fixture
def mock_http_source():
    """Factory fixture creating an HttpEndpointSource over httpx.MockTransport.

    Usage:
        async def test_something(mock_http_source):
            source = mock_http_source(lambda request: httpx.Response(200, text="x"))
            body = await source.fetch("http://host/metrics")
    """

    def _get_source(
        handler: Callable[[httpx.Request], httpx.Response],
    ) -> HttpEndpointSource:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return HttpEndpointSource(client=client)

    return _get_source


@pytest.fixture
def config_path(tmp_path: Path) -> Callable[[str], Path]:
    """Factory fixture writing TOML text to a temporary config file."""

    def _write(text: str) -> Path:
        path = tmp_path / "promhealth.toml"
        path.write_text(text, encoding="utf-8")
        return path

    return _write
