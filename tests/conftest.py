"""
tests/conftest.py

Pytest configuration and shared fixtures for all tests.

Provides a scripted in-memory bus (httpx.MockTransport) that records every
request it receives, client options, and a mock Celery app.
"""

import json
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import Mock

import httpx
import pytest

from bus_client.utils.config_manager import ConfigManager


# ============================================================================
# Mock Bus
# ============================================================================

class MockBus:
    """
    Scripted bus answering from a route table.

    Routes map (method, path) to a status code, a (status, body) tuple,
    an exception instance to raise, or a list of those consumed in order.
    Unrouted requests answer 404.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    def on(self, method: str, path: str, *responses):
        self.routes[(method, path)] = list(responses) if len(responses) > 1 else responses[0]
        return self

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path), 404)

        if isinstance(route, list):
            route = route.pop(0) if len(route) > 1 else route[0]

        if isinstance(route, Exception):
            raise route

        if isinstance(route, tuple):
            status, body = route
        else:
            status, body = route, None

        if body is None:
            return httpx.Response(status)
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    def calls(self, method: Optional[str] = None, path: Optional[str] = None) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if (method is None or r.method == method) and (path is None or r.url.path == path)
        ]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content)


@pytest.fixture
def bus():
    """Mock bus with a healthy /pulse."""
    return MockBus().on("GET", "/pulse", 204)


# ============================================================================
# Client Fixtures
# ============================================================================

@pytest.fixture
def client_options():
    """Valid client options."""
    return {"url": "https://bus.example.com", "uuid": "john_doe"}


@pytest.fixture
def make_client(bus, client_options):
    """Build a Client wired to the mock bus."""
    from bus_client.client import Client

    def _make(**overrides):
        options = {**client_options, **overrides}
        return Client(transport=bus.transport, **options)

    return _make


@pytest.fixture
def mock_celery_app():
    """Mock Celery app recording send_task calls."""
    app = Mock()
    app.send_task = Mock(return_value=Mock(id="task-123"))
    return app


@pytest.fixture
def no_sleep(monkeypatch):
    """Record backoff sleeps instead of sleeping."""
    sleeps = []
    monkeypatch.setattr("bus_client.connection.time.sleep", sleeps.append)
    return sleeps


# ============================================================================
# Settings Isolation
# ============================================================================

@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point settings at a missing file so defaults are used."""
    monkeypatch.setenv("BUS_CLIENT_CONFIG", str(tmp_path / "missing.yaml"))
    ConfigManager.reset()
    yield
    ConfigManager.reset()


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers",
        "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers",
        "e2e: mark test as an end-to-end test"
    )
