"""
Pytest fixtures for gateway service tests
"""

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from app.config import GatewaySettings
from app.main import create_app

BACKEND_URL = "http://backend.test:3847"


class FakeBackend:
    """In-process stand-in for the backend service, recording every call"""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.handler: Callable[[httpx.Request], Any] = self.default_handler

    @staticmethod
    def default_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True})

    def respond(self, status_code: int, json_body: Any = None, headers: Dict[str, str] = None, content: bytes = None):
        """Answer every call with a fixed response"""
        def handler(request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status_code, content=content, headers=headers)
            if json_body is None:
                return httpx.Response(status_code, headers=headers)
            return httpx.Response(status_code, json=json_body, headers=headers)

        self.handler = handler

    def fail_with(self, exc_type: type, message: str = "backend failure"):
        """Raise a transport error for every call"""
        def handler(request: httpx.Request):
            raise exc_type(message, request=request)

        self.handler = handler

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.handler(request)
        if hasattr(result, "__await__"):
            result = await result
        return result

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "backend was not called"
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)


@pytest.fixture
def settings() -> GatewaySettings:
    """Gateway settings pointing at the fake backend"""
    return GatewaySettings(
        _env_file=None,
        backend_url=BACKEND_URL,
        log_format="console",
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_client(backend):
    """Build a TestClient for a gateway app wired to the fake backend"""
    def factory(settings: GatewaySettings) -> TestClient:
        app = create_app(settings, transport=httpx.MockTransport(backend))
        return TestClient(app)

    return factory


@pytest.fixture
def client(make_client, settings) -> TestClient:
    return make_client(settings)
