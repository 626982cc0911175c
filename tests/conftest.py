"""Pytest configuration and shared fixtures for jike-client tests."""

import json

import httpx
import pytest

from jike_client.config import ApiConfig


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Auto-cleanup: Clear JIKE_* environment variables before each test.

    This prevents a developer's real credentials from leaking into tests.
    """
    import os

    for key in list(os.environ.keys()):
        if key.startswith("JIKE_"):
            monkeypatch.delenv(key, raising=False)

    yield


class RecordingServer:
    """Fake server routing on path suffixes; records a snapshot of every request."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def route(self, suffix, handler):
        self.routes[suffix] = handler

    def calls(self, suffix):
        return [r for r in self.requests if r.url.path.endswith(suffix)]

    @staticmethod
    def json_of(request):
        return json.loads(request.content) if request.content else None

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        # requests get their headers patched in place before a resend, so keep a copy
        self.requests.append(
            httpx.Request(request.method, request.url, headers=dict(request.headers), content=request.content)
        )
        for suffix, handler in self.routes.items():
            if request.url.path.endswith(suffix):
                return await handler(request)
        return httpx.Response(404, json={"success": False, "error": "no route"})

    @property
    def transport(self):
        return httpx.MockTransport(self)


@pytest.fixture
def server():
    return RecordingServer()


@pytest.fixture
def config():
    return ApiConfig(base_url="https://api.example.com/1.0/", access_token="old-access")
