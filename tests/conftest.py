"""Pytest fixtures for the Emojisushi client tests."""

import httpx
import pytest

from emojisushi import EmojisushiApi
from emojisushi.services.backend import MockBackend
from emojisushi.services.hydrator import get_hydrator

BASE_URL = "https://api.test/api/"


class RecordingHandler:
    """MockTransport handler answering canned payloads per endpoint path."""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len("/api/"):]
        payload = self.routes.get(path, {})
        if isinstance(payload, httpx.Response):
            return payload
        if callable(payload):
            return payload(request)
        return httpx.Response(200, json=payload)


@pytest.fixture
def hydrator():
    return get_hydrator()


@pytest.fixture
def make_api():
    """Build a client whose requests are answered by a RecordingHandler."""

    def factory(routes=None, **kwargs):
        handler = RecordingHandler(routes)
        api = EmojisushiApi(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)
        return api, handler

    return factory


@pytest.fixture
def backend():
    return MockBackend(seed=7)


@pytest.fixture
def mock_api(backend):
    """Client wired to the in-memory development backend."""
    return EmojisushiApi(BASE_URL, transport=backend.transport())
