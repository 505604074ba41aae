"""
Shared test fixtures for the Spendboard test suite.

Upstream provider APIs are replaced with ``httpx.MockTransport`` so no
test touches the network.
"""

import os
import sys

import httpx
import pytest

# Ensure project root is importable (for the api package)
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from spendboard.config import Settings  # noqa: E402


def make_settings(**credentials) -> Settings:
    """Settings with the given credentials and no adapter timeout."""
    return Settings(credentials=credentials, adapter_timeout=None)


def json_transport(payload, status_code: int = 200) -> httpx.MockTransport:
    """Transport answering every request with the same JSON body."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload)
    return httpx.MockTransport(handler)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(recording_handler)


@pytest.fixture
def empty_settings() -> Settings:
    return make_settings()


@pytest.fixture
def failing_transport() -> RecordingTransport:
    """Transport that fails the test's expectations if it is ever used."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="unexpected request")
    return RecordingTransport(handler)
