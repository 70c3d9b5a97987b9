from __future__ import annotations

import json
import os
import sys
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("OTEL_SDK_DISABLED", "true")

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tts_gateway import main
from tts_gateway.clients import GoogleTtsClient
from tts_gateway.config import Settings
from tts_gateway.credentials import StaticCredentialProvider

TEST_API_KEY = "test-api-key-123"
TEST_ORIGIN = "https://tts.example.com"
UPSTREAM_URL = "https://tts.upstream.test/v1/text:synthesize"


class FakeUpstream:
    """Scriptable stand-in for the speech provider, served via MockTransport."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._status = 200
        self._json: Optional[Any] = {"audioContent": "QUJD"}
        self._text: Optional[str] = None
        self._error: Optional[Callable[[httpx.Request], Exception]] = None

    def respond(self, status: int = 200, *, json_body: Any = None, text: Optional[str] = None) -> None:
        self._status = status
        self._json = json_body
        self._text = text
        self._error = None

    def fail_with(self, factory: Callable[[httpx.Request], Exception]) -> None:
        self._error = factory

    @property
    def call_count(self) -> int:
        return len(self.requests)

    @property
    def last_body(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._error is not None:
            raise self._error(request)
        if self._text is not None:
            return httpx.Response(self._status, text=self._text)
        return httpx.Response(self._status, json=self._json)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture()
def settings() -> Settings:
    return Settings(allowed_origin=TEST_ORIGIN, upstream_url=UPSTREAM_URL)


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def tts_client(upstream: FakeUpstream) -> GoogleTtsClient:
    return GoogleTtsClient(url=UPSTREAM_URL, timeout=2.0, transport=upstream.transport())


@pytest.fixture()
def make_client(
    settings: Settings,
    tts_client: GoogleTtsClient,
) -> Generator[Callable[..., TestClient], None, None]:
    clients: List[TestClient] = []

    def _factory(api_key: Optional[str] = TEST_API_KEY) -> TestClient:
        main.app.dependency_overrides[main.get_settings] = lambda: settings
        main.app.dependency_overrides[main.get_tts_client] = lambda: tts_client
        main.app.dependency_overrides[main.get_credential_provider] = (
            lambda: StaticCredentialProvider(api_key)
        )
        http_client = TestClient(main.app)
        http_client.__enter__()
        clients.append(http_client)
        return http_client

    yield _factory
    for http_client in clients:
        http_client.__exit__(None, None, None)
    main.app.dependency_overrides.clear()


@pytest.fixture()
def client(make_client: Callable[..., TestClient]) -> TestClient:
    return make_client()


@pytest.fixture()
def valid_payload() -> Dict[str, Any]:
    return {
        "text": "Hello from the gateway.",
        "language": "en-US",
        "voiceId": "en-US-Wavenet-D",
        "modelId": "enhanced",
    }
