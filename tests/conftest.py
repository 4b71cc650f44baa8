from __future__ import annotations

import base64
import hashlib
import hmac
import time
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from otp_hook.config import Settings, get_settings
from otp_hook.main import app, get_http_client

SIGNING_KEY = b"test-signing-key-0123456789abcdef"
HOOK_SECRET = "v1,whsec_" + base64.b64encode(SIGNING_KEY).decode()


class FakeAuthentica:
    """Stand-in for the Authentica API that records every request it gets."""

    def __init__(self) -> None:
        self.status_code = 200
        self.body = '{"success": true, "message": "OTP sent"}'
        self.error: Exception | None = None
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.body)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_authentica() -> FakeAuthentica:
    return FakeAuthentica()


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Build Settings without looking at the process environment."""

    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "authentica_api_key": "test-api-key",
            "sms_template_id": 31,
            "whatsapp_template_id": None,
            "fallback_email": "otp@example.com",
            "sms_country_codes": "",
            "hook_secret": None,
            "allow_unverified_on_failure": True,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def sign() -> Callable[..., dict[str, str]]:
    """Return Standard Webhooks headers signing `body` with SIGNING_KEY."""

    def _sign(body: str, msg_id: str = "msg_2abc", timestamp: int | None = None) -> dict[str, str]:
        ts = str(int(time.time()) if timestamp is None else timestamp)
        digest = hmac.new(SIGNING_KEY, f"{msg_id}.{ts}.{body}".encode(), hashlib.sha256).digest()
        return {
            "webhook-id": msg_id,
            "webhook-timestamp": ts,
            "webhook-signature": "v1," + base64.b64encode(digest).decode(),
        }

    return _sign


@pytest.fixture
def client_for(
    fake_authentica: FakeAuthentica,
) -> Iterator[Callable[[Settings], TestClient]]:
    """TestClient factory wired to the given settings and the fake Authentica."""

    def _client(settings: Settings) -> TestClient:
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_http_client] = fake_authentica.client
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()


@pytest.fixture
def hook_secret() -> str:
    """Hook secret in the dashboard format, matching the `sign` fixture."""
    return HOOK_SECRET
