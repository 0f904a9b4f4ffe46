import hashlib
import hmac
import os
import sys
from pathlib import Path
from typing import Any

import pytest
import sentry_sdk
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Disable outbound Sentry calls during tests
sentry_sdk.init = lambda *args, **kwargs: None  # type: ignore[assignment]
os.environ["SENTRY_DSN"] = ""
os.environ["PAYSTACK_SECRET_KEY"] = "sk_test_paystack"
os.environ["PAYSTACK_PLATFORM_SUBACCOUNT"] = "ACCT_platform"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_stripe"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test"

from backend.app.main import app  # noqa: E402
from backend.app.payments.currencies import CurrencyRegistry  # noqa: E402
from backend.app.payments.factory import PaymentProcessorFactory, get_payment_factory  # noqa: E402
from backend.app.payments.http import ProviderResponse  # noqa: E402
from backend.app.settings import settings  # noqa: E402

PAYSTACK_SECRET = "sk_test_paystack"
STRIPE_WEBHOOK_SECRET = "whsec_test"


class FakeHttpClient:
    """Records outbound provider calls and replays queued responses."""

    def __init__(self, *responses: ProviderResponse) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def queue(self, status_code: int, payload: dict[str, Any]) -> None:
        self.responses.append(ProviderResponse(status_code=status_code, payload=payload))

    async def request(self, method, url, *, headers=None, json=None, data=None, timeout=None, provider="provider"):
        self.calls.append(
            {"method": method, "url": url, "headers": headers, "json": json, "data": data, "timeout": timeout}
        )
        if not self.responses:
            raise AssertionError(f"unexpected {method} {url}")
        return self.responses.pop(0)


def paystack_signature(body: bytes, secret: str = PAYSTACK_SECRET) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha512).hexdigest()


def stripe_signature(body: bytes, timestamp: int, secret: str = STRIPE_WEBHOOK_SECRET) -> str:
    signed = f"{timestamp}.".encode() + body
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


@pytest.fixture
def fake_http() -> FakeHttpClient:
    return FakeHttpClient()


@pytest.fixture
def factory(fake_http: FakeHttpClient) -> PaymentProcessorFactory:
    return PaymentProcessorFactory(CurrencyRegistry(), http_client=fake_http, app_settings=settings)


@pytest.fixture
def client(factory: PaymentProcessorFactory) -> TestClient:
    app.dependency_overrides[get_payment_factory] = lambda: factory
    yield TestClient(app, base_url="http://api.testserver")
    app.dependency_overrides.clear()
