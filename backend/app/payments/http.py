"""HTTP capability handed to payment processors.

Processors never open connections themselves; they receive something that
satisfies ``PaymentHttpClient``. Production code uses ``HttpxPaymentClient``;
tests pass fakes or an ``httpx.MockTransport``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol
from urllib.parse import urlencode

import httpx

from ..logging_config import get_logger
from ..metrics import provider_request_duration_seconds
from .errors import ProviderError

logger = get_logger(__name__)


@dataclass(slots=True)
class ProviderResponse:
    status_code: int
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class PaymentHttpClient(Protocol):
    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        data: list[tuple[str, str]] | None = None,
        timeout: float | None = None,
        provider: str = "provider",
    ) -> ProviderResponse: ...


class HttpxPaymentClient:
    """``PaymentHttpClient`` backed by a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = 30.0,
        connect_timeout: float = 5.0,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = httpx.Timeout(timeout, connect=connect_timeout)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        data: list[tuple[str, str]] | None = None,
        timeout: float | None = None,
        provider: str = "provider",
    ) -> ProviderResponse:
        client = self._get_client()
        kwargs: dict[str, Any] = {"headers": headers}
        if json is not None:
            kwargs["json"] = json
        if data is not None:
            kwargs["content"] = urlencode(data)
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            with provider_request_duration_seconds.labels(provider=provider).time():
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("provider_request_failed", provider=provider, url=url, error=str(exc))
            raise ProviderError(provider, f"Request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {"message": response.text[:200]}
        if not isinstance(payload, dict):
            payload = {"data": payload}
        return ProviderResponse(status_code=response.status_code, payload=payload)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None


__all__ = ["HttpxPaymentClient", "PaymentHttpClient", "ProviderResponse"]
