from __future__ import annotations

import hmac
import json
import secrets
import time
from abc import ABC, abstractmethod
from typing import Any

from ..logging_config import get_logger
from .currencies import CurrencyConfig, ProcessorType, from_smallest_unit, to_smallest_unit
from .errors import (
    AmountOutOfRange,
    CurrencyMismatch,
    InvalidAmount,
    InvalidEmail,
    MissingBookingId,
    MissingReference,
    PaymentValidationError,
    SignatureError,
)
from .fees import DEFAULT_PLATFORM_FEE_PERCENTAGE, FeeCalculation, calculate_fees
from .http import PaymentHttpClient
from .types import PaymentConfig, PaymentInitResponse, WebhookEvent, WebhookHandlerResult

logger = get_logger(__name__)

SIGNATURE_FAILED = "Signature verification failed"


class PaymentProcessor(ABC):
    """
    Common contract for every payment gateway integration.

    One instance is bound to exactly one currency. Subclasses implement the
    provider calls; validation, fee maths, unit conversion and the
    fail-closed webhook prelude live here.
    """

    type: ProcessorType

    def __init__(
        self,
        config: CurrencyConfig,
        *,
        http_client: PaymentHttpClient,
        webhook_secret: str | None = None,
        platform_fee_percentage: float = DEFAULT_PLATFORM_FEE_PERCENTAGE,
        request_timeout: float | None = None,
    ) -> None:
        self.config = config
        self.http = http_client
        self.webhook_secret = webhook_secret or ""
        self.platform_fee_percentage = platform_fee_percentage
        self.request_timeout = request_timeout

    @property
    def currency(self) -> str:
        return self.config.code

    # --- provider-specific surface -------------------------------------

    @abstractmethod
    async def initialize_payment(self, config: PaymentConfig) -> PaymentInitResponse: ...

    @abstractmethod
    def build_split(self, config: PaymentConfig) -> dict[str, Any]: ...

    @abstractmethod
    def verify_signature(self, signature: str | None, body: str | bytes, secret: str) -> bool: ...

    @abstractmethod
    def parse_webhook(self, raw_body: str | bytes, signature: str | None) -> WebhookEvent: ...

    @abstractmethod
    async def _interpret_webhook(self, event: WebhookEvent) -> WebhookHandlerResult: ...

    @abstractmethod
    def display_name(self) -> str: ...

    # --- shared behaviour ----------------------------------------------

    async def handle_webhook(self, event: WebhookEvent) -> WebhookHandlerResult:
        """Verify, then interpret. Nothing in ``processor_data`` is read on a bad signature."""
        if event.raw_body is None or not self.verify_signature(
            event.signature, event.raw_body, self.webhook_secret
        ):
            logger.warning("webhook_rejected", processor=self.type.value, reason="signature")
            return WebhookHandlerResult(
                success=False, message="Invalid signature", error=SIGNATURE_FAILED
            )
        try:
            return await self._interpret_webhook(event)
        except MissingBookingId as exc:
            logger.warning(
                "webhook_missing_booking", processor=self.type.value, reference=event.reference
            )
            return WebhookHandlerResult(
                success=False, message="No booking ID in metadata", error=str(exc)
            )

    def ensure_signature(self, raw_body: str | bytes, signature: str | None) -> None:
        if not self.verify_signature(signature, raw_body, self.webhook_secret):
            raise SignatureError(SIGNATURE_FAILED)

    @staticmethod
    def digests_match(expected: str, provided: str) -> bool:
        """Constant-time compare that treats any non-ASCII header as a mismatch."""
        candidate = provided.strip()
        if not candidate.isascii():
            return False
        return hmac.compare_digest(expected.encode("ascii"), candidate.encode("ascii"))

    @staticmethod
    def load_webhook_json(raw_body: str | bytes) -> tuple[str, dict[str, Any]]:
        """Decode a verified webhook body; anything but a UTF-8 JSON object is rejected."""
        try:
            body = raw_body.decode("utf-8") if isinstance(raw_body, bytes) else raw_body
            payload = json.loads(body)
        except ValueError as exc:
            raise PaymentValidationError("Webhook body is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise PaymentValidationError("Webhook body must be a JSON object")
        return body, payload

    def calculate_fees(
        self, amount: float, platform_fee_percentage: float | None = None
    ) -> FeeCalculation:
        pct = self.platform_fee_percentage if platform_fee_percentage is None else platform_fee_percentage
        return calculate_fees(amount, pct)

    def validate_config(self, config: PaymentConfig) -> None:
        if not config.email or "@" not in config.email:
            raise InvalidEmail("Invalid email address")
        if not config.amount or config.amount <= 0:
            raise InvalidAmount("Amount must be greater than 0")
        if not (config.reference or "").strip():
            raise MissingReference("Reference is required")
        if (config.currency or "").strip().upper() != self.currency:
            raise CurrencyMismatch(
                f"Processor configured for {self.currency}, received {config.currency}"
            )

    def validate_amount(self, amount: float) -> None:
        if amount < self.config.min_amount:
            bound = self.format_amount(self.config.min_amount)
            raise AmountOutOfRange(
                f"Amount must be at least {bound}",
                bound=self.config.min_amount,
                formatted_bound=bound,
            )
        if amount > self.config.max_amount:
            bound = self.format_amount(self.config.max_amount)
            raise AmountOutOfRange(
                f"Amount cannot exceed {bound}",
                bound=self.config.max_amount,
                formatted_bound=bound,
            )

    def to_smallest_unit(self, amount: float) -> int:
        return to_smallest_unit(amount, self.config.minor_unit_exponent)

    def from_smallest_unit(self, amount: float) -> float:
        return from_smallest_unit(amount, self.config.minor_unit_exponent)

    def format_amount(self, amount: float) -> str:
        return f"{self.config.symbol}{amount:,.{self.config.decimals}f}"

    @staticmethod
    def generate_reference(prefix: str = "") -> str:
        return f"{prefix}{int(time.time() * 1000)}-{secrets.token_hex(4)}".lower()

    @staticmethod
    def booking_id_from(metadata: dict[str, Any] | None) -> str:
        metadata = metadata or {}
        booking_id = metadata.get("booking_id") or metadata.get("bookingId")
        if not booking_id:
            raise MissingBookingId("Missing booking information")
        return str(booking_id)

    @property
    def symbol(self) -> str:
        return self.config.symbol

    @property
    def currency_name(self) -> str:
        return self.config.name

    @property
    def supported_countries(self) -> tuple[str, ...]:
        return self.config.countries

    @property
    def minimum_amount(self) -> float:
        return self.config.min_amount

    @property
    def maximum_amount(self) -> float:
        return self.config.max_amount


__all__ = ["PaymentProcessor", "SIGNATURE_FAILED"]
