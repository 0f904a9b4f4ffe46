from __future__ import annotations

import hashlib
import hmac
from typing import Any

import stripe

from ..logging_config import get_logger
from .base import PaymentProcessor
from .currencies import CurrencyConfig, ProcessorType, round_half_up
from .errors import (
    NoReferenceReturned,
    PaymentValidationError,
    ProcessorMisconfigured,
    ProviderError,
    SplitNotSupported,
)
from .fees import DEFAULT_PLATFORM_FEE_PERCENTAGE
from .http import PaymentHttpClient
from .types import (
    PaymentConfig,
    PaymentInitResponse,
    PaymentStatus,
    WebhookEvent,
    WebhookEventType,
    WebhookHandlerResult,
)

logger = get_logger(__name__)

PROVIDER = "Stripe"

_EVENT_MAP: dict[str, tuple[WebhookEventType, PaymentStatus]] = {
    "payment_intent.succeeded": ("payment.success", "completed"),
    "payment_intent.payment_failed": ("payment.failed", "failed"),
    "payment_intent.processing": ("payment.pending", "processing"),
    "payment_intent.canceled": ("payment.failed", "cancelled"),
}


def encode_form(params: dict[str, Any], prefix: str | None = None) -> list[tuple[str, str]]:
    """Flatten nested params into Stripe's ``key[sub]=value`` form fields."""
    fields: list[tuple[str, str]] = []
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, dict):
            fields.extend(encode_form(value, name))
        elif isinstance(value, list | tuple):
            for index, item in enumerate(value):
                if isinstance(item, dict):
                    fields.extend(encode_form(item, f"{name}[{index}]"))
                else:
                    fields.append((f"{name}[{index}]", _form_value(item)))
        else:
            fields.append((name, _form_value(value)))
    return fields


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class StripeProcessor(PaymentProcessor):
    """Stripe integration; one instance per Stripe-settled currency."""

    type = ProcessorType.STRIPE

    def __init__(
        self,
        config: CurrencyConfig,
        *,
        http_client: PaymentHttpClient,
        secret_key: str | None,
        webhook_secret: str | None = None,
        api_base: str = "https://api.stripe.com/v1",
        platform_fee_percentage: float = DEFAULT_PLATFORM_FEE_PERCENTAGE,
        webhook_tolerance_seconds: int = 300,
        request_timeout: float | None = None,
    ) -> None:
        if config.processor is not ProcessorType.STRIPE:
            raise ProcessorMisconfigured(f"{config.code} is not supported by Stripe processor")
        if not (secret_key or "").strip():
            raise ProcessorMisconfigured("Stripe secret key not configured")
        super().__init__(
            config,
            http_client=http_client,
            webhook_secret=webhook_secret,
            platform_fee_percentage=platform_fee_percentage,
            request_timeout=request_timeout,
        )
        self._secret_key = secret_key
        self.api_base = api_base.rstrip("/")
        self.webhook_tolerance_seconds = webhook_tolerance_seconds

    def display_name(self) -> str:
        return f"Stripe ({self.currency})"

    # --- payloads ------------------------------------------------------

    def build_split(self, config: PaymentConfig) -> dict[str, Any]:
        """
        PaymentIntent parameters for ``config``.

        A single venue is paid through a Connect destination charge. Several
        venues would need separate transfers after capture, which this
        integration does not perform, so that case raises ``SplitNotSupported``
        rather than silently charging a platform-only payment.
        """
        venues = config.venues or []
        if len(venues) > 1:
            raise SplitNotSupported(
                "Stripe multi-venue payments require per-venue transfers, which are not implemented"
            )

        amount_in_cents = self.to_smallest_unit(config.amount)
        params: dict[str, Any] = {
            "amount": amount_in_cents,
            "currency": self.currency.lower(),
            "payment_method_types": ["card"],
            "metadata": {**config.base_metadata(), **config.metadata},
        }
        if len(venues) == 1:
            params["application_fee_amount"] = round_half_up(
                amount_in_cents * self.platform_fee_percentage / 100
            )
            params["transfer_data"] = {"destination": venues[0].processor_account_id}
        return params

    # --- API calls -----------------------------------------------------

    async def initialize_payment(self, config: PaymentConfig) -> PaymentInitResponse:
        self.validate_config(config)
        self.validate_amount(config.amount)
        params = self.build_split(config)
        intent = await self._create_payment_intent(params)

        intent_id = intent.get("id")
        if not intent_id:
            raise NoReferenceReturned(PROVIDER)
        logger.info(
            "payment_initialized",
            processor="stripe",
            currency=self.currency,
            reference=intent_id,
            amount=config.amount,
            venues=len(config.venues),
        )
        return PaymentInitResponse(
            reference=intent_id,
            client_secret=intent.get("client_secret"),
            payment_intent_id=intent_id,
            processor_type=self.type,
            currency=self.currency,
            amount=config.amount,
        )

    async def _create_payment_intent(self, params: dict[str, Any]) -> dict[str, Any]:
        response = await self.http.request(
            "POST",
            f"{self.api_base}/payment_intents",
            headers={
                "Authorization": f"Bearer {self._secret_key}",
                "Content-Type": "application/x-www-form-urlencoded",
            },
            data=encode_form(params),
            timeout=self.request_timeout,
            provider=PROVIDER,
        )
        if not response.ok:
            error = response.payload.get("error") or {}
            message = error.get("message") if isinstance(error, dict) else None
            logger.error(
                "payment_init_failed",
                processor="stripe",
                currency=self.currency,
                status_code=response.status_code,
            )
            raise ProviderError(
                PROVIDER, message or f"HTTP {response.status_code}", status_code=response.status_code
            )
        return response.payload

    # --- webhooks ------------------------------------------------------

    def verify_signature(self, signature: str | None, body: str | bytes, secret: str) -> bool:
        """
        HMAC-SHA256 over the raw body.

        ``Stripe-Signature`` headers (``t=...,v1=...``) are checked against
        ``"{t}.{body}"`` by the Stripe SDK within the configured tolerance (0
        disables the age check); a bare hex digest is compared against the body
        alone.
        """
        if not signature or not secret:
            return False
        raw = body.encode("utf-8") if isinstance(body, str) else body

        if "v1=" in signature:
            if not signature.isascii():
                return False
            try:
                payload = raw.decode("utf-8")
                stripe.WebhookSignature.verify_header(
                    payload, signature, secret, tolerance=self.webhook_tolerance_seconds or None
                )
            except (UnicodeDecodeError, stripe.SignatureVerificationError):
                return False
            return True

        expected = hmac.new(secret.encode("utf-8"), raw, hashlib.sha256).hexdigest()
        return self.digests_match(expected, signature)

    def parse_webhook(self, raw_body: str | bytes, signature: str | None) -> WebhookEvent:
        self.ensure_signature(raw_body, signature)
        body, payload = self.load_webhook_json(raw_body)

        provider_event = str(payload.get("type") or "")
        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise PaymentValidationError("Webhook data must be a JSON object")
        intent = data.get("object") or {}
        if not isinstance(intent, dict):
            raise PaymentValidationError("Webhook data.object must be a JSON object")
        metadata = intent.get("metadata") if isinstance(intent.get("metadata"), dict) else {}
        event_type, status = _EVENT_MAP.get(provider_event, ("payment.pending", "pending"))
        amount = intent.get("amount")
        currency = str(intent.get("currency") or self.currency).upper()
        return WebhookEvent(
            type=event_type,
            processor_type=self.type,
            reference=intent.get("id"),
            status=status,
            amount=self.from_smallest_unit(amount) if amount is not None else None,
            currency=currency,
            metadata=metadata,
            processor_data=payload,
            raw_body=body,
            signature=signature,
        )

    async def _interpret_webhook(self, event: WebhookEvent) -> WebhookHandlerResult:
        stripe_event = event.processor_data
        event_type = stripe_event.get("type")
        intent = (stripe_event.get("data") or {}).get("object") or {}

        if event_type == "payment_intent.succeeded":
            booking_id = self.booking_id_from(intent.get("metadata"))
            logger.info(
                "payment_confirmed",
                processor="stripe",
                reference=intent.get("id"),
                booking_id=booking_id,
            )
            return WebhookHandlerResult(success=True, booking_id=booking_id, message="Payment succeeded")

        if event_type == "payment_intent.payment_failed":
            metadata = intent.get("metadata") or {}
            last_error = intent.get("last_payment_error") or {}
            return WebhookHandlerResult(
                success=False,
                booking_id=metadata.get("booking_id") or metadata.get("bookingId"),
                message="Payment failed",
                error=last_error.get("message") or "Payment failed",
            )

        return WebhookHandlerResult(
            success=True,
            message=f"Event {event_type} received",
            error="Event type not handled",
        )


__all__ = ["StripeProcessor", "encode_form"]
