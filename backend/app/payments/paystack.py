from __future__ import annotations

import hashlib
import hmac
import re
from typing import Any
from urllib.parse import quote

from ..logging_config import get_logger
from .base import PaymentProcessor
from .currencies import CurrencyConfig, ProcessorType
from .errors import (
    MissingReference,
    NoReferenceReturned,
    PaymentValidationError,
    ProcessorMisconfigured,
    ProviderError,
)
from .fees import (
    DEFAULT_PLATFORM_FEE_PERCENTAGE,
    SplitStrategy,
    build_multi_venue_payment_split,
    build_single_payment_split,
)
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

PROVIDER = "Paystack"

_EVENT_MAP: dict[str, tuple[WebhookEventType, PaymentStatus]] = {
    "charge.success": ("payment.success", "completed"),
    "charge.failed": ("payment.failed", "failed"),
}

_TRANSACTION_STATUS: dict[str, PaymentStatus] = {
    "success": "completed",
    "failed": "failed",
    "reversed": "failed",
    "abandoned": "cancelled",
    "processing": "processing",
    "ongoing": "processing",
}

_SUBACCOUNT_RE = re.compile(r"^acct_[a-zA-Z0-9]+$")


def is_valid_subaccount_id(subaccount_id: Any) -> bool:
    """Paystack subaccount codes look like ``acct_xxxx``."""
    return isinstance(subaccount_id, str) and bool(_SUBACCOUNT_RE.match(subaccount_id))


class PaystackProcessor(PaymentProcessor):
    """Paystack integration for NGN. Splits are percentage subaccount shares."""

    type = ProcessorType.PAYSTACK

    def __init__(
        self,
        config: CurrencyConfig,
        *,
        http_client: PaymentHttpClient,
        secret_key: str | None,
        platform_subaccount: str | None = None,
        webhook_secret: str | None = None,
        api_base: str = "https://api.paystack.co",
        callback_url: str | None = None,
        platform_fee_percentage: float = DEFAULT_PLATFORM_FEE_PERCENTAGE,
        multi_venue_strategy: SplitStrategy = SplitStrategy.EQUAL,
        request_timeout: float | None = None,
    ) -> None:
        if config.processor is not ProcessorType.PAYSTACK:
            raise ProcessorMisconfigured(f"{config.code} is not supported by Paystack processor")
        if not (secret_key or "").strip():
            raise ProcessorMisconfigured("Paystack secret key not configured")
        super().__init__(
            config,
            http_client=http_client,
            # Paystack signs webhooks with the account secret key
            webhook_secret=webhook_secret or secret_key,
            platform_fee_percentage=platform_fee_percentage,
            request_timeout=request_timeout,
        )
        self._secret_key = secret_key
        self.platform_subaccount = platform_subaccount
        self.api_base = api_base.rstrip("/")
        self.callback_url = callback_url
        self.multi_venue_strategy = multi_venue_strategy

    def display_name(self) -> str:
        return "Paystack"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._secret_key}",
            "Content-Type": "application/json",
        }

    def _require_platform_subaccount(self) -> str:
        if not self.platform_subaccount:
            raise ProcessorMisconfigured("Platform Paystack subaccount not configured")
        return self.platform_subaccount

    # --- payloads ------------------------------------------------------

    def build_split(self, config: PaymentConfig) -> dict[str, Any]:
        """Full ``/transaction/initialize`` body; the split shape follows venue count."""
        amount_in_kobo = self.to_smallest_unit(config.amount)
        venues = config.venues or []
        if len(venues) > 1:
            payload = self._multi_venue_payload(config, amount_in_kobo)
        elif len(venues) == 1:
            payload = self._single_venue_payload(config, amount_in_kobo)
        else:
            payload = self._platform_payload(config, amount_in_kobo)
        if self.callback_url:
            payload["callback_url"] = self.callback_url
        return payload

    def _single_venue_payload(self, config: PaymentConfig, amount_in_kobo: int) -> dict[str, Any]:
        venue = config.venues[0]
        split = build_single_payment_split(
            self._require_platform_subaccount(),
            venue.processor_account_id,
            config.amount,
            self.platform_fee_percentage,
        )
        return {
            "email": config.email,
            "amount": amount_in_kobo,
            "reference": config.reference,
            "split": split.as_payload(),
            "metadata": {
                **config.base_metadata(),
                "platform_fee_percentage": self.platform_fee_percentage,
                "platform_fee_amount": split.fees.platform_fee,
                "venue_amount": split.fees.venue_amount,
                **config.metadata,
            },
        }

    def _multi_venue_payload(self, config: PaymentConfig, amount_in_kobo: int) -> dict[str, Any]:
        split = build_multi_venue_payment_split(
            self._require_platform_subaccount(),
            config.venues,
            config.amount,
            self.platform_fee_percentage,
            strategy=self.multi_venue_strategy,
        )
        return {
            "email": config.email,
            "amount": amount_in_kobo,
            "reference": config.reference,
            "split": split.as_payload(),
            "metadata": {
                "booking_id": config.booking_id,
                "customer_id": config.customer_id,
                "venues_count": len(config.venues),
                "credits_used": config.credits_used or 0,
                "credits_value": config.credits_value or 0,
                "platform_fee_percentage": self.platform_fee_percentage,
                "platform_fee_amount": split.fees.platform_fee,
                "venue_amount": split.fees.venue_amount,
                **config.metadata,
            },
        }

    def _platform_payload(self, config: PaymentConfig, amount_in_kobo: int) -> dict[str, Any]:
        return {
            "email": config.email,
            "amount": amount_in_kobo,
            "reference": config.reference,
            "metadata": {
                "booking_id": config.booking_id,
                "customer_id": config.customer_id,
                "transaction_type": "platform_only",
                **config.metadata,
            },
        }

    # --- API calls -----------------------------------------------------

    async def initialize_payment(self, config: PaymentConfig) -> PaymentInitResponse:
        self.validate_config(config)
        self.validate_amount(config.amount)
        payload = self.build_split(config)

        response = await self.http.request(
            "POST",
            f"{self.api_base}/transaction/initialize",
            headers=self._headers(),
            json=payload,
            timeout=self.request_timeout,
            provider=PROVIDER,
        )
        if not response.ok:
            message = response.payload.get("message") or f"HTTP {response.status_code}"
            logger.error(
                "payment_init_failed",
                processor="paystack",
                reference=config.reference,
                status_code=response.status_code,
            )
            raise ProviderError(PROVIDER, str(message), status_code=response.status_code)

        data = response.payload.get("data") or {}
        reference = data.get("reference")
        if not reference:
            raise NoReferenceReturned(PROVIDER)

        logger.info(
            "payment_initialized",
            processor="paystack",
            reference=reference,
            amount=config.amount,
            venues=len(config.venues),
        )
        return PaymentInitResponse(
            reference=reference,
            authorization_url=data.get("authorization_url"),
            access_code=data.get("access_code"),
            payment_intent_id=reference,
            processor_type=self.type,
            currency=self.currency,
            amount=config.amount,
        )

    async def verify_transaction(self, reference: str) -> dict[str, Any]:
        if not (reference or "").strip():
            raise MissingReference("Missing required field: reference")
        response = await self.http.request(
            "GET",
            f"{self.api_base}/transaction/verify/{quote(reference, safe='')}",
            headers=self._headers(),
            timeout=self.request_timeout,
            provider=PROVIDER,
        )
        if not response.ok:
            message = response.payload.get("message") or f"HTTP {response.status_code}"
            raise ProviderError(PROVIDER, str(message), status_code=response.status_code)

        data = response.payload.get("data") or {}
        metadata = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}
        amount = data.get("amount")
        return {
            "reference": data.get("reference") or reference,
            "status": _TRANSACTION_STATUS.get(str(data.get("status") or ""), "pending"),
            "provider_status": data.get("status"),
            "amount": self.from_smallest_unit(amount) if amount is not None else None,
            "currency": data.get("currency") or self.currency,
            "paid_at": data.get("paid_at"),
            "metadata": metadata,
        }

    # --- webhooks ------------------------------------------------------

    def verify_signature(self, signature: str | None, body: str | bytes, secret: str) -> bool:
        """``x-paystack-signature`` is the hex HMAC-SHA512 of the raw body."""
        if not signature or not secret:
            return False
        raw = body.encode("utf-8") if isinstance(body, str) else body
        expected = hmac.new(secret.encode("utf-8"), raw, hashlib.sha512).hexdigest()
        return self.digests_match(expected, signature)

    def parse_webhook(self, raw_body: str | bytes, signature: str | None) -> WebhookEvent:
        self.ensure_signature(raw_body, signature)
        body, payload = self.load_webhook_json(raw_body)

        provider_event = str(payload.get("event") or "")
        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise PaymentValidationError("Webhook data must be a JSON object")
        metadata = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}
        event_type, status = _EVENT_MAP.get(provider_event, ("payment.pending", "pending"))
        amount = data.get("amount")
        return WebhookEvent(
            type=event_type,
            processor_type=self.type,
            reference=data.get("reference"),
            status=status,
            amount=self.from_smallest_unit(amount) if amount is not None else None,
            currency=data.get("currency") or self.currency,
            metadata=metadata,
            processor_data={**data, "event": provider_event, "metadata": metadata},
            raw_body=body,
            signature=signature,
        )

    async def _interpret_webhook(self, event: WebhookEvent) -> WebhookHandlerResult:
        if event.status != "completed":
            return WebhookHandlerResult(
                success=False,
                message=f"Payment {event.status}",
                error=f"Payment status: {event.status}",
            )
        metadata = event.processor_data.get("metadata") or event.metadata
        booking_id = self.booking_id_from(metadata)
        logger.info(
            "payment_confirmed",
            processor="paystack",
            reference=event.reference,
            booking_id=booking_id,
            credits_used=metadata.get("credits_used", 0),
        )
        return WebhookHandlerResult(success=True, booking_id=booking_id, message="Payment confirmed")


__all__ = ["PaystackProcessor", "is_valid_subaccount_id"]
