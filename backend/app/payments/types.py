from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from .currencies import ProcessorType

PaymentStatus = Literal["pending", "processing", "completed", "failed", "cancelled"]
WebhookEventType = Literal["payment.success", "payment.failed", "payment.pending"]


@dataclass(slots=True)
class VenueShare:
    venue_id: str
    processor_account_id: str  # Paystack subaccount or Stripe Connect account
    percentage: float
    venue_name: str | None = None
    amount: float | None = None


@dataclass(slots=True)
class PaymentConfig:
    email: str
    currency: str
    amount: float  # base units (naira, euros), never kobo or cents
    reference: str
    booking_id: str
    customer_id: str
    venue_id: str | None = None
    venues: list[VenueShare] = field(default_factory=list)
    credits_used: float | None = None
    credits_value: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def base_metadata(self) -> dict[str, Any]:
        return {
            "booking_id": self.booking_id,
            "customer_id": self.customer_id,
            "venue_id": self.venue_id,
            "credits_used": self.credits_used or 0,
            "credits_value": self.credits_value or 0,
        }


class PaymentInitResponse(BaseModel):
    reference: str
    authorization_url: str | None = None
    access_code: str | None = None
    client_secret: str | None = None
    payment_intent_id: str | None = None
    processor_type: ProcessorType
    currency: str
    amount: float


class WebhookEvent(BaseModel):
    type: WebhookEventType
    processor_type: ProcessorType
    reference: str | None = None
    status: PaymentStatus = "pending"
    amount: float | None = None
    currency: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    processor_data: dict[str, Any] = Field(default_factory=dict)
    # exactly what arrived on the wire; the signature covers raw_body
    raw_body: str | None = None
    signature: str | None = None


class WebhookHandlerResult(BaseModel):
    success: bool
    booking_id: str | None = None
    message: str
    error: str | None = None


__all__ = [
    "PaymentConfig",
    "PaymentInitResponse",
    "PaymentStatus",
    "VenueShare",
    "WebhookEvent",
    "WebhookEventType",
    "WebhookHandlerResult",
]
