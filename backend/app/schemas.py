from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from .payments.types import PaymentConfig, VenueShare
from .validators import normalize_email, normalize_reference


class VenueShareIn(BaseModel):
    venue_id: str = Field(min_length=1, max_length=64)
    processor_account_id: str = Field(min_length=1, max_length=128)
    percentage: float = Field(gt=0, le=100)
    venue_name: str | None = Field(default=None, max_length=120)

    def to_share(self) -> VenueShare:
        return VenueShare(
            venue_id=self.venue_id,
            processor_account_id=self.processor_account_id,
            percentage=self.percentage,
            venue_name=self.venue_name,
        )


class PaymentInitRequest(BaseModel):
    email: str
    currency: str = Field(min_length=3, max_length=3)
    amount: float = Field(gt=0)
    reference: str | None = None
    booking_id: str = Field(min_length=1, max_length=64)
    customer_id: str = Field(min_length=1, max_length=64)
    venue_id: str | None = None
    venues: list[VenueShareIn] = Field(default_factory=list, max_length=20)
    credits_used: float | None = Field(default=None, ge=0)
    credits_value: float | None = Field(default=None, ge=0)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("currency")
    @classmethod
    def _currency(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("reference")
    @classmethod
    def _reference(cls, value: str | None) -> str | None:
        return normalize_reference(value)

    def to_config(self, reference: str) -> PaymentConfig:
        return PaymentConfig(
            email=self.email,
            currency=self.currency,
            amount=self.amount,
            reference=reference,
            booking_id=self.booking_id,
            customer_id=self.customer_id,
            venue_id=self.venue_id,
            venues=[share.to_share() for share in self.venues],
            credits_used=self.credits_used,
            credits_value=self.credits_value,
            metadata=dict(self.metadata),
        )


class FeeQuoteRequest(BaseModel):
    amount: float = Field(gt=0)
    platform_fee_percentage: float | None = Field(default=None, ge=0, le=100)
    venues: list[VenueShareIn] = Field(default_factory=list, max_length=20)


class BookingIntervalIn(BaseModel):
    start_time: str = Field(pattern=r"^\d{2}:\d{2}(:\d{2})?$")
    end_time: str = Field(pattern=r"^\d{2}:\d{2}(:\d{2})?$")
    status: str = "confirmed"
    table_id: str | None = None


class AvailabilityRequest(BaseModel):
    opening_hours: str | None = Field(default=None, max_length=200)
    bookings: list[BookingIntervalIn] = Field(default_factory=list)
    table_id: str | None = None
    statuses: list[str] | None = None


class SlotOut(BaseModel):
    time: str
    available: bool
    reason: str | None = None


class AvailabilityResponse(BaseModel):
    opening_time: str
    closing_time: str
    used_default_hours: bool
    slots: list[SlotOut]


class CreditPurchaseRequest(BaseModel):
    email: str
    package_id: str
    venue_id: str = Field(min_length=1, max_length=64)
    venue_subaccount_id: str = Field(min_length=1, max_length=128)
    customer_id: str = Field(min_length=1, max_length=64)
    reference: str | None = None

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("reference")
    @classmethod
    def _reference(cls, value: str | None) -> str | None:
        return normalize_reference(value)
