"""Payment processor abstraction over Paystack (NGN) and Stripe (other currencies)."""

from .base import PaymentProcessor
from .currencies import CurrencyConfig, CurrencyRegistry, ProcessorType
from .factory import PaymentProcessorFactory, get_payment_factory
from .paystack import PaystackProcessor
from .stripe import StripeProcessor
from .types import (
    PaymentConfig,
    PaymentInitResponse,
    VenueShare,
    WebhookEvent,
    WebhookHandlerResult,
)

__all__ = [
    "CurrencyConfig",
    "CurrencyRegistry",
    "PaymentConfig",
    "PaymentInitResponse",
    "PaymentProcessor",
    "PaymentProcessorFactory",
    "PaystackProcessor",
    "ProcessorType",
    "StripeProcessor",
    "VenueShare",
    "WebhookEvent",
    "WebhookHandlerResult",
    "get_payment_factory",
]
