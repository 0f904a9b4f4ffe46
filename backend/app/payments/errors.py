"""Typed failures raised by the payment core.

Validation failures are local and raised before any network call. Provider
failures carry the provider's own message so callers can surface it verbatim.
"""

from __future__ import annotations


class PaymentError(Exception):
    """Base class for every failure raised by the payments package."""


class PaymentValidationError(PaymentError, ValueError):
    pass


class InvalidEmail(PaymentValidationError):
    pass


class InvalidAmount(PaymentValidationError):
    pass


class MissingReference(PaymentValidationError):
    pass


class CurrencyMismatch(PaymentValidationError):
    pass


class MissingVenueAccount(PaymentValidationError):
    pass


class InvalidShareTotal(PaymentValidationError):
    pass


class InvalidFeePercentage(PaymentValidationError):
    pass


class UnsupportedCurrency(PaymentValidationError):
    def __init__(self, currency: str) -> None:
        super().__init__(f"Unsupported currency: {currency}")
        self.currency = currency


class AmountOutOfRange(PaymentError):
    def __init__(self, message: str, *, bound: float, formatted_bound: str) -> None:
        super().__init__(message)
        self.bound = bound
        self.formatted_bound = formatted_bound


class ProcessorMisconfigured(PaymentError):
    pass


class ProviderError(PaymentError):
    def __init__(self, provider: str, message: str, *, status_code: int | None = None) -> None:
        super().__init__(f"{provider} API error: {message}")
        self.provider = provider
        self.provider_message = message
        self.status_code = status_code


class NoReferenceReturned(ProviderError):
    def __init__(self, provider: str) -> None:
        super().__init__(provider, f"No payment reference returned from {provider}")


class SignatureError(PaymentError):
    pass


class MissingBookingId(PaymentError):
    pass


class SplitNotSupported(PaymentError, NotImplementedError):
    pass


__all__ = [
    "AmountOutOfRange",
    "CurrencyMismatch",
    "InvalidAmount",
    "InvalidEmail",
    "InvalidFeePercentage",
    "InvalidShareTotal",
    "MissingBookingId",
    "MissingReference",
    "MissingVenueAccount",
    "NoReferenceReturned",
    "PaymentError",
    "PaymentValidationError",
    "ProcessorMisconfigured",
    "ProviderError",
    "SignatureError",
    "SplitNotSupported",
    "UnsupportedCurrency",
]
