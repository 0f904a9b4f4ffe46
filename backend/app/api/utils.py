from __future__ import annotations

from fastapi import HTTPException

from ..metrics import payment_errors_total
from ..payments.errors import (
    AmountOutOfRange,
    PaymentError,
    PaymentValidationError,
    ProcessorMisconfigured,
    ProviderError,
    SignatureError,
    SplitNotSupported,
)


def http_error_for(exc: PaymentError) -> HTTPException:
    """Map a payment failure to the status code the API promises for it."""
    payment_errors_total.labels(error=type(exc).__name__).inc()
    if isinstance(exc, SplitNotSupported):
        return HTTPException(501, str(exc))
    if isinstance(exc, PaymentValidationError | AmountOutOfRange | SignatureError):
        return HTTPException(400, str(exc))
    if isinstance(exc, ProcessorMisconfigured):
        return HTTPException(503, str(exc))
    if isinstance(exc, ProviderError):
        return HTTPException(502, str(exc))
    return HTTPException(500, str(exc))
