from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from ...logging_config import get_logger
from ...metrics import payments_initialized_total
from ...payments.base import PaymentProcessor
from ...payments.currencies import ProcessorType
from ...payments.errors import PaymentError, ProcessorMisconfigured
from ...payments.factory import PaymentProcessorFactory, get_payment_factory
from ...payments.fees import calculate_payment_breakdown
from ...payments.paystack import PaystackProcessor
from ...payments.types import PaymentInitResponse
from ...schemas import FeeQuoteRequest, PaymentInitRequest
from ...settings import settings
from ...validators import reference_slug
from ..utils import http_error_for

router = APIRouter(tags=["payments"])
logger = get_logger(__name__)


@router.get("/currencies")
def list_currencies(factory: PaymentProcessorFactory = Depends(get_payment_factory)):
    return [
        {
            "code": config.code,
            "name": config.name,
            "symbol": config.symbol,
            "processor": config.processor.value,
            "countries": list(config.countries),
            "decimals": config.decimals,
            "min_amount": config.min_amount,
            "max_amount": config.max_amount,
        }
        for config in factory.registry.configs()
    ]


@router.post("/payments/fees")
def quote_fees(payload: FeeQuoteRequest) -> dict[str, Any]:
    percentage = (
        payload.platform_fee_percentage
        if payload.platform_fee_percentage is not None
        else settings.PLATFORM_FEE_PERCENTAGE
    )
    try:
        return calculate_payment_breakdown(
            payload.amount, percentage, [share.to_share() for share in payload.venues]
        )
    except PaymentError as exc:
        raise http_error_for(exc) from exc


@router.post("/payments/initialize", response_model=PaymentInitResponse)
async def initialize_payment(
    payload: PaymentInitRequest,
    factory: PaymentProcessorFactory = Depends(get_payment_factory),
) -> PaymentInitResponse:
    try:
        processor = factory.get_processor(payload.currency)
        reference = payload.reference or PaymentProcessor.generate_reference(
            f"booking-{reference_slug(payload.booking_id)}-"
        )
        result = await processor.initialize_payment(payload.to_config(reference))
    except PaymentError as exc:
        logger.warning(
            "payment_init_rejected",
            currency=payload.currency,
            booking_id=payload.booking_id,
            error=type(exc).__name__,
        )
        raise http_error_for(exc) from exc
    payments_initialized_total.labels(
        processor=result.processor_type.value, currency=result.currency
    ).inc()
    return result


@router.get("/payments/paystack/verify/{reference}")
async def verify_paystack_transaction(
    reference: str,
    factory: PaymentProcessorFactory = Depends(get_payment_factory),
) -> dict[str, Any]:
    try:
        processor = factory.get_processor_by_type(ProcessorType.PAYSTACK)
        if not isinstance(processor, PaystackProcessor):
            raise ProcessorMisconfigured("Paystack processor unavailable")
        return await processor.verify_transaction(reference)
    except PaymentError as exc:
        raise http_error_for(exc) from exc
