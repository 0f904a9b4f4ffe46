from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from ...credits import (
    CREDIT_PURCHASE_COMMISSION,
    credit_purchase_metadata,
    formatted_credit_packages,
    generate_credit_reference,
    get_credit_package,
)
from ...metrics import payments_initialized_total
from ...payments.errors import PaymentError
from ...payments.factory import PaymentProcessorFactory, get_payment_factory
from ...payments.types import PaymentConfig, PaymentInitResponse, VenueShare
from ...schemas import CreditPurchaseRequest
from ..utils import http_error_for

router = APIRouter(prefix="/credits", tags=["credits"])


@router.get("/packages")
def list_packages() -> list[dict[str, Any]]:
    return formatted_credit_packages()


@router.post("/purchase", response_model=PaymentInitResponse)
async def purchase_credits(
    payload: CreditPurchaseRequest,
    factory: PaymentProcessorFactory = Depends(get_payment_factory),
) -> PaymentInitResponse:
    package = get_credit_package(payload.package_id)
    if package is None:
        raise HTTPException(404, f"Credit package not found: {payload.package_id}")

    reference = payload.reference or generate_credit_reference(payload.venue_id, payload.customer_id)
    config = PaymentConfig(
        email=payload.email,
        currency="NGN",
        amount=package.price_ngn,
        reference=reference,
        booking_id=reference,
        customer_id=payload.customer_id,
        venue_id=payload.venue_id,
        venues=[
            VenueShare(
                venue_id=payload.venue_id,
                processor_account_id=payload.venue_subaccount_id,
                percentage=100 - CREDIT_PURCHASE_COMMISSION,
            )
        ],
        metadata=credit_purchase_metadata(package),
    )
    try:
        result = await factory.get_processor("NGN").initialize_payment(config)
    except PaymentError as exc:
        raise http_error_for(exc) from exc
    payments_initialized_total.labels(processor=result.processor_type.value, currency="NGN").inc()
    return result
