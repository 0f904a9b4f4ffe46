from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from ...logging_config import get_logger
from ...metrics import webhook_events_total
from ...payments.base import SIGNATURE_FAILED
from ...payments.currencies import ProcessorType
from ...payments.errors import PaymentError, SignatureError
from ...payments.factory import PaymentProcessorFactory, get_payment_factory
from ..utils import http_error_for

router = APIRouter(prefix="/webhooks", tags=["webhooks"])
logger = get_logger(__name__)


async def _dispatch(
    processor_type: ProcessorType,
    request: Request,
    signature: str | None,
    factory: PaymentProcessorFactory,
) -> JSONResponse:
    # The signature covers the exact bytes the provider sent
    raw_body = await request.body()
    try:
        processor = factory.get_processor_by_type(processor_type)
        event = processor.parse_webhook(raw_body, signature)
    except SignatureError:
        webhook_events_total.labels(processor=processor_type.value, outcome="rejected").inc()
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Invalid signature", "error": SIGNATURE_FAILED},
        )
    except PaymentError as exc:
        webhook_events_total.labels(processor=processor_type.value, outcome="error").inc()
        raise http_error_for(exc) from exc

    result = await processor.handle_webhook(event)
    outcome = "processed" if result.success else "failed"
    webhook_events_total.labels(processor=processor_type.value, outcome=outcome).inc()
    logger.info(
        "webhook_handled",
        processor=processor_type.value,
        event_type=event.type,
        reference=event.reference,
        booking_id=result.booking_id,
        success=result.success,
    )
    return JSONResponse(status_code=200, content=result.model_dump())


@router.post("/paystack")
async def paystack_webhook(
    request: Request,
    x_paystack_signature: str | None = Header(default=None),
    factory: PaymentProcessorFactory = Depends(get_payment_factory),
) -> JSONResponse:
    return await _dispatch(ProcessorType.PAYSTACK, request, x_paystack_signature, factory)


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None),
    factory: PaymentProcessorFactory = Depends(get_payment_factory),
) -> JSONResponse:
    return await _dispatch(ProcessorType.STRIPE, request, stripe_signature, factory)
