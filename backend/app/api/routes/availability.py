from __future__ import annotations

from fastapi import APIRouter, HTTPException

from ...availability import (
    DEFAULT_BLOCKING_STATUSES,
    BookingInterval,
    availability_for_hours,
    calculate_end_time,
    parse_opening_hours,
)
from ...schemas import AvailabilityRequest, AvailabilityResponse, SlotOut
from ...settings import settings

router = APIRouter(prefix="/availability", tags=["availability"])


@router.post("/slots", response_model=AvailabilityResponse)
def list_slots(payload: AvailabilityRequest) -> AvailabilityResponse:
    hours = parse_opening_hours(payload.opening_hours)
    opening = hours.start_time if hours else settings.DEFAULT_OPENING_TIME
    closing = hours.end_time if hours else settings.DEFAULT_CLOSING_TIME
    bookings = [
        BookingInterval(
            start_time=booking.start_time,
            end_time=booking.end_time,
            status=booking.status,
            table_id=booking.table_id,
        )
        for booking in payload.bookings
    ]
    statuses = frozenset(payload.statuses) if payload.statuses else DEFAULT_BLOCKING_STATUSES
    try:
        slots = availability_for_hours(
            payload.opening_hours,
            bookings,
            table_id=payload.table_id,
            blocking_statuses=statuses,
            interval_minutes=settings.SLOT_INTERVAL_MINUTES,
            default_open=settings.DEFAULT_OPENING_TIME,
            default_close=settings.DEFAULT_CLOSING_TIME,
        )
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    return AvailabilityResponse(
        opening_time=opening,
        closing_time=closing,
        used_default_hours=hours is None,
        slots=[SlotOut(time=s.time, available=s.available, reason=s.reason) for s in slots],
    )


@router.get("/end-time")
def default_end_time(start_time: str) -> dict[str, str]:
    try:
        end_time = calculate_end_time(start_time, settings.BOOKING_DURATION_HOURS)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    return {"start_time": start_time, "end_time": end_time}
