"""Opening-hours parsing and 30-minute booking slot availability.

Times are wall-clock strings. A range whose end is not after its start runs
past midnight, and every comparison below works in minutes from the opening
day's midnight so such ranges stay ordered.
"""

from __future__ import annotations

import re
from collections.abc import Collection, Iterable
from dataclasses import dataclass
from typing import Any

MINUTES_PER_DAY = 24 * 60
INTERVAL_MINUTES = 30
DEFAULT_OPEN = "18:00"
DEFAULT_CLOSE = "02:00"
# Slots before this hour belong to the previous evening when a booking wraps
EARLY_MORNING_CUTOFF = 6 * 60
DEFAULT_BLOCKING_STATUSES = frozenset({"confirmed", "pending", "paid"})
BOOKED_REASON = "Already booked"

_RANGE_SEP = r"\s*(?:-|–|—|to)\s*"
_AMPM_RANGE = re.compile(
    r"(\d{1,2})(?::(\d{2}))?\s*([ap])\.?m\.?" + _RANGE_SEP + r"(\d{1,2})(?::(\d{2}))?\s*([ap])\.?m\.?",
    re.IGNORECASE,
)
_24H_RANGE = re.compile(r"(\d{1,2}):(\d{2})" + _RANGE_SEP + r"(\d{1,2}):(\d{2})")


@dataclass(frozen=True, slots=True)
class OpeningHours:
    start_time: str  # HH:MM
    end_time: str  # HH:MM


@dataclass(slots=True)
class BookingInterval:
    start_time: str
    end_time: str
    status: str = "confirmed"
    table_id: str | None = None

    @classmethod
    def from_record(cls, record: Any) -> BookingInterval:
        if isinstance(record, BookingInterval):
            return record
        if isinstance(record, dict):
            return cls(
                start_time=str(record.get("start_time") or record.get("start") or ""),
                end_time=str(record.get("end_time") or record.get("end") or ""),
                status=str(record.get("status") or "confirmed"),
                table_id=record.get("table_id"),
            )
        return cls(
            start_time=str(getattr(record, "start_time", "")),
            end_time=str(getattr(record, "end_time", "")),
            status=str(getattr(record, "status", "confirmed")),
            table_id=getattr(record, "table_id", None),
        )

    def crosses_midnight(self) -> bool:
        return to_minutes(self.end_time) < to_minutes(self.start_time)


@dataclass(frozen=True, slots=True)
class SlotAvailability:
    time: str
    available: bool
    reason: str | None = None


def to_minutes(value: str) -> int:
    """``"HH:MM"`` or ``"HH:MM:SS"`` to minutes after midnight."""
    parts = (value or "").strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time '{value}'")
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid time '{value}'")
    return hour * 60 + minute


def format_slot(minutes: int) -> str:
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}:00"


def _hhmm(hour: int, minute: int) -> str:
    return f"{hour:02d}:{minute:02d}"


def _to_24h(hour: int, meridiem: str) -> int:
    hour %= 12
    return hour + 12 if meridiem == "p" else hour


def parse_opening_hours(text: str | None) -> OpeningHours | None:
    """
    Extract an opening range from venue-authored text.

    Understands "7pm-12am", "9:00 AM - 11:00 PM" and "18:00-02:00". After an
    evening start, a literal "12pm" end means midnight, not noon. Returns
    ``None`` when nothing usable is found.
    """
    if not text:
        return None

    match = _AMPM_RANGE.search(text)
    if match:
        start_h, start_m, start_mer, end_h, end_m, end_mer = match.groups()
        start_hour, end_hour = int(start_h), int(end_h)
        start_minute, end_minute = int(start_m or 0), int(end_m or 0)
        start_mer, end_mer = start_mer.lower(), end_mer.lower()
        if not (1 <= start_hour <= 12 and 1 <= end_hour <= 12):
            return None
        if start_minute > 59 or end_minute > 59:
            return None
        if start_mer == "p" and end_mer == "p" and end_hour == 12:
            end_mer = "a"
        return OpeningHours(
            start_time=_hhmm(_to_24h(start_hour, start_mer), start_minute),
            end_time=_hhmm(_to_24h(end_hour, end_mer), end_minute),
        )

    match = _24H_RANGE.search(text)
    if match:
        start_h, start_m, end_h, end_m = (int(part) for part in match.groups())
        if start_h > 23 or end_h > 24 or start_m > 59 or end_m > 59:
            return None
        return OpeningHours(start_time=_hhmm(start_h, start_m), end_time=_hhmm(end_h % 24, end_m))

    return None


def generate_time_slots(
    start_time: str, end_time: str, interval_minutes: int = INTERVAL_MINUTES
) -> list[str]:
    """
    ``HH:MM:SS`` slot starts from ``start_time`` up to, not including, ``end_time``.

    An end at or before the start is read as the next day, so overnight hours
    produce a finite list whose labels wrap past midnight.
    """
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be positive")
    start = to_minutes(start_time)
    end = to_minutes(end_time)
    if end <= start:
        end += MINUTES_PER_DAY

    slots: list[str] = []
    current = start
    while current < end:
        slots.append(format_slot(current))
        current += interval_minutes
    return slots


def _blocks_slot(slot_minutes: int, booking: BookingInterval) -> bool:
    booking_start = to_minutes(booking.start_time)
    booking_end = to_minutes(booking.end_time)
    candidate = slot_minutes
    if booking_end < booking_start:
        booking_end += MINUTES_PER_DAY
        if candidate < EARLY_MORNING_CUTOFF:
            candidate += MINUTES_PER_DAY
    return booking_start <= candidate < booking_end


def slot_availability(
    slot_time: str,
    bookings: Iterable[Any],
    blocking_statuses: Collection[str] = DEFAULT_BLOCKING_STATUSES,
) -> SlotAvailability:
    slot_minutes = to_minutes(slot_time)
    label = format_slot(slot_minutes)
    for record in bookings:
        booking = BookingInterval.from_record(record)
        if booking.status not in blocking_statuses:
            continue
        if _blocks_slot(slot_minutes, booking):
            return SlotAvailability(time=label, available=False, reason=BOOKED_REASON)
    return SlotAvailability(time=label, available=True)


def is_slot_available(
    slot_time: str,
    bookings: Iterable[Any],
    blocking_statuses: Collection[str] = DEFAULT_BLOCKING_STATUSES,
) -> bool:
    """
    False iff the slot falls in ``[start, end)`` of a blocking booking.

    When a booking crosses midnight its end moves to the next day, and a
    candidate slot between 00:00 and 06:00 moves with it, so 01:00 collides
    with a 23:00-02:00 booking while 10:00 does not.
    """
    return slot_availability(slot_time, bookings, blocking_statuses).available


def availability_for_hours(
    opening_hours: str | None,
    bookings: Iterable[Any],
    *,
    table_id: str | None = None,
    blocking_statuses: Collection[str] = DEFAULT_BLOCKING_STATUSES,
    interval_minutes: int = INTERVAL_MINUTES,
    default_open: str = DEFAULT_OPEN,
    default_close: str = DEFAULT_CLOSE,
) -> list[SlotAvailability]:
    """Every slot in the venue's hours with its availability; unknown hours use the defaults."""
    hours = parse_opening_hours(opening_hours)
    start, end = (hours.start_time, hours.end_time) if hours else (default_open, default_close)

    relevant = [BookingInterval.from_record(record) for record in bookings]
    if table_id is not None:
        relevant = [b for b in relevant if b.table_id in (None, table_id)]

    return [
        slot_availability(slot, relevant, blocking_statuses)
        for slot in generate_time_slots(start, end, interval_minutes)
    ]


def calculate_end_time(start_time: str, hours: int = 4) -> str:
    """Default booking end (``HH:MM``), wrapping past midnight."""
    end = (to_minutes(start_time) + hours * 60) % MINUTES_PER_DAY
    return _hhmm(end // 60, end % 60)


__all__ = [
    "BookingInterval",
    "DEFAULT_BLOCKING_STATUSES",
    "OpeningHours",
    "SlotAvailability",
    "availability_for_hours",
    "calculate_end_time",
    "generate_time_slots",
    "is_slot_available",
    "parse_opening_hours",
    "slot_availability",
    "to_minutes",
]
