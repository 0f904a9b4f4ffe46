"""Tests for opening-hours parsing and slot availability."""

import pytest
from backend.app.availability import (
    BookingInterval,
    availability_for_hours,
    calculate_end_time,
    generate_time_slots,
    is_slot_available,
    parse_opening_hours,
    slot_availability,
    to_minutes,
)


class TestParseOpeningHours:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("7pm-12am", ("19:00", "00:00")),
            ("7pm - 12pm", ("19:00", "00:00")),
            ("Mon-Fri 7pm-12pm", ("19:00", "00:00")),
            ("9:00 AM - 11:00 PM", ("09:00", "23:00")),
            ("Open daily 6:30pm to 2am", ("18:30", "02:00")),
            ("18:00-02:00", ("18:00", "02:00")),
            ("Mon-Sun 12:00 – 23:30", ("12:00", "23:30")),
            ("11am-3pm", ("11:00", "15:00")),
        ],
    )
    def test_recognized_formats(self, text, expected):
        hours = parse_opening_hours(text)
        assert hours is not None
        assert (hours.start_time, hours.end_time) == expected

    @pytest.mark.parametrize("text", [None, "", "Closed", "call for hours", "25:00-26:00"])
    def test_unusable_text(self, text):
        assert parse_opening_hours(text) is None


class TestGenerateTimeSlots:
    def test_overnight_range(self):
        slots = generate_time_slots("18:00", "02:00")
        assert len(slots) == 16
        assert slots[0] == "18:00:00"
        assert slots[11] == "23:30:00"
        assert slots[12] == "00:00:00"
        assert slots[-1] == "01:30:00"

    def test_daytime_range_excludes_end(self):
        assert generate_time_slots("09:00", "11:00") == [
            "09:00:00",
            "09:30:00",
            "10:00:00",
            "10:30:00",
        ]

    def test_close_at_midnight(self):
        slots = generate_time_slots("19:00", "00:00")
        assert slots[-1] == "23:30:00"
        assert len(slots) == 10

    def test_custom_interval(self):
        assert generate_time_slots("12:00", "13:00", 15) == [
            "12:00:00",
            "12:15:00",
            "12:30:00",
            "12:45:00",
        ]

    def test_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            generate_time_slots("12:00", "13:00", 0)


class TestSlotAvailability:
    def test_booking_crossing_midnight(self):
        bookings = [BookingInterval("23:00", "02:00")]
        assert not is_slot_available("23:00:00", bookings)
        assert not is_slot_available("01:00:00", bookings)
        assert not is_slot_available("01:30", bookings)
        assert is_slot_available("02:00:00", bookings)
        assert is_slot_available("22:30:00", bookings)
        assert is_slot_available("10:00:00", bookings)

    def test_same_day_booking_is_half_open(self):
        bookings = [{"start_time": "19:00:00", "end_time": "21:00:00", "status": "confirmed"}]
        assert is_slot_available("18:30:00", bookings)
        assert not is_slot_available("19:00:00", bookings)
        assert not is_slot_available("20:30:00", bookings)
        assert is_slot_available("21:00:00", bookings)

    def test_only_blocking_statuses_count(self):
        bookings = [
            BookingInterval("20:00", "22:00", status="cancelled"),
            BookingInterval("20:00", "22:00", status="completed"),
        ]
        assert is_slot_available("20:00:00", bookings)
        assert not is_slot_available(
            "20:00:00", bookings, blocking_statuses={"completed"}
        )

    @pytest.mark.parametrize("status", ["confirmed", "pending", "paid"])
    def test_default_blocking_statuses(self, status):
        assert not is_slot_available("20:00", [BookingInterval("20:00", "22:00", status=status)])

    def test_reason_reported(self):
        blocked = slot_availability("20:00", [BookingInterval("20:00", "22:00")])
        assert blocked.time == "20:00:00"
        assert blocked.reason == "Already booked"

    def test_records_with_attributes(self):
        class Row:
            start_time = "18:00:00"
            end_time = "20:00:00"
            status = "paid"
            table_id = "t1"

        assert not is_slot_available("19:00:00", [Row()])


class TestAvailabilityForHours:
    def test_defaults_when_hours_unknown(self):
        slots = availability_for_hours("Ask at the door", [])
        assert [s.time for s in slots][:2] == ["18:00:00", "18:30:00"]
        assert len(slots) == 16
        assert all(s.available for s in slots)

    def test_marks_booked_slots(self):
        slots = availability_for_hours("7pm-12am", [BookingInterval("20:00", "21:00")])
        unavailable = [s.time for s in slots if not s.available]
        assert unavailable == ["20:00:00", "20:30:00"]

    def test_table_filter_keeps_unassigned_bookings(self):
        bookings = [
            BookingInterval("19:00", "20:00", table_id="t1"),
            BookingInterval("21:00", "22:00", table_id="t2"),
            BookingInterval("22:00", "23:00"),
        ]
        slots = availability_for_hours("7pm-12am", bookings, table_id="t2")
        unavailable = [s.time for s in slots if not s.available]
        assert unavailable == ["21:00:00", "21:30:00", "22:00:00", "22:30:00"]


class TestTimeHelpers:
    def test_to_minutes(self):
        assert to_minutes("00:00") == 0
        assert to_minutes("23:59:00") == 1439

    @pytest.mark.parametrize("value", ["", "7", "24:00", "12:60", "ab:cd"])
    def test_invalid_times(self, value):
        with pytest.raises(ValueError):
            to_minutes(value)

    def test_default_booking_end_wraps(self):
        assert calculate_end_time("19:00") == "23:00"
        assert calculate_end_time("22:30:00") == "02:30"
        assert calculate_end_time("20:00", hours=2) == "22:00"
