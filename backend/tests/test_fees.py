"""Tests for platform fee and split calculations."""

import pytest
from backend.app.payments.errors import (
    InvalidAmount,
    InvalidFeePercentage,
    InvalidShareTotal,
    MissingVenueAccount,
)
from backend.app.payments.fees import (
    SplitStrategy,
    build_multi_venue_payment_split,
    build_single_payment_split,
    calculate_fees,
    calculate_payment_breakdown,
)
from backend.app.payments.types import VenueShare


def _share(venue_id: str, pct: float, name: str | None = None) -> VenueShare:
    return VenueShare(
        venue_id=venue_id,
        processor_account_id=f"ACCT_{venue_id}",
        percentage=pct,
        venue_name=name,
    )


class TestCalculateFees:
    def test_default_ten_percent(self):
        fees = calculate_fees(25000)
        assert fees.platform_fee == 2500
        assert fees.venue_amount == 22500
        assert fees.platform_fee_percentage == 10

    def test_platform_fee_rounds_half_up(self):
        fees = calculate_fees(1005, 10)
        assert fees.platform_fee == 101
        assert fees.venue_amount == 904

    @pytest.mark.parametrize("amount", [1, 99, 100.5, 333.33, 25000, 49_999_999])
    @pytest.mark.parametrize("pct", [0, 2.5, 10, 15, 100])
    def test_parts_always_add_up(self, amount, pct):
        fees = calculate_fees(amount, pct)
        assert fees.platform_fee + fees.venue_amount == pytest.approx(amount)

    @pytest.mark.parametrize("amount", [0, -10])
    def test_rejects_non_positive_amount(self, amount):
        with pytest.raises(InvalidAmount):
            calculate_fees(amount)

    @pytest.mark.parametrize("pct", [-1, 100.1])
    def test_rejects_out_of_range_percentage(self, pct):
        with pytest.raises(InvalidFeePercentage):
            calculate_fees(1000, pct)


class TestSingleVenueSplit:
    def test_platform_and_venue_shares(self):
        split = build_single_payment_split("ACCT_platform", "ACCT_venue", 25000)
        assert split.as_payload() == {
            "type": "percentage",
            "subaccounts": [
                {"subaccount": "ACCT_platform", "share": 10},
                {"subaccount": "ACCT_venue", "share": 90},
            ],
        }
        assert split.fees.platform_fee == 2500

    def test_platform_entry_omitted_without_account(self):
        split = build_single_payment_split(None, "ACCT_venue", 25000, 15)
        assert [entry.subaccount for entry in split.subaccounts] == ["ACCT_venue"]
        assert split.subaccounts[0].share == 85

    def test_venue_account_required(self):
        with pytest.raises(MissingVenueAccount):
            build_single_payment_split("ACCT_platform", "", 25000)


class TestMultiVenueSplit:
    def test_weighted_shares_are_scaled_to_venue_portion(self):
        split = build_multi_venue_payment_split(
            "ACCT_platform", [_share("a", 60), _share("b", 40)], 10000
        )
        shares = [entry.share for entry in split.subaccounts]
        assert shares[0] == 10
        assert shares[1:] == pytest.approx([54, 36])
        assert split.venue_share_total() == pytest.approx(90)

    def test_without_platform_account_venues_total_ninety(self):
        split = build_multi_venue_payment_split(None, [_share("a", 60), _share("b", 40)], 10000, 10)
        assert [entry.share for entry in split.subaccounts] == pytest.approx([54, 36])
        assert sum(entry.share for entry in split.subaccounts) == pytest.approx(90)

    def test_weighted_shares_are_normalized(self):
        split = build_multi_venue_payment_split(None, [_share("a", 30), _share("b", 20)], 10000)
        assert [s.adjusted_percentage for s in split.adjusted_shares] == pytest.approx([54, 36])
        assert [s.requested_percentage for s in split.adjusted_shares] == [30, 20]

    def test_equal_strategy_ignores_weights(self):
        split = build_multi_venue_payment_split(
            "ACCT_platform",
            [_share("a", 70), _share("b", 20), _share("c", 10)],
            10000,
            strategy=SplitStrategy.EQUAL,
        )
        assert [s.adjusted_percentage for s in split.adjusted_shares] == pytest.approx([30, 30, 30])
        assert split.strategy is SplitStrategy.EQUAL

    @pytest.mark.parametrize("pct", [0, 10, 25])
    def test_venue_total_plus_fee_is_always_one_hundred(self, pct):
        split = build_multi_venue_payment_split(
            "ACCT_platform", [_share("a", 33), _share("b", 33), _share("c", 34)], 5000, pct
        )
        assert sum(entry.share for entry in split.subaccounts) == pytest.approx(100)

    def test_accepts_plain_dicts(self):
        split = build_multi_venue_payment_split(
            "ACCT_platform",
            [
                {"venue_id": "a", "venue_subaccount_id": "ACCT_a", "percentage": 50},
                {"venue_id": "b", "processor_account_id": "ACCT_b", "percentage": 50},
            ],
            2000,
        )
        assert [entry.subaccount for entry in split.subaccounts] == ["ACCT_platform", "ACCT_a", "ACCT_b"]

    def test_empty_list_rejected(self):
        with pytest.raises(InvalidShareTotal):
            build_multi_venue_payment_split("ACCT_platform", [], 1000)

    def test_shares_over_one_hundred_rejected(self):
        with pytest.raises(InvalidShareTotal):
            build_multi_venue_payment_split("ACCT_platform", [_share("a", 80), _share("b", 40)], 1000)

    def test_weighted_rejects_zero_share(self):
        with pytest.raises(InvalidShareTotal):
            build_multi_venue_payment_split("ACCT_platform", [_share("a", 100), _share("b", 0)], 1000)


class TestBreakdown:
    def test_single_venue(self):
        breakdown = calculate_payment_breakdown(25000)
        assert breakdown["platform_fee"] == 2500
        assert breakdown["breakdown"] == [
            {"recipient": "Platform", "amount": 2500, "percentage": 10},
            {"recipient": "Venue", "amount": 22500, "percentage": 90},
        ]

    def test_multiple_venues(self):
        breakdown = calculate_payment_breakdown(
            10000, 10, [_share("a", 60, "Rooftop"), _share("b", 40, "Lounge")]
        )
        rows = breakdown["breakdown"][1:]
        assert [row["recipient"] for row in rows] == ["Rooftop", "Lounge"]
        assert [row["amount"] for row in rows] == [5400, 3600]
