"""Tests for credit packages and purchase payloads."""

import pytest
from backend.app.credits import (
    build_credit_purchase_payload,
    calculate_credit_balance,
    calculate_credit_commission,
    credit_package_display,
    credit_value,
    find_best_package_for_budget,
    format_credit_transaction,
    formatted_credit_packages,
    generate_credit_reference,
    get_credit_package,
    recommended_package,
    validate_credit_purchase,
)
from backend.app.payments.errors import MissingVenueAccount, PaymentValidationError


class TestPackages:
    def test_lookup(self):
        package = get_credit_package("pkg-100")
        assert package is not None
        assert (package.credits, package.price_ngn, package.discount) == (100, 4500, 10)
        assert get_credit_package("pkg-1") is None

    def test_display(self):
        display = credit_package_display("pkg-100")
        assert display["formatted_price"] == "₦4,500"
        assert display["savings"] == "Save 10%"
        assert display["commission"]["platform_earns"] == 450
        assert display["commission"]["formatted_venue_earns"] == "₦4,050"
        assert credit_package_display("pkg-50")["savings"] is None

    def test_all_packages_formatted(self):
        assert [p["id"] for p in formatted_credit_packages()] == ["pkg-50", "pkg-100", "pkg-250", "pkg-500"]

    def test_commission(self):
        commission = calculate_credit_commission(20000)
        assert commission["platform_commission"] == 2000
        assert commission["venue_commission"] == 18000
        assert commission["venue_percentage"] == 90


class TestPurchasePayload:
    def test_payload(self):
        payload = build_credit_purchase_payload(
            email="venue@example.com",
            package_id="pkg-250",
            venue_subaccount_id="ACCT_venue",
            platform_subaccount_id="ACCT_platform",
            reference="credit-1",
        )
        assert payload["amount"] == 1_125_000
        assert payload["split"]["subaccounts"] == [
            {"subaccount": "ACCT_platform", "share": 10},
            {"subaccount": "ACCT_venue", "share": 90},
        ]
        metadata = payload["metadata"]
        assert metadata["transaction_type"] == "credit_purchase"
        assert metadata["credits_amount"] == 250
        assert metadata["platform_fee_amount"] == 1125

    def test_platform_subaccount_required(self):
        with pytest.raises(PaymentValidationError, match="Platform subaccount"):
            build_credit_purchase_payload(
                email="venue@example.com",
                package_id="pkg-50",
                venue_subaccount_id="ACCT_venue",
                platform_subaccount_id=None,
                reference="credit-1",
            )

    def test_venue_subaccount_required(self):
        with pytest.raises(MissingVenueAccount):
            build_credit_purchase_payload(
                email="venue@example.com",
                package_id="pkg-50",
                venue_subaccount_id="",
                platform_subaccount_id="ACCT_platform",
                reference="credit-1",
            )

    def test_unknown_package(self):
        with pytest.raises(PaymentValidationError, match="not found"):
            build_credit_purchase_payload(
                email="venue@example.com",
                package_id="pkg-999",
                venue_subaccount_id="ACCT_venue",
                platform_subaccount_id="ACCT_platform",
                reference="credit-1",
            )

    def test_validate_collects_every_error(self):
        ok, errors = validate_credit_purchase({"package_id": "pkg-999"})
        assert not ok
        assert "Valid email is required" in errors
        assert "Invalid package ID" in errors
        assert len(errors) == 5

    def test_reference_format(self):
        reference = generate_credit_reference("venue-1", "user-1")
        assert reference.startswith("credit-venue-1-user-1-")


class TestBudgeting:
    def test_best_package_for_budget(self):
        best = find_best_package_for_budget(12000)
        assert best["package"].id == "pkg-250"
        assert best["remaining_budget"] == 750
        assert find_best_package_for_budget(1000)["package"] is None

    def test_balance(self):
        short = calculate_credit_balance(50, 75)
        assert not short["sufficient"]
        assert short["message"] == "You need 25 more credits"
        enough = calculate_credit_balance(100, 75)
        assert enough["new_balance"] == 25
        assert credit_value(75) == 75

    @pytest.mark.parametrize(("bookings", "package_id"), [(0, "pkg-50"), (1, "pkg-100"), (2, "pkg-250"), (4, "pkg-500")])
    def test_recommendation(self, bookings, package_id):
        assert recommended_package(bookings)["recommendation"].id == package_id


class TestTransactionDisplay:
    def test_formats_stored_row(self):
        row = {
            "id": "txn-1",
            "transaction_type": "used",
            "credits_used": 75,
            "created_at": "2026-03-05T19:30:05",
        }
        assert format_credit_transaction(row) == {
            "id": "txn-1",
            "type": "used",
            "credits": 75,
            "credits_display": "75 credits",
            "description": "75 credits used",
            "date": "05/03/2026",
            "time": "19:30:05",
        }

    def test_keeps_explicit_description(self):
        row = {
            "id": "txn-2",
            "transaction_type": "purchase",
            "credits_used": 100,
            "description": "Bought Popular package",
            "created_at": None,
        }
        formatted = format_credit_transaction(row)
        assert formatted["description"] == "Bought Popular package"
        assert formatted["date"] is None
