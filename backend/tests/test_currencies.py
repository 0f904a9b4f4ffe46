"""Tests for the currency registry and unit conversion helpers."""

import pytest
from backend.app.payments.currencies import (
    CurrencyRegistry,
    ProcessorType,
    from_smallest_unit,
    kobo_to_ngn,
    ngn_to_kobo,
    round_half_up,
    to_smallest_unit,
)
from backend.app.payments.errors import InvalidAmount, UnsupportedCurrency


@pytest.fixture
def registry() -> CurrencyRegistry:
    return CurrencyRegistry()


class TestCurrencyRegistry:
    def test_ngn_is_settled_by_paystack(self, registry):
        assert registry.processor_for("NGN") is ProcessorType.PAYSTACK

    @pytest.mark.parametrize("code", ["EUR", "GBP", "USD", "CAD", "AUD"])
    def test_other_currencies_are_settled_by_stripe(self, registry, code):
        assert registry.processor_for(code) is ProcessorType.STRIPE

    def test_codes_are_normalized(self, registry):
        assert registry.is_supported(" eur ")
        assert "gbp" in registry
        assert registry.get_config("usd").code == "USD"

    def test_unknown_currency_raises(self, registry):
        with pytest.raises(UnsupportedCurrency, match="Unsupported currency: XXX"):
            registry.get_config("XXX")
        assert not registry.is_supported("XXX")
        assert not registry.is_supported(None)

    def test_stripe_currency_list_keeps_declaration_order(self, registry):
        assert registry.currencies_for_processor("stripe") == ["EUR", "GBP", "USD", "CAD", "AUD"]
        assert registry.currencies_for_processor(ProcessorType.PAYSTACK) == ["NGN"]

    def test_country_lookups(self, registry):
        assert registry.currency_for_country("Germany") == "EUR"
        assert registry.currency_for_country("Nigeria") == "NGN"
        assert registry.currency_for_country("Atlantis") is None
        assert registry.country_for_currency("GBP") == "United Kingdom"
        assert "Ireland" in registry.get_config("EUR").countries

    def test_format_amount_uses_display_decimals(self, registry):
        assert registry.format_amount(25000, "NGN") == "₦25,000"
        assert registry.format_amount(1234.5, "EUR") == "€1,234.50"
        assert registry.format_amount(0.3, "GBP") == "£0.30"

    def test_limits(self, registry):
        ngn = registry.get_config("NGN")
        assert (ngn.min_amount, ngn.max_amount) == (100, 50_000_000)
        assert registry.get_config("GBP").min_amount == 0.30
        assert registry.get_config("USD").max_amount == 999_999

    def test_convert_is_display_only_arithmetic(self, registry):
        # 10.00 EUR at 0.85 -> 8.50 GBP, expressed in pence
        assert registry.convert(1000, "EUR", "GBP", 0.85) == pytest.approx(850)

    def test_custom_table(self):
        custom = CurrencyRegistry({"ngn": CurrencyRegistry().get_config("NGN")})
        assert len(custom) == 1
        assert custom.codes() == ["NGN"]


class TestUnits:
    def test_round_half_up_matches_math_round(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(-2.5) == -2
        assert round_half_up(2.4999) == 2

    def test_naira_is_charged_in_kobo(self):
        assert ngn_to_kobo(25000) == 2_500_000
        assert ngn_to_kobo(250.5) == 25050
        assert kobo_to_ngn(25050) == 250.5

    def test_kobo_round_trip(self):
        for amount in (100, 999.99, 12345.67, 50_000_000):
            assert kobo_to_ngn(ngn_to_kobo(amount)) == pytest.approx(amount)

    @pytest.mark.parametrize("value", [0, -1])
    def test_non_positive_naira_rejected(self, value):
        with pytest.raises(InvalidAmount):
            ngn_to_kobo(value)
        with pytest.raises(InvalidAmount):
            kobo_to_ngn(value)

    @pytest.mark.parametrize(("amount", "exponent"), [(5000, 0), (19.99, 2), (0.3, 2), (123456.78, 2)])
    def test_smallest_unit_round_trip(self, amount, exponent):
        assert from_smallest_unit(to_smallest_unit(amount, exponent), exponent) == pytest.approx(amount)

    def test_cents(self):
        assert to_smallest_unit(19.99, 2) == 1999
        assert to_smallest_unit(0.5, 2) == 50
