"""Supported currencies and the processor that settles each of them."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from .errors import InvalidAmount, UnsupportedCurrency


class ProcessorType(str, Enum):
    PAYSTACK = "paystack"
    STRIPE = "stripe"


@dataclass(frozen=True, slots=True)
class CurrencyConfig:
    code: str
    name: str
    symbol: str
    processor: ProcessorType
    countries: tuple[str, ...]
    decimals: int  # shown to users
    minor_unit_exponent: int  # smallest unit sent to the provider
    min_amount: float
    max_amount: float


def round_half_up(value: float) -> int:
    """Round like JavaScript's Math.round (halves go towards +infinity)."""
    return int(math.floor(value + 0.5))


def to_smallest_unit(amount: float, exponent: int) -> int:
    return round_half_up(amount * (10**exponent))


def from_smallest_unit(units: float, exponent: int) -> float:
    return units / (10**exponent)


def _stripe_currency(
    code: str, name: str, symbol: str, countries: Iterable[str], min_amount: float = 0.50
) -> CurrencyConfig:
    return CurrencyConfig(
        code=code,
        name=name,
        symbol=symbol,
        processor=ProcessorType.STRIPE,
        countries=tuple(countries),
        decimals=2,
        minor_unit_exponent=2,
        min_amount=min_amount,
        max_amount=999_999,
    )


DEFAULT_CURRENCIES: Mapping[str, CurrencyConfig] = MappingProxyType(
    {
        # Naira is displayed without kobo but Paystack still charges in kobo.
        "NGN": CurrencyConfig(
            code="NGN",
            name="Nigerian Naira",
            symbol="₦",
            processor=ProcessorType.PAYSTACK,
            countries=("Nigeria",),
            decimals=0,
            minor_unit_exponent=2,
            min_amount=100,
            max_amount=50_000_000,
        ),
        "EUR": _stripe_currency(
            "EUR",
            "Euro",
            "€",
            (
                "Austria",
                "Belgium",
                "Cyprus",
                "Estonia",
                "Finland",
                "France",
                "Germany",
                "Greece",
                "Ireland",
                "Italy",
                "Latvia",
                "Lithuania",
                "Luxembourg",
                "Malta",
                "Netherlands",
                "Portugal",
                "Slovakia",
                "Slovenia",
                "Spain",
            ),
        ),
        "GBP": _stripe_currency(
            "GBP",
            "British Pound",
            "£",
            ("United Kingdom", "Isle of Man", "Guernsey", "Jersey"),
            min_amount=0.30,
        ),
        "USD": _stripe_currency("USD", "US Dollar", "$", ("United States",)),
        "CAD": _stripe_currency("CAD", "Canadian Dollar", "C$", ("Canada",)),
        "AUD": _stripe_currency("AUD", "Australian Dollar", "A$", ("Australia",)),
    }
)


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


class CurrencyRegistry:
    """Read-only lookup table over ``CurrencyConfig`` records."""

    def __init__(self, currencies: Mapping[str, CurrencyConfig] | None = None) -> None:
        table = dict(currencies if currencies is not None else DEFAULT_CURRENCIES)
        self._currencies: Mapping[str, CurrencyConfig] = MappingProxyType(
            {normalize_code(code): config for code, config in table.items()}
        )

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and normalize_code(code) in self._currencies

    def __len__(self) -> int:
        return len(self._currencies)

    def get_config(self, code: str) -> CurrencyConfig:
        config = self._currencies.get(normalize_code(code))
        if config is None:
            raise UnsupportedCurrency(code)
        return config

    def processor_for(self, code: str) -> ProcessorType:
        return self.get_config(code).processor

    def is_supported(self, code: str | None) -> bool:
        return normalize_code(code) in self._currencies

    def codes(self) -> list[str]:
        return list(self._currencies)

    def configs(self) -> list[CurrencyConfig]:
        return list(self._currencies.values())

    def currencies_for_processor(self, processor: ProcessorType | str) -> list[str]:
        kind = ProcessorType(processor)
        return [code for code, cfg in self._currencies.items() if cfg.processor is kind]

    def currencies_in_country(self, country: str) -> list[str]:
        return [code for code, cfg in self._currencies.items() if country in cfg.countries]

    def currency_for_country(self, country: str) -> str | None:
        for code, cfg in self._currencies.items():
            if country in cfg.countries:
                return code
        return None

    def country_for_currency(self, code: str) -> str | None:
        countries = self.get_config(code).countries
        return countries[0] if countries else None

    def format_amount(self, amount: float, code: str) -> str:
        config = self.get_config(code)
        return f"{config.symbol}{amount:,.{config.decimals}f}"

    def convert(self, amount: float, from_code: str, to_code: str, exchange_rate: float) -> float:
        """Display-only conversion between smallest units; never used to charge."""
        source = self.get_config(from_code)
        target = self.get_config(to_code)
        base = from_smallest_unit(amount, source.minor_unit_exponent)
        return base * exchange_rate * (10**target.minor_unit_exponent)


def ngn_to_kobo(amount: float) -> int:
    if not amount or amount <= 0:
        raise InvalidAmount("Invalid NGN amount")
    return to_smallest_unit(amount, DEFAULT_CURRENCIES["NGN"].minor_unit_exponent)


def kobo_to_ngn(kobo: float) -> float:
    if not kobo or kobo <= 0:
        raise InvalidAmount("Invalid kobo amount")
    return from_smallest_unit(kobo, DEFAULT_CURRENCIES["NGN"].minor_unit_exponent)


__all__ = [
    "CurrencyConfig",
    "CurrencyRegistry",
    "DEFAULT_CURRENCIES",
    "ProcessorType",
    "from_smallest_unit",
    "kobo_to_ngn",
    "ngn_to_kobo",
    "normalize_code",
    "round_half_up",
    "to_smallest_unit",
]
