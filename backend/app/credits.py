"""Prepaid venue credit packages, sold through Paystack with a platform commission."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from .payments.currencies import CurrencyRegistry, ngn_to_kobo
from .payments.errors import InvalidEmail, MissingReference, MissingVenueAccount, PaymentValidationError
from .payments.fees import build_single_payment_split, calculate_fees

CREDIT_PURCHASE_COMMISSION = 10.0
CREDIT_VALUE_NGN = 1  # one credit is worth one naira
AVERAGE_CREDITS_PER_BOOKING = 75


@dataclass(frozen=True, slots=True)
class CreditPackage:
    id: str
    credits: int
    price_ngn: int
    price_per_credit: int
    discount: int
    badge: str


CREDIT_PACKAGES: tuple[CreditPackage, ...] = (
    CreditPackage("pkg-50", 50, 2_500, 50, 0, "Standard"),
    CreditPackage("pkg-100", 100, 4_500, 45, 10, "Popular"),
    CreditPackage("pkg-250", 250, 11_250, 45, 10, "Better Value"),
    CreditPackage("pkg-500", 500, 20_000, 40, 20, "Best Value"),
)

_registry = CurrencyRegistry()


def _format_ngn(amount: float) -> str:
    return _registry.format_amount(amount, "NGN")


def get_credit_package(package_id: str | None) -> CreditPackage | None:
    return next((pkg for pkg in CREDIT_PACKAGES if pkg.id == package_id), None)


def calculate_credit_commission(amount: float) -> dict[str, Any]:
    fees = calculate_fees(amount, CREDIT_PURCHASE_COMMISSION)
    venue_percentage = 100 - CREDIT_PURCHASE_COMMISSION
    return {
        "total_amount": amount,
        "platform_commission": fees.platform_fee,
        "venue_commission": fees.venue_amount,
        "platform_percentage": CREDIT_PURCHASE_COMMISSION,
        "venue_percentage": venue_percentage,
        "breakdown": {
            "platform": {
                "amount": fees.platform_fee,
                "percentage": CREDIT_PURCHASE_COMMISSION,
                "label": "Platform Commission",
            },
            "venue": {
                "amount": fees.venue_amount,
                "percentage": venue_percentage,
                "label": "Venue Earns",
            },
        },
    }


def build_credit_purchase_payload(
    *,
    email: str,
    package_id: str,
    venue_subaccount_id: str | None,
    platform_subaccount_id: str | None,
    reference: str,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Paystack ``/transaction/initialize`` body for a credit package purchase."""
    if not email or "@" not in email:
        raise InvalidEmail("Email is required")
    if not package_id:
        raise PaymentValidationError("Package ID is required")
    if not venue_subaccount_id:
        raise MissingVenueAccount("Venue subaccount ID is required")
    if not platform_subaccount_id:
        raise PaymentValidationError("Platform subaccount ID is required")
    if not reference:
        raise MissingReference("Reference is required")

    package = get_credit_package(package_id)
    if package is None:
        raise PaymentValidationError(f"Credit package not found: {package_id}")

    split = build_single_payment_split(
        platform_subaccount_id,
        venue_subaccount_id,
        package.price_ngn,
        CREDIT_PURCHASE_COMMISSION,
    )
    return {
        "email": email,
        "amount": ngn_to_kobo(package.price_ngn),
        "reference": reference,
        "split": split.as_payload(),
        "metadata": {
            **credit_purchase_metadata(package),
            **(metadata or {}),
            "platform_fee_percentage": CREDIT_PURCHASE_COMMISSION,
            "platform_fee_amount": split.fees.platform_fee,
            "venue_amount": split.fees.venue_amount,
        },
    }


def credit_purchase_metadata(package: CreditPackage) -> dict[str, Any]:
    return {
        "transaction_type": "credit_purchase",
        "credits_amount": package.credits,
        "package_id": package.id,
        "price_per_credit": package.price_per_credit,
    }


def credit_package_display(package_id: str) -> dict[str, Any] | None:
    package = get_credit_package(package_id)
    if package is None:
        return None
    commission = calculate_credit_commission(package.price_ngn)
    return {
        **asdict(package),
        "formatted_price": _format_ngn(package.price_ngn),
        "formatted_price_per_credit": _format_ngn(package.price_per_credit),
        "commission": {
            "platform_earns": commission["platform_commission"],
            "formatted_platform_earns": _format_ngn(commission["platform_commission"]),
            "venue_earns": commission["venue_commission"],
            "formatted_venue_earns": _format_ngn(commission["venue_commission"]),
        },
        "savings": f"Save {package.discount}%" if package.discount > 0 else None,
    }


def formatted_credit_packages() -> list[dict[str, Any]]:
    return [credit_package_display(pkg.id) for pkg in CREDIT_PACKAGES]  # type: ignore[misc]


def credit_value(credits: float) -> float:
    return credits * CREDIT_VALUE_NGN


def find_best_package_for_budget(budget_ngn: float) -> dict[str, Any]:
    if not budget_ngn or budget_ngn <= 0:
        return {"package": None, "remaining_budget": budget_ngn}
    affordable = [pkg for pkg in CREDIT_PACKAGES if pkg.price_ngn <= budget_ngn]
    if not affordable:
        return {"package": None, "remaining_budget": budget_ngn}
    best = affordable[-1]
    return {
        "package": best,
        "remaining_budget": budget_ngn - best.price_ngn,
        "savings": best.discount,
    }


def validate_credit_purchase(purchase: dict[str, Any]) -> tuple[bool, list[str]]:
    errors: list[str] = []
    email = purchase.get("email")
    if not email or "@" not in email:
        errors.append("Valid email is required")

    package_id = purchase.get("package_id")
    if not package_id:
        errors.append("Package ID is required")
    elif get_credit_package(package_id) is None:
        errors.append("Invalid package ID")

    if not purchase.get("venue_subaccount_id"):
        errors.append("Venue subaccount is required")
    if not purchase.get("platform_subaccount_id"):
        errors.append("Platform subaccount is required")
    if not purchase.get("reference"):
        errors.append("Reference is required")
    return not errors, errors


def generate_credit_reference(venue_id: str, user_id: str) -> str:
    return f"credit-{venue_id}-{user_id}-{int(time.time() * 1000)}"


def format_credit_transaction(transaction: dict[str, Any]) -> dict[str, Any]:
    """Display fields for a stored credit transaction row."""
    credits = transaction.get("credits_used")
    kind = transaction.get("transaction_type")
    credits_display = f"{credits} credits"
    created_at = transaction.get("created_at")
    if isinstance(created_at, str):
        created_at = datetime.fromisoformat(created_at)
    return {
        "id": transaction.get("id"),
        "type": kind,
        "credits": credits,
        "credits_display": credits_display,
        "description": transaction.get("description") or f"{credits_display} {kind}",
        "date": created_at.strftime("%d/%m/%Y") if created_at else None,
        "time": created_at.strftime("%H:%M:%S") if created_at else None,
    }


def calculate_credit_balance(current_balance: float, credits_to_use: float) -> dict[str, Any]:
    if credits_to_use > current_balance:
        shortfall = credits_to_use - current_balance
        return {
            "sufficient": False,
            "shortfall": shortfall,
            "message": f"You need {shortfall:g} more credits",
        }
    new_balance = current_balance - credits_to_use
    return {
        "sufficient": True,
        "new_balance": new_balance,
        "credits_used": credits_to_use,
        "message": f"Balance: {new_balance:g} credits remaining",
    }


def recommended_package(estimated_monthly_bookings: int = 1) -> dict[str, Any]:
    needed = estimated_monthly_bookings * AVERAGE_CREDITS_PER_BOOKING
    if needed > 250:
        package = CREDIT_PACKAGES[-1]
    elif needed > 100:
        package = CREDIT_PACKAGES[2]
    elif needed > 50:
        package = CREDIT_PACKAGES[1]
    else:
        package = CREDIT_PACKAGES[0]
    return {
        "recommendation": package,
        "estimated_credits_needed": needed,
        "message": (
            f"For {estimated_monthly_bookings} bookings/month, "
            f"we recommend {package.credits} credits"
        ),
    }


__all__ = [
    "CREDIT_PACKAGES",
    "CREDIT_PURCHASE_COMMISSION",
    "CreditPackage",
    "build_credit_purchase_payload",
    "calculate_credit_balance",
    "calculate_credit_commission",
    "credit_package_display",
    "credit_purchase_metadata",
    "credit_value",
    "find_best_package_for_budget",
    "format_credit_transaction",
    "formatted_credit_packages",
    "generate_credit_reference",
    "get_credit_package",
    "recommended_package",
    "validate_credit_purchase",
]
