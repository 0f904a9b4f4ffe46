"""Platform fee and percentage split calculations.

Split payloads use Paystack's percentage subaccount shape
(``{"subaccount": ..., "share": ...}``); the fee maths are provider-neutral.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .currencies import round_half_up
from .errors import InvalidAmount, InvalidFeePercentage, InvalidShareTotal, MissingVenueAccount

DEFAULT_PLATFORM_FEE_PERCENTAGE = 10.0


class SplitStrategy(str, Enum):
    # share / share_total * (100 - fee)
    WEIGHTED = "weighted"
    # (100 - fee) / venue_count, ignoring requested weights
    EQUAL = "equal"


@dataclass(frozen=True, slots=True)
class FeeCalculation:
    total_amount: float
    platform_fee: int
    platform_fee_percentage: float
    venue_amount: float


@dataclass(slots=True)
class SplitEntry:
    subaccount: str
    share: float

    def as_payload(self) -> dict[str, Any]:
        return {"subaccount": self.subaccount, "share": self.share}


@dataclass(slots=True)
class AdjustedShare:
    venue_id: str | None
    subaccount: str
    requested_percentage: float
    adjusted_percentage: float


@dataclass(slots=True)
class SplitPayload:
    subaccounts: list[SplitEntry]
    fees: FeeCalculation
    type: str = "percentage"
    strategy: SplitStrategy | None = None
    adjusted_shares: list[AdjustedShare] = field(default_factory=list)

    def venue_share_total(self) -> float:
        return sum(share.adjusted_percentage for share in self.adjusted_shares)

    def as_payload(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "subaccounts": [entry.as_payload() for entry in self.subaccounts],
        }


def _check_percentage(platform_fee_percentage: float) -> None:
    if platform_fee_percentage < 0 or platform_fee_percentage > 100:
        raise InvalidFeePercentage(
            f"Platform fee percentage must be between 0 and 100, got {platform_fee_percentage}"
        )


def calculate_fees(
    total_amount: float, platform_fee_percentage: float = DEFAULT_PLATFORM_FEE_PERCENTAGE
) -> FeeCalculation:
    if not total_amount or total_amount <= 0:
        raise InvalidAmount("Invalid total amount")
    _check_percentage(platform_fee_percentage)
    platform_fee = round_half_up(total_amount * platform_fee_percentage / 100)
    return FeeCalculation(
        total_amount=total_amount,
        platform_fee=platform_fee,
        platform_fee_percentage=platform_fee_percentage,
        # never rounded on its own so the two parts always add up
        venue_amount=total_amount - platform_fee,
    )


def build_single_payment_split(
    platform_account_id: str | None,
    venue_account_id: str | None,
    total_amount: float,
    platform_fee_percentage: float = DEFAULT_PLATFORM_FEE_PERCENTAGE,
) -> SplitPayload:
    if not venue_account_id:
        raise MissingVenueAccount("Venue subaccount ID is required")
    fees = calculate_fees(total_amount, platform_fee_percentage)

    subaccounts: list[SplitEntry] = []
    if platform_account_id:
        subaccounts.append(SplitEntry(platform_account_id, platform_fee_percentage))
    subaccounts.append(SplitEntry(venue_account_id, 100 - platform_fee_percentage))
    return SplitPayload(subaccounts=subaccounts, fees=fees)


def _share_fields(share: Any) -> tuple[str | None, str, float]:
    if isinstance(share, dict):
        account = share.get("processor_account_id") or share.get("venue_subaccount_id") or ""
        return share.get("venue_id"), str(account), float(share.get("percentage") or 0)
    return (
        getattr(share, "venue_id", None),
        str(getattr(share, "processor_account_id", "") or ""),
        float(getattr(share, "percentage", 0) or 0),
    )


def build_multi_venue_payment_split(
    platform_account_id: str | None,
    venue_shares: Sequence[Any],
    total_amount: float,
    platform_fee_percentage: float = DEFAULT_PLATFORM_FEE_PERCENTAGE,
    *,
    strategy: SplitStrategy = SplitStrategy.WEIGHTED,
) -> SplitPayload:
    """
    Split what remains after the platform fee across several venues.

    ``venue_shares`` items may be ``VenueShare`` objects or plain dicts with
    ``processor_account_id`` (or ``venue_subaccount_id``) and ``percentage``.
    Whatever the raw percentages add up to, the venue entries always total
    exactly ``100 - platform_fee_percentage``.
    """
    if not venue_shares:
        raise InvalidShareTotal("At least one venue is required for split payment")
    fields_ = [_share_fields(share) for share in venue_shares]
    share_total = sum(pct for _, _, pct in fields_)
    if share_total <= 0 or share_total > 100:
        raise InvalidShareTotal(f"Venue shares must total 100%, got {share_total}%")
    if strategy is SplitStrategy.WEIGHTED and any(pct <= 0 for _, _, pct in fields_):
        raise InvalidShareTotal("Each venue share must be a positive percentage")
    _check_percentage(platform_fee_percentage)

    remaining = 100 - platform_fee_percentage
    adjusted: list[AdjustedShare] = []
    for venue_id, account, pct in fields_:
        if strategy is SplitStrategy.EQUAL:
            adjusted_pct = remaining / len(fields_)
        else:
            adjusted_pct = (pct / share_total) * remaining
        adjusted.append(AdjustedShare(venue_id, account, pct, adjusted_pct))

    subaccounts: list[SplitEntry] = []
    if platform_account_id:
        subaccounts.append(SplitEntry(platform_account_id, platform_fee_percentage))
    subaccounts.extend(SplitEntry(share.subaccount, share.adjusted_percentage) for share in adjusted)

    return SplitPayload(
        subaccounts=subaccounts,
        fees=calculate_fees(total_amount, platform_fee_percentage),
        strategy=strategy,
        adjusted_shares=adjusted,
    )


def calculate_payment_breakdown(
    total_amount: float,
    platform_fee_percentage: float = DEFAULT_PLATFORM_FEE_PERCENTAGE,
    venue_shares: Sequence[Any] = (),
) -> dict[str, Any]:
    """What each party receives, for confirmation screens."""
    fees = calculate_fees(total_amount, platform_fee_percentage)
    remaining = 100 - platform_fee_percentage
    breakdown: list[dict[str, Any]] = [
        {
            "recipient": "Platform",
            "amount": fees.platform_fee,
            "percentage": platform_fee_percentage,
        }
    ]

    if not venue_shares:
        breakdown.append({"recipient": "Venue", "amount": fees.venue_amount, "percentage": remaining})
    else:
        share_total = sum(_share_fields(share)[2] for share in venue_shares)
        if share_total <= 0:
            raise InvalidShareTotal(f"Venue shares must total 100%, got {share_total}%")
        for share in venue_shares:
            _, _, pct = _share_fields(share)
            name = share.get("venue_name") if isinstance(share, dict) else getattr(share, "venue_name", None)
            breakdown.append(
                {
                    "recipient": name or "Venue",
                    "amount": round_half_up(pct / share_total * fees.venue_amount),
                    "percentage": pct / share_total * remaining,
                }
            )

    return {
        "total_amount": fees.total_amount,
        "platform_fee": fees.platform_fee,
        "venue_amount": fees.venue_amount,
        "breakdown": breakdown,
    }


__all__ = [
    "AdjustedShare",
    "DEFAULT_PLATFORM_FEE_PERCENTAGE",
    "FeeCalculation",
    "SplitEntry",
    "SplitPayload",
    "SplitStrategy",
    "build_multi_venue_payment_split",
    "build_single_payment_split",
    "calculate_fees",
    "calculate_payment_breakdown",
]
