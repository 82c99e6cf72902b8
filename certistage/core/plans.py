"""Subscription plan catalog and helpers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping

from .errors import InvalidPlanError

PlanId = Literal["free", "professional", "enterprise", "premium"]

# Ascending by price.
PLAN_ORDER: tuple[PlanId, ...] = ("free", "professional", "enterprise", "premium")


@dataclass(frozen=True, slots=True)
class PlanDetails:
    id: PlanId
    name: str
    price: int
    description: str
    max_events: int
    max_certificate_types: int
    max_certificates: int
    can_import_data: bool
    can_export_report: bool


_PLAN_REGISTRY: dict[PlanId, PlanDetails] = {
    "free": PlanDetails(
        id="free",
        name="Free",
        price=0,
        description="Trial - 50 certificates",
        max_events=1,
        max_certificate_types=1,
        max_certificates=50,
        can_import_data=False,
        can_export_report=False,
    ),
    "professional": PlanDetails(
        id="professional",
        name="Professional",
        price=499900,
        description="Up to 3 events, 2,000 certificates",
        max_events=3,
        max_certificate_types=5,
        max_certificates=2000,
        can_import_data=True,
        can_export_report=True,
    ),
    "enterprise": PlanDetails(
        id="enterprise",
        name="Enterprise",
        price=699900,
        description="Up to 10 events, 25,000 certificates",
        max_events=10,
        max_certificate_types=100,
        max_certificates=25000,
        can_import_data=True,
        can_export_report=True,
    ),
    "premium": PlanDetails(
        id="premium",
        name="Premium",
        price=1199900,
        description="Up to 25 events, 50,000 certificates",
        max_events=25,
        max_certificate_types=200,
        max_certificates=50000,
        can_import_data=True,
        can_export_report=True,
    ),
}

DEFAULT_PRICES: dict[PlanId, int] = {plan: details.price for plan, details in _PLAN_REGISTRY.items()}


def is_valid_plan(plan: object) -> bool:
    return isinstance(plan, str) and plan in _PLAN_REGISTRY


def get_plan_details(plan: str | None) -> PlanDetails:
    """Return plan details, raising for identifiers outside the catalog."""
    if not is_valid_plan(plan):
        raise InvalidPlanError(plan)
    return _PLAN_REGISTRY[plan]  # type: ignore[index]


def get_plan_limits(plan: str | None) -> PlanDetails:
    """Return plan details defaulting to the free tier."""
    key = (plan or "free").lower()
    return _PLAN_REGISTRY.get(key, _PLAN_REGISTRY["free"])  # type: ignore[call-overload]


def build_price_table(overrides: Mapping[str, int] | None = None) -> dict[PlanId, int]:
    """Merge price overrides onto the catalog defaults and validate the result.

    The table must keep ``free`` at zero, contain no negative prices and stay
    non-decreasing in ``PLAN_ORDER``.
    """
    table = dict(DEFAULT_PRICES)
    for plan, price in (overrides or {}).items():
        if not is_valid_plan(plan):
            raise ValueError(f"Unknown plan in price overrides: {plan!r}")
        if isinstance(price, bool) or not isinstance(price, int):
            raise ValueError(f"Price for {plan!r} must be an integer amount of minor units")
        table[plan] = price  # type: ignore[index]

    if table["free"] != 0:
        raise ValueError("The free plan must be priced at zero")
    previous = 0
    for plan in PLAN_ORDER:
        price = table[plan]
        if price < 0:
            raise ValueError(f"Price for {plan!r} cannot be negative")
        if price < previous:
            raise ValueError(f"Price for {plan!r} breaks ascending plan order")
        previous = price
    return table


def get_plan_price(plan: str, prices: Mapping[str, int] | None = None) -> int:
    table = DEFAULT_PRICES if prices is None else prices
    if not is_valid_plan(plan) or plan not in table:
        raise InvalidPlanError(plan)
    return table[plan]


def is_upgrade(current_plan: str, target_plan: str, prices: Mapping[str, int] | None = None) -> bool:
    return get_plan_price(target_plan, prices) > get_plan_price(current_plan, prices)


__all__ = [
    "DEFAULT_PRICES",
    "PLAN_ORDER",
    "PlanDetails",
    "PlanId",
    "build_price_table",
    "get_plan_details",
    "get_plan_limits",
    "get_plan_price",
    "is_upgrade",
    "is_valid_plan",
]
