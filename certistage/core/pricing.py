"""Pro-rata upgrade pricing.

A user upgrading mid-cycle is credited for the unused remainder of the plan
they already paid for. All amounts are integer minor units (paise); divisions
are rounded half-up on exact integers so results never drift with floats.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from .errors import InvalidPeriodError
from .plans import get_plan_price

ONE_DAY = timedelta(days=1)
# Reported cycle length when the user has no paid period on record.
DEFAULT_CYCLE_DAYS = 365


@dataclass(frozen=True, slots=True)
class ProRataResult:
    original_price: int
    unused_credit: int
    final_amount: int
    days_remaining: int
    total_days: int
    savings: int
    savings_percent: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _ceil_days(delta: timedelta) -> int:
    return -(-delta // ONE_DAY)


def _round_half_up(numerator: int, denominator: int) -> int:
    # Callers only pass non-negative numerators and positive denominators.
    return (2 * numerator + denominator) // (2 * denominator)


def _validate_period(start: datetime, expires: datetime) -> None:
    if expires <= start:
        raise InvalidPeriodError(start, expires)


def _full_price(original_price: int, days_remaining: int = 0, total_days: int = DEFAULT_CYCLE_DAYS) -> ProRataResult:
    return ProRataResult(
        original_price=original_price,
        unused_credit=0,
        final_amount=original_price,
        days_remaining=days_remaining,
        total_days=total_days,
        savings=0,
        savings_percent=0,
    )


def calculate_pro_rata_upgrade(
    current_plan: str,
    target_plan: str,
    plan_start_date: datetime | None,
    plan_expires_at: datetime | None,
    *,
    now: datetime | None = None,
    prices: Mapping[str, int] | None = None,
) -> ProRataResult:
    """Price an upgrade from ``current_plan`` to ``target_plan``.

    Raises:
        InvalidPlanError: either plan id is outside the price table.
        InvalidPeriodError: both dates are given and expiry is not after start.

    Missing dates are not an error: the user simply has no credit to apply.
    Downgrades and lateral moves are charged the full target price.
    """
    original_price = get_plan_price(target_plan, prices)
    current_price = get_plan_price(current_plan, prices)

    if plan_start_date is None or plan_expires_at is None:
        return _full_price(original_price)

    start = as_utc(plan_start_date)
    expires = as_utc(plan_expires_at)
    _validate_period(start, expires)

    if current_plan == "free":
        return _full_price(original_price)

    reference = as_utc(now) if now is not None else datetime.now(timezone.utc)
    total_days = _ceil_days(expires - start)
    days_remaining = max(0, _ceil_days(expires - reference))

    if original_price <= current_price:
        return _full_price(original_price, days_remaining, total_days)

    unused_credit = _round_half_up(current_price * days_remaining, total_days)
    # Never credit more than was paid for the current plan, nor more than the target costs.
    unused_credit = min(unused_credit, current_price, original_price)

    final_amount = max(0, original_price - unused_credit)
    savings = original_price - final_amount
    savings_percent = _round_half_up(savings * 100, original_price) if original_price > 0 else 0

    return ProRataResult(
        original_price=original_price,
        unused_credit=unused_credit,
        final_amount=final_amount,
        days_remaining=days_remaining,
        total_days=total_days,
        savings=savings,
        savings_percent=savings_percent,
    )


def is_eligible_for_pro_rata(
    current_plan: str,
    plan_start_date: datetime | None,
    plan_expires_at: datetime | None,
    *,
    now: datetime | None = None,
) -> bool:
    """Return True when the current plan still has paid time left to credit."""
    if current_plan == "free" or plan_start_date is None or plan_expires_at is None:
        return False
    reference = as_utc(now) if now is not None else datetime.now(timezone.utc)
    return as_utc(plan_expires_at) > reference


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_amount(amount_in_paise: int) -> str:
    """Render paise as rupees, e.g. ``1199900`` -> ``₹11,999``."""
    sign = "-" if amount_in_paise < 0 else ""
    rupees, paise = divmod(abs(amount_in_paise), 100)
    text = f"{sign}₹{_group_indian(str(rupees))}"
    if paise:
        text += f".{paise:02d}".rstrip("0")
    return text


__all__ = [
    "ProRataResult",
    "as_utc",
    "calculate_pro_rata_upgrade",
    "format_amount",
    "is_eligible_for_pro_rata",
]
