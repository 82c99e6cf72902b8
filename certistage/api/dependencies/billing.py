"""Clock and price-table dependencies for billing routes."""
from __future__ import annotations

from datetime import datetime, timezone

from certistage.core.plans import PlanId
from certistage.core.settings import get_settings


def get_clock() -> datetime:
    """Read the wall clock once per request; overridden in tests."""
    return datetime.now(timezone.utc)


def get_price_table() -> dict[PlanId, int]:
    return get_settings().price_table


__all__ = ["get_clock", "get_price_table"]
