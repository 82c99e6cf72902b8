"""Domain errors raised by the billing core."""
from __future__ import annotations

from datetime import datetime


class BillingError(Exception):
    """Base class for billing failures surfaced to API callers."""


class InvalidPlanError(BillingError):
    def __init__(self, plan: object) -> None:
        self.plan = plan
        super().__init__(f"Invalid plan selected: {plan!r}")


class InvalidPeriodError(BillingError):
    """The current plan's expiry is not after its start."""

    def __init__(self, plan_start_date: datetime, plan_expires_at: datetime) -> None:
        self.plan_start_date = plan_start_date
        self.plan_expires_at = plan_expires_at
        super().__init__(
            f"Plan period is malformed: expires {plan_expires_at.isoformat()} "
            f"is not after start {plan_start_date.isoformat()}"
        )


class UserNotFoundError(BillingError):
    def __init__(self, user_id: object) -> None:
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class PaymentNotRequiredError(BillingError):
    def __init__(self, plan: str, amount: int) -> None:
        self.plan = plan
        self.amount = amount
        super().__init__(f"Plan {plan!r} does not require payment")


class OrderNotFoundError(BillingError):
    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class OrderStateError(BillingError):
    """The order is already settled in a way that forbids the requested transition."""

    def __init__(self, order_id: str, status: str) -> None:
        self.order_id = order_id
        self.status = status
        super().__init__(f"Order {order_id} is already {status}")


__all__ = [
    "BillingError",
    "InvalidPeriodError",
    "InvalidPlanError",
    "OrderNotFoundError",
    "OrderStateError",
    "PaymentNotRequiredError",
    "UserNotFoundError",
]
