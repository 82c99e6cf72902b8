"""Upgrade quoting and payment initiation built on the pro-rata calculator."""
from __future__ import annotations

import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Mapping

from sqlalchemy.orm import Session

from certistage.core import models
from certistage.core.errors import (
    InvalidPeriodError,
    OrderNotFoundError,
    OrderStateError,
    PaymentNotRequiredError,
    UserNotFoundError,
)
from certistage.core.logging import get_logger
from certistage.core.plans import get_plan_price
from certistage.core.pricing import (
    DEFAULT_CYCLE_DAYS,
    ProRataResult,
    as_utc,
    calculate_pro_rata_upgrade,
    is_eligible_for_pro_rata,
)

logger = get_logger(__name__)

_RECEIPT_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass(frozen=True, slots=True)
class UpgradeQuote:
    current_plan: str
    target_plan: str
    pricing: ProRataResult
    eligible: bool
    fallback_reason: str | None = None


def get_user(db: Session, user_id: uuid.UUID) -> models.User:
    user = db.get(models.User, user_id)
    if not user or not user.is_active:
        raise UserNotFoundError(user_id)
    return user


def quote_upgrade(
    user: models.User,
    target_plan: str,
    *,
    now: datetime,
    prices: Mapping[str, int] | None = None,
) -> UpgradeQuote:
    """Price ``target_plan`` for ``user``.

    A corrupted billing period never blocks the upgrade: the user is quoted
    full price and the account is logged for manual review.
    """
    current_plan = user.plan or "free"
    try:
        pricing = calculate_pro_rata_upgrade(
            current_plan,
            target_plan,
            user.plan_start_date,
            user.plan_expires_at,
            now=now,
            prices=prices,
        )
    except InvalidPeriodError as exc:
        logger.warning(
            "pro_rata_invalid_period",
            user_id=str(user.id),
            plan=current_plan,
            plan_start_date=exc.plan_start_date.isoformat(),
            plan_expires_at=exc.plan_expires_at.isoformat(),
        )
        pricing = calculate_pro_rata_upgrade(current_plan, target_plan, None, None, now=now, prices=prices)
        return UpgradeQuote(
            current_plan=current_plan,
            target_plan=target_plan,
            pricing=pricing,
            eligible=False,
            fallback_reason="invalid_period",
        )

    eligible = pricing.unused_credit > 0 and is_eligible_for_pro_rata(
        current_plan, user.plan_start_date, user.plan_expires_at, now=now
    )
    logger.info(
        "pro_rata_quoted",
        user_id=str(user.id),
        current_plan=current_plan,
        target_plan=target_plan,
        final_amount=pricing.final_amount,
        unused_credit=pricing.unused_credit,
    )
    return UpgradeQuote(
        current_plan=current_plan,
        target_plan=target_plan,
        pricing=pricing,
        eligible=eligible,
    )


def generate_receipt(now: datetime) -> str:
    suffix = "".join(secrets.choice(_RECEIPT_ALPHABET) for _ in range(7))
    return f"rcpt_{int(as_utc(now).timestamp() * 1000)}_{suffix}"


def create_upgrade_order(
    db: Session,
    user: models.User,
    target_plan: str,
    *,
    now: datetime,
    prices: Mapping[str, int] | None = None,
    currency: str = "INR",
) -> tuple[models.Payment, UpgradeQuote]:
    """Persist a pending payment charging the pro-rata amount for ``target_plan``."""
    if get_plan_price(target_plan, prices) == 0:
        raise PaymentNotRequiredError(target_plan, 0)

    quote = quote_upgrade(user, target_plan, now=now, prices=prices)
    amount = quote.pricing.final_amount
    if amount <= 0:
        raise PaymentNotRequiredError(target_plan, amount)

    payment = models.Payment(
        user_id=user.id,
        order_id=f"order_{uuid.uuid4().hex[:20]}",
        receipt=generate_receipt(now),
        plan=target_plan,
        amount=amount,
        original_price=quote.pricing.original_price,
        unused_credit=quote.pricing.unused_credit,
        currency=currency,
        status="pending",
    )
    user.pending_plan = target_plan
    db.add(payment)
    db.add(user)
    db.commit()
    db.refresh(payment)

    logger.info(
        "upgrade_order_created",
        user_id=str(user.id),
        order_id=payment.order_id,
        plan=target_plan,
        amount=amount,
    )
    return payment, quote


def _get_order(db: Session, order_id: str) -> models.Payment:
    payment = db.query(models.Payment).filter(models.Payment.order_id == order_id).first()
    if not payment:
        raise OrderNotFoundError(order_id)
    return payment


def complete_upgrade_order(
    db: Session,
    order_id: str,
    payment_id: str,
    *,
    now: datetime,
) -> models.Payment:
    """Mark the order paid and move its user onto a fresh yearly cycle of the plan.

    Completing an order that is already paid returns it unchanged.
    """
    payment = _get_order(db, order_id)
    if payment.status == "success":
        logger.info("upgrade_order_already_completed", order_id=order_id)
        return payment
    if payment.status != "pending":
        raise OrderStateError(order_id, payment.status)

    # Stored naive, in UTC.
    started = as_utc(now).replace(tzinfo=None)
    user = payment.user
    user.plan = payment.plan
    user.pending_plan = None
    user.plan_start_date = started
    user.plan_expires_at = started + timedelta(days=DEFAULT_CYCLE_DAYS)
    payment.payment_id = payment_id
    payment.status = "success"
    db.add(user)
    db.add(payment)
    db.commit()
    db.refresh(payment)

    logger.info(
        "upgrade_order_completed",
        user_id=str(user.id),
        order_id=order_id,
        plan=payment.plan,
        plan_expires_at=user.plan_expires_at.isoformat(),
    )
    return payment


def fail_upgrade_order(db: Session, order_id: str, payment_id: str | None = None) -> models.Payment:
    payment = _get_order(db, order_id)
    if payment.status == "failed":
        return payment
    if payment.status != "pending":
        raise OrderStateError(order_id, payment.status)

    user = payment.user
    if user.pending_plan == payment.plan:
        user.pending_plan = None
    payment.payment_id = payment_id or payment.payment_id
    payment.status = "failed"
    db.add(user)
    db.add(payment)
    db.commit()
    db.refresh(payment)

    logger.warning("upgrade_order_failed", user_id=str(user.id), order_id=order_id, plan=payment.plan)
    return payment


__all__ = [
    "UpgradeQuote",
    "complete_upgrade_order",
    "create_upgrade_order",
    "fail_upgrade_order",
    "generate_receipt",
    "get_user",
    "quote_upgrade",
]
