"""Plan catalog, pro-rata quotes and upgrade orders."""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from certistage.api import schemas
from certistage.api.dependencies.billing import get_clock, get_price_table
from certistage.api.dependencies.database import get_db
from certistage.core.errors import (
    InvalidPlanError,
    OrderNotFoundError,
    OrderStateError,
    PaymentNotRequiredError,
    UserNotFoundError,
)
from certistage.core import models
from certistage.core.plans import PLAN_ORDER, PlanId, get_plan_details
from certistage.core.pricing import ProRataResult, format_amount
from certistage.core.rate_limiter import get_limiter
from certistage.core.settings import get_settings
from certistage.services import upgrades

router = APIRouter(prefix="/api/v1", tags=["billing"])
settings = get_settings()
limiter = get_limiter()


def _breakdown(pricing: ProRataResult) -> schemas.ProRataBreakdown:
    return schemas.ProRataBreakdown(**pricing.as_dict())


def _invalid_plan() -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid plan selected")


def _user_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


@router.get("/plans", response_model=list[schemas.PlanSummary])
def list_plans(prices: dict[PlanId, int] = Depends(get_price_table)) -> list[schemas.PlanSummary]:
    summaries = []
    for plan in PLAN_ORDER:
        details = get_plan_details(plan)
        summaries.append(
            schemas.PlanSummary(
                id=details.id,
                name=details.name,
                price=prices[plan],
                display_price=format_amount(prices[plan]),
                description=details.description,
                max_events=details.max_events,
                max_certificate_types=details.max_certificate_types,
                max_certificates=details.max_certificates,
                can_import_data=details.can_import_data,
                can_export_report=details.can_export_report,
            )
        )
    return summaries


@router.post("/billing/pro-rata", response_model=schemas.ProRataResponse)
def calculate_pro_rata(
    payload: schemas.UpgradeRequest,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_clock),
    prices: dict[PlanId, int] = Depends(get_price_table),
) -> schemas.ProRataResponse:
    try:
        user = upgrades.get_user(db, payload.user_id)
        quote = upgrades.quote_upgrade(user, payload.plan, now=now, prices=prices)
    except InvalidPlanError:
        raise _invalid_plan() from None
    except UserNotFoundError:
        raise _user_not_found() from None

    return schemas.ProRataResponse(
        current_plan=quote.current_plan,
        target_plan=quote.target_plan,
        eligible=quote.eligible,
        fallback_reason=quote.fallback_reason,
        pro_rata=_breakdown(quote.pricing),
        display_amount=format_amount(quote.pricing.final_amount),
    )


@router.post("/billing/orders", response_model=schemas.OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(lambda: get_settings().payment_rate_limit)
def create_order(
    request: Request,
    payload: schemas.UpgradeRequest,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_clock),
    prices: dict[PlanId, int] = Depends(get_price_table),
) -> schemas.OrderResponse:
    try:
        user = upgrades.get_user(db, payload.user_id)
        payment, quote = upgrades.create_upgrade_order(
            db, user, payload.plan, now=now, prices=prices, currency=settings.currency
        )
    except InvalidPlanError:
        raise _invalid_plan() from None
    except UserNotFoundError:
        raise _user_not_found() from None
    except PaymentNotRequiredError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from None

    return schemas.OrderResponse(
        order_id=payment.order_id,
        receipt=payment.receipt,
        plan=payment.plan,
        amount=payment.amount,
        currency=payment.currency,
        status=payment.status,
        created_at=payment.created_at,
        pro_rata=_breakdown(quote.pricing),
    )


def _settled(payment: models.Payment) -> schemas.SettledOrderResponse:
    user = payment.user
    return schemas.SettledOrderResponse(
        order_id=payment.order_id,
        payment_id=payment.payment_id,
        plan=payment.plan,
        amount=payment.amount,
        currency=payment.currency,
        status=payment.status,
        user_plan=user.plan,
        plan_start_date=user.plan_start_date,
        plan_expires_at=user.plan_expires_at,
    )


@router.post("/billing/orders/{order_id}/complete", response_model=schemas.SettledOrderResponse)
def complete_order(
    order_id: str,
    payload: schemas.CompleteOrderRequest,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_clock),
) -> schemas.SettledOrderResponse:
    try:
        payment = upgrades.complete_upgrade_order(db, order_id, payload.payment_id, now=now)
    except OrderNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found") from None
    except OrderStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from None
    return _settled(payment)


@router.post("/billing/orders/{order_id}/fail", response_model=schemas.SettledOrderResponse)
def fail_order(
    order_id: str,
    payload: schemas.FailOrderRequest,
    db: Session = Depends(get_db),
) -> schemas.SettledOrderResponse:
    try:
        payment = upgrades.fail_upgrade_order(db, order_id, payload.payment_id)
    except OrderNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found") from None
    except OrderStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from None
    return _settled(payment)


__all__ = ["router"]
