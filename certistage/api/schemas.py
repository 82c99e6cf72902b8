"""Pydantic schemas for API requests and responses."""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class PlanSummary(BaseModel):
    id: str
    name: str
    price: int
    display_price: str
    description: str
    max_events: int
    max_certificate_types: int
    max_certificates: int
    can_import_data: bool
    can_export_report: bool


class UpgradeRequest(BaseModel):
    user_id: uuid.UUID
    plan: str


class ProRataBreakdown(BaseModel):
    original_price: int
    unused_credit: int
    final_amount: int
    days_remaining: int
    total_days: int
    savings: int
    savings_percent: int


class ProRataResponse(BaseModel):
    current_plan: str
    target_plan: str
    eligible: bool
    fallback_reason: str | None = None
    pro_rata: ProRataBreakdown
    display_amount: str


class OrderResponse(BaseModel):
    order_id: str
    receipt: str
    plan: str
    amount: int
    currency: str
    status: str
    created_at: datetime
    pro_rata: ProRataBreakdown


class CompleteOrderRequest(BaseModel):
    payment_id: str = Field(min_length=1)


class FailOrderRequest(BaseModel):
    payment_id: str | None = None


class SettledOrderResponse(BaseModel):
    order_id: str
    payment_id: str | None = None
    plan: str
    amount: int
    currency: str
    status: str
    user_plan: str
    plan_start_date: datetime | None = None
    plan_expires_at: datetime | None = None
