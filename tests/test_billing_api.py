"""HTTP surface for plans, pro-rata quotes and upgrade orders."""
from __future__ import annotations

import uuid
from datetime import datetime

from certistage.api.dependencies.billing import get_price_table
from certistage.core import models
from certistage.core.plans import build_price_table
from certistage.core.rate_limiter import get_limiter
from certistage.core.settings import get_settings

START = datetime(2024, 1, 1)
EXPIRES = datetime(2025, 1, 1)


def test_list_plans_returns_catalog_in_price_order(client):
    response = client.get("/api/v1/plans")
    assert response.status_code == 200, response.text
    plans = response.json()
    assert [plan["id"] for plan in plans] == ["free", "professional", "enterprise", "premium"]
    premium = plans[-1]
    assert premium["price"] == 1199900
    assert premium["display_price"] == "₹11,999"
    assert premium["max_certificates"] == 50000


def test_list_plans_uses_configured_prices(app, client):
    app.dependency_overrides[get_price_table] = lambda: build_price_table({"professional": 299900})
    try:
        response = client.get("/api/v1/plans")
    finally:
        app.dependency_overrides.pop(get_price_table)
    assert response.status_code == 200
    professional = response.json()[1]
    assert professional["price"] == 299900
    assert professional["display_price"] == "₹2,999"


def test_pro_rata_quote_for_mid_cycle_upgrade(client, make_user):
    user = make_user("professional", START, EXPIRES)

    response = client.post("/api/v1/billing/pro-rata", json={"user_id": str(user.id), "plan": "premium"})

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["current_plan"] == "professional"
    assert body["eligible"] is True
    assert body["fallback_reason"] is None
    assert body["pro_rata"] == {
        "original_price": 1199900,
        "unused_credit": 251316,
        "final_amount": 948584,
        "days_remaining": 184,
        "total_days": 366,
        "savings": 251316,
        "savings_percent": 21,
    }
    assert body["display_amount"] == "₹9,485.84"


def test_pro_rata_quote_for_free_user_is_full_price(client, make_user):
    user = make_user()

    response = client.post("/api/v1/billing/pro-rata", json={"user_id": str(user.id), "plan": "enterprise"})

    assert response.status_code == 200
    body = response.json()
    assert body["eligible"] is False
    assert body["pro_rata"]["final_amount"] == 699900
    assert body["pro_rata"]["unused_credit"] == 0


def test_pro_rata_quote_falls_back_for_corrupted_period(client, make_user):
    user = make_user("enterprise", EXPIRES, START)

    response = client.post("/api/v1/billing/pro-rata", json={"user_id": str(user.id), "plan": "premium"})

    assert response.status_code == 200
    body = response.json()
    assert body["fallback_reason"] == "invalid_period"
    assert body["pro_rata"]["final_amount"] == 1199900


def test_pro_rata_rejects_invalid_plan(client, make_user):
    user = make_user("professional", START, EXPIRES)

    response = client.post("/api/v1/billing/pro-rata", json={"user_id": str(user.id), "plan": "gold"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid plan selected"


def test_pro_rata_unknown_user(client):
    response = client.post("/api/v1/billing/pro-rata", json={"user_id": str(uuid.uuid4()), "plan": "premium"})
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_pro_rata_requires_user_id(client):
    response = client.post("/api/v1/billing/pro-rata", json={"plan": "premium"})
    assert response.status_code == 422


def test_create_order_charges_pro_rata_amount(client, db, make_user):
    user = make_user("professional", START, EXPIRES)

    response = client.post("/api/v1/billing/orders", json={"user_id": str(user.id), "plan": "premium"})

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["amount"] == 948584
    assert body["currency"] == "INR"
    assert body["status"] == "pending"
    assert body["order_id"].startswith("order_")
    assert body["receipt"].startswith("rcpt_")

    payment = db.query(models.Payment).filter(models.Payment.order_id == body["order_id"]).one()
    assert payment.user_id == user.id
    assert payment.amount == 948584


def test_create_order_rejects_free_plan(client, make_user):
    user = make_user()

    response = client.post("/api/v1/billing/orders", json={"user_id": str(user.id), "plan": "free"})

    assert response.status_code == 400
    assert "does not require payment" in response.json()["detail"]


def test_create_order_rejects_invalid_plan_and_unknown_user(client, make_user):
    user = make_user()
    invalid = client.post("/api/v1/billing/orders", json={"user_id": str(user.id), "plan": "gold"})
    assert invalid.status_code == 400
    assert invalid.json()["detail"] == "Invalid plan selected"

    missing = client.post("/api/v1/billing/orders", json={"user_id": str(uuid.uuid4()), "plan": "premium"})
    assert missing.status_code == 404


def _order(client, user, plan="premium", **kwargs):
    return client.post("/api/v1/billing/orders", json={"user_id": str(user.id), "plan": plan}, **kwargs)


def test_complete_order_applies_plan_and_new_cycle(client, make_user):
    user = make_user("professional", START, EXPIRES)
    order_id = _order(client, user).json()["order_id"]

    response = client.post(f"/api/v1/billing/orders/{order_id}/complete", json={"payment_id": "pay_001"})

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["status"] == "success"
    assert body["payment_id"] == "pay_001"
    assert body["user_plan"] == "premium"
    assert body["plan_start_date"].startswith("2024-07-01")
    assert body["plan_expires_at"].startswith("2025-07-01")

    repeat = client.post(f"/api/v1/billing/orders/{order_id}/complete", json={"payment_id": "pay_002"})
    assert repeat.status_code == 200
    assert repeat.json()["payment_id"] == "pay_001"


def test_complete_order_unknown_and_failed(client, make_user):
    missing = client.post("/api/v1/billing/orders/order_missing/complete", json={"payment_id": "pay_x"})
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Order not found"

    user = make_user("professional", START, EXPIRES)
    order_id = _order(client, user, "enterprise").json()["order_id"]
    failed = client.post(f"/api/v1/billing/orders/{order_id}/fail", json={"payment_id": "pay_declined"})
    assert failed.status_code == 200
    assert failed.json()["status"] == "failed"
    assert failed.json()["user_plan"] == "professional"

    late = client.post(f"/api/v1/billing/orders/{order_id}/complete", json={"payment_id": "pay_late"})
    assert late.status_code == 409


def test_complete_order_requires_payment_id(client):
    response = client.post("/api/v1/billing/orders/order_any/complete", json={"payment_id": ""})
    assert response.status_code == 422


def test_order_creation_is_limited_per_client(client, make_user, monkeypatch):
    monkeypatch.setattr(get_settings(), "payment_rate_limit", "3/hour")
    limiter = get_limiter()
    limiter.reset()
    user = make_user("professional", START, EXPIRES)
    headers = {"X-Forwarded-For": f"198.51.100.{uuid.uuid4().int % 250 + 1}"}

    try:
        responses = [_order(client, user, headers=headers) for _ in range(4)]
    finally:
        limiter.reset()

    assert [r.status_code for r in responses] == [201, 201, 201, 429]
    blocked = responses[-1]
    assert blocked.json()["detail"] == "Too many requests"
    assert blocked.headers["Retry-After"] == "3600"
