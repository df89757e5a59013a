"""Tests for pricing plans, subscriptions and payments."""

from __future__ import annotations

from datetime import datetime

import pytest

from portfolio_cms.core.exceptions import ConflictError, NotFoundError, ValidationError
from portfolio_cms.services.pricing import (
    PaymentService,
    PricingPlanService,
    SubscriptionService,
    period_end,
)


async def _plan(session, **extra):
    data = {"name": "Pro", "price": 12.5, "billing_interval": "month", **extra}
    return await PricingPlanService(session).create(data)


@pytest.mark.parametrize(
    "interval, expected",
    [
        ("month", datetime(2024, 2, 29)),
        ("year", datetime(2025, 1, 31)),
        ("one_time", datetime(2124, 1, 31)),
    ],
)
def test_period_end(interval, expected):
    assert period_end(datetime(2024, 1, 31), interval) == expected


@pytest.mark.asyncio
async def test_active_plans_sorted(session):
    await _plan(session, name="Team", price=40, sort_order=2)
    await _plan(session, name="Starter", price=5, sort_order=1)
    await _plan(session, name="Legacy", is_active=False)
    plans = await PricingPlanService(session).active_plans()
    assert [p.name for p in plans] == ["Starter", "Team"]


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_subscribe_without_trial(session, user):
    plan = await _plan(session)
    sub = await SubscriptionService(session).subscribe(user.id, plan.id)
    assert sub.status == "active"
    assert sub.trial_end_date is None
    assert sub.end_date is None
    assert sub.current_period_end > sub.current_period_start


@pytest.mark.asyncio
async def test_subscribe_with_trial(session, user):
    plan = await _plan(session, trial_period_days=14)
    sub = await SubscriptionService(session).subscribe(user.id, plan.id)
    assert sub.status == "trialing"
    assert (sub.trial_end_date - sub.start_date).days == 14


@pytest.mark.asyncio
async def test_one_time_plan_sets_end_date(session, user):
    plan = await _plan(session, billing_interval="one_time")
    sub = await SubscriptionService(session).subscribe(user.id, plan.id)
    assert sub.end_date == sub.current_period_end
    assert sub.end_date.year == sub.start_date.year + 100


@pytest.mark.asyncio
async def test_subscribe_rejects_duplicates_and_inactive_plans(session, user):
    service = SubscriptionService(session)
    plan = await _plan(session)
    await service.subscribe(user.id, plan.id)
    with pytest.raises(ConflictError):
        await service.subscribe(user.id, plan.id)

    retired = await _plan(session, name="Old", is_active=False)
    with pytest.raises(ValidationError, match="not active"):
        await service.subscribe(user.id, retired.id)
    with pytest.raises(NotFoundError):
        await service.subscribe("missing-user", plan.id)


@pytest.mark.asyncio
async def test_renew_extends_period_and_records_payment(session, user):
    plan = await _plan(session)
    service = SubscriptionService(session)
    sub = await service.subscribe(user.id, plan.id)
    old_end = sub.current_period_end

    sub = await service.renew(sub)
    assert sub.current_period_start == old_end
    assert sub.current_period_end > old_end

    payments = await PaymentService(session).list_for_user(user.id)
    assert payments.total == 1
    payment = payments.items[0]
    assert payment.status == "succeeded"
    assert payment.amount == 12.5
    assert payment.subscription_id == sub.id


@pytest.mark.asyncio
async def test_cancel(session, user):
    plan = await _plan(session)
    service = SubscriptionService(session)
    sub = await service.subscribe(user.id, plan.id)

    sub = await service.cancel(sub, reason="Too expensive")
    assert sub.status == "canceled"
    assert sub.auto_renew is False
    assert sub.cancellation_reason == "Too expensive"
    assert await service.current_for_user(user.id) is None

    with pytest.raises(ValidationError, match="already canceled"):
        await service.cancel(sub)
    with pytest.raises(ValidationError):
        await service.renew(sub)

    # A canceled subscription no longer blocks a new one
    again = await service.subscribe(user.id, plan.id)
    assert (await service.current_for_user(user.id)).id == again.id
    assert (await service.list_for_user(user.id)).total == 2


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_record_payment_checks_subscription_owner(session, user, other_user):
    plan = await _plan(session)
    sub = await SubscriptionService(session).subscribe(other_user.id, plan.id)
    service = PaymentService(session)
    with pytest.raises(ValidationError, match="another user"):
        await service.record(user.id, {"amount": 10, "subscription_id": sub.id})

    payment = await service.record(user.id, {"amount": 10})
    assert payment.status == "pending"


@pytest.mark.asyncio
async def test_refund_rules(session, user):
    service = PaymentService(session)
    pending = await service.record(user.id, {"amount": 20})
    with pytest.raises(ValidationError, match="Only succeeded"):
        await service.refund(pending)

    paid = await service.record(user.id, {"amount": 20, "status": "succeeded"})
    with pytest.raises(ValidationError):
        await service.refund(paid, amount=25)
    with pytest.raises(ValidationError):
        await service.refund(paid, amount=0)

    refunded = await service.refund(paid, amount=5, reason="Partial")
    assert refunded.status == "refunded"
    assert refunded.refund_amount == 5
    assert refunded.refund_reason == "Partial"

    full = await service.record(user.id, {"amount": 8, "status": "succeeded"})
    assert (await service.refund(full)).refund_amount == 8
