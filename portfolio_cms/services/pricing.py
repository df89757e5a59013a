"""Pricing plans, subscription lifecycle and payment records.

Subscription periods:
- month: start + 1 calendar month
- year: start + 12 calendar months
- one_time: start + 100 years, with ``end_date`` fixed to that horizon

A plan with ``trial_period_days > 0`` starts the subscription in
``trialing`` with ``trial_end_date = start + trial days``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import select

from portfolio_cms.core.enums import (
    BillingInterval,
    PaymentMethod,
    PaymentStatus,
    SubscriptionStatus,
)
from portfolio_cms.core.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from portfolio_cms.core.models import Payment, PricingPlan, Subscription, User
from portfolio_cms.core.utils.text import add_months
from portfolio_cms.services.base import DEFAULT_PAGE_SIZE, BaseService, Page

LIVE_STATUSES = (SubscriptionStatus.ACTIVE.value, SubscriptionStatus.TRIALING.value)
ONE_TIME_YEARS = 100


def period_end(start: datetime, interval: str) -> datetime:
    if interval == BillingInterval.YEAR.value:
        return add_months(start, 12)
    if interval == BillingInterval.ONE_TIME.value:
        return add_months(start, 12 * ONE_TIME_YEARS)
    return add_months(start, 1)


class PricingPlanService(BaseService[PricingPlan]):
    model = PricingPlan
    label = "Pricing plan"
    search_fields = ("name", "description")

    def default_order(self) -> list[Any]:
        return [PricingPlan.sort_order, PricingPlan.price]

    async def active_plans(self) -> list[PricingPlan]:
        stmt = (
            self.base_query()
            .where(PricingPlan.is_active.is_(True))
            .order_by(*self.default_order())
        )
        return list((await self.session.execute(stmt)).scalars().all())


class SubscriptionService(BaseService[Subscription]):
    model = Subscription
    label = "Subscription"

    async def subscribe(
        self,
        user_id: str,
        plan_id: str,
        *,
        auto_renew: bool = True,
        payment_provider: Optional[str] = None,
        external_subscription_id: Optional[str] = None,
        metadata_json: Optional[dict[str, Any]] = None,
    ) -> Subscription:
        if await self.session.get(User, user_id) is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        plan = await PricingPlanService(self.session).get(plan_id)
        if not plan.is_active:
            raise ValidationError("Plan is not active")

        existing = await self.session.execute(
            select(Subscription.id).where(
                Subscription.user_id == user_id,
                Subscription.plan_id == plan_id,
                Subscription.status.in_(LIVE_STATUSES),
            )
        )
        if existing.first() is not None:
            raise ConflictError("User already has an active subscription to this plan")

        start = datetime.now(timezone.utc)
        end = period_end(start, plan.billing_interval)
        subscription = Subscription(
            user_id=user_id,
            plan_id=plan.id,
            start_date=start,
            current_period_start=start,
            current_period_end=end,
            end_date=end if plan.billing_interval == BillingInterval.ONE_TIME.value else None,
            auto_renew=auto_renew,
            payment_provider=payment_provider,
            external_subscription_id=external_subscription_id,
            metadata_json=metadata_json,
        )
        if plan.trial_period_days:
            subscription.trial_end_date = start + timedelta(days=plan.trial_period_days)
            subscription.status = SubscriptionStatus.TRIALING.value
        else:
            subscription.status = SubscriptionStatus.ACTIVE.value

        subscription = await self.save(subscription)
        self.log.info(
            "subscription_created",
            subscription_id=subscription.id,
            plan=plan.name,
            status=subscription.status,
        )
        return subscription

    async def renew(self, subscription: Subscription) -> Subscription:
        if subscription.status not in LIVE_STATUSES:
            raise ValidationError("Only active or trialing subscriptions can be renewed")
        if not subscription.auto_renew:
            raise ValidationError("Auto-renew is disabled for this subscription")
        plan = await PricingPlanService(self.session).get(subscription.plan_id)
        if not plan.is_active:
            raise ValidationError("Plan is no longer active")

        start = subscription.current_period_end
        subscription.current_period_start = start
        subscription.current_period_end = period_end(start, plan.billing_interval)
        subscription.status = SubscriptionStatus.ACTIVE.value
        self.session.add(
            Payment(
                user_id=subscription.user_id,
                subscription_id=subscription.id,
                amount=plan.price,
                currency=plan.currency,
                status=PaymentStatus.SUCCEEDED.value,
                payment_method=PaymentMethod.CARD.value,
                description=f"Subscription renewal for {plan.name} plan",
            )
        )
        subscription = await self.save(subscription)
        self.log.info("subscription_renewed", subscription_id=subscription.id)
        return subscription

    async def cancel(
        self, subscription: Subscription, reason: Optional[str] = None
    ) -> Subscription:
        if subscription.status == SubscriptionStatus.CANCELED.value:
            raise ValidationError("Subscription is already canceled")
        subscription.status = SubscriptionStatus.CANCELED.value
        subscription.canceled_at = datetime.now(timezone.utc)
        subscription.cancellation_reason = reason
        subscription.auto_renew = False
        subscription = await self.save(subscription)
        self.log.info("subscription_canceled", subscription_id=subscription.id)
        return subscription

    async def current_for_user(self, user_id: str) -> Optional[Subscription]:
        stmt = (
            select(Subscription)
            .where(
                Subscription.user_id == user_id,
                Subscription.status.in_(LIVE_STATUSES),
            )
            .order_by(Subscription.created_at.desc())
            .limit(1)
        )
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def list_for_user(
        self, user_id: str, page: int = 1, size: int = DEFAULT_PAGE_SIZE
    ) -> Page[Subscription]:
        return await self.list(filters={"user_id": user_id}, page=page, size=size)


class PaymentService(BaseService[Payment]):
    model = Payment
    label = "Payment"
    search_fields = ("description",)

    async def record(self, user_id: str, data: dict[str, Any]) -> Payment:
        if data.get("subscription_id"):
            subscription = await SubscriptionService(self.session).get(
                data["subscription_id"]
            )
            if subscription.user_id != user_id:
                raise ValidationError("Subscription belongs to another user")
        return await self.create(data, user_id=user_id)

    async def list_for_user(
        self,
        user_id: str,
        *,
        status: str | None = None,
        page: int = 1,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> Page[Payment]:
        return await self.list(
            filters={"user_id": user_id, "status": status}, page=page, size=size
        )

    async def refund(
        self,
        payment: Payment,
        amount: Optional[float] = None,
        reason: Optional[str] = None,
    ) -> Payment:
        if payment.status != PaymentStatus.SUCCEEDED.value:
            raise ValidationError("Only succeeded payments can be refunded")
        refund_amount = payment.amount if amount is None else amount
        if refund_amount <= 0 or refund_amount > payment.amount:
            raise ValidationError("Refund amount must be positive and not exceed the payment")
        payment.status = PaymentStatus.REFUNDED.value
        payment.refund_amount = refund_amount
        payment.refund_reason = reason
        payment.refunded_at = datetime.now(timezone.utc)
        payment = await self.save(payment)
        self.log.info("payment_refunded", payment_id=payment.id, amount=refund_amount)
        return payment
