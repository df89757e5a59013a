"""Pricing plans, subscriptions and payment records."""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Query

from portfolio_cms.api.auth import AdminUser, CurrentUser
from portfolio_cms.api.deps import DbSession, Pagination
from portfolio_cms.api.schemas.common import MessageResponse, Paginated, page_of
from portfolio_cms.api.schemas.pricing import (
    CancelRequest,
    PaymentCreate,
    PaymentRead,
    PlanCreate,
    PlanRead,
    PlanUpdate,
    RefundRequest,
    SubscriptionCreate,
    SubscriptionRead,
)
from portfolio_cms.core.enums import PaymentStatus
from portfolio_cms.services.pricing import (
    PaymentService,
    PricingPlanService,
    SubscriptionService,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pricing", tags=["Pricing"])


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------
@router.get("/plans", response_model=list[PlanRead])
async def list_active_plans(session: DbSession):
    return await PricingPlanService(session).active_plans()


@router.get("/plans/all", response_model=Paginated[PlanRead])
async def list_all_plans(admin: AdminUser, session: DbSession, params: Pagination):
    result = await PricingPlanService(session).list(
        search=params.search, page=params.page, size=params.size
    )
    return page_of(PlanRead, result)


@router.post("/plans", response_model=PlanRead, status_code=201)
async def create_plan(body: PlanCreate, admin: AdminUser, session: DbSession):
    plan = await PricingPlanService(session).create(body.model_dump())
    logger.info("Pricing plan %s created by %s", plan.name, admin.id)
    return plan


@router.get("/plans/{plan_id}", response_model=PlanRead)
async def get_plan(plan_id: str, session: DbSession):
    return await PricingPlanService(session).get(plan_id)


@router.patch("/plans/{plan_id}", response_model=PlanRead)
async def update_plan(
    plan_id: str, body: PlanUpdate, admin: AdminUser, session: DbSession
):
    service = PricingPlanService(session)
    return await service.update(
        await service.get(plan_id), body.model_dump(exclude_unset=True)
    )


@router.delete("/plans/{plan_id}", response_model=MessageResponse)
async def delete_plan(plan_id: str, admin: AdminUser, session: DbSession):
    service = PricingPlanService(session)
    await service.soft_delete(await service.get(plan_id))
    return MessageResponse(message="Pricing plan deleted successfully")


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------
@router.post("/subscriptions", response_model=SubscriptionRead, status_code=201)
async def subscribe(body: SubscriptionCreate, user: CurrentUser, session: DbSession):
    data = body.model_dump()
    return await SubscriptionService(session).subscribe(
        user.id, data.pop("plan_id"), **data
    )


@router.get("/subscriptions", response_model=Paginated[SubscriptionRead])
async def list_subscriptions(user: CurrentUser, session: DbSession, params: Pagination):
    result = await SubscriptionService(session).list_for_user(
        user.id, page=params.page, size=params.size
    )
    return page_of(SubscriptionRead, result)


@router.get("/subscriptions/current", response_model=Optional[SubscriptionRead])
async def current_subscription(user: CurrentUser, session: DbSession):
    return await SubscriptionService(session).current_for_user(user.id)


@router.post("/subscriptions/{subscription_id}/renew", response_model=SubscriptionRead)
async def renew_subscription(
    subscription_id: str, user: CurrentUser, session: DbSession
):
    service = SubscriptionService(session)
    return await service.renew(await service.get_owned(subscription_id, user))


@router.post("/subscriptions/{subscription_id}/cancel", response_model=SubscriptionRead)
async def cancel_subscription(
    subscription_id: str,
    user: CurrentUser,
    session: DbSession,
    body: Optional[CancelRequest] = Body(None),
):
    service = SubscriptionService(session)
    subscription = await service.get_owned(subscription_id, user)
    return await service.cancel(subscription, body.reason if body else None)


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
@router.post("/payments", response_model=PaymentRead, status_code=201)
async def record_payment(body: PaymentCreate, user: CurrentUser, session: DbSession):
    return await PaymentService(session).record(user.id, body.model_dump())


@router.get("/payments", response_model=Paginated[PaymentRead])
async def list_payments(
    user: CurrentUser,
    session: DbSession,
    params: Pagination,
    status: Optional[PaymentStatus] = Query(None),
):
    result = await PaymentService(session).list_for_user(
        user.id,
        status=status.value if status else None,
        page=params.page,
        size=params.size,
    )
    return page_of(PaymentRead, result)


@router.post("/payments/{payment_id}/refund", response_model=PaymentRead)
async def refund_payment(
    payment_id: str,
    admin: AdminUser,
    session: DbSession,
    body: Optional[RefundRequest] = Body(None),
):
    service = PaymentService(session)
    payment = await service.refund(
        await service.get(payment_id),
        amount=body.amount if body else None,
        reason=body.reason if body else None,
    )
    logger.info("Payment %s refunded by %s", payment.id, admin.id)
    return payment
