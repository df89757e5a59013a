"""Request/response schemas for plans, subscriptions and payments."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from portfolio_cms.api.schemas.common import ORMModel, Schema
from portfolio_cms.core.enums import (
    BillingInterval,
    PaymentMethod,
    PaymentStatus,
    PlanTier,
)


class PlanCreate(Schema):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    billing_interval: BillingInterval = BillingInterval.MONTH
    trial_period_days: int = Field(0, ge=0, le=365)
    features: list[str] = Field(default_factory=list)
    limits: Optional[dict[str, Any]] = None
    tier: PlanTier = PlanTier.BASIC
    sort_order: int = 0
    is_active: bool = True
    is_featured: bool = False


class PlanUpdate(Schema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    billing_interval: Optional[BillingInterval] = None
    trial_period_days: Optional[int] = Field(None, ge=0, le=365)
    features: Optional[list[str]] = None
    limits: Optional[dict[str, Any]] = None
    tier: Optional[PlanTier] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None


class PlanRead(ORMModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    currency: str
    billing_interval: str
    trial_period_days: int
    features: list[str] = Field(default_factory=list)
    limits: Optional[dict[str, Any]] = None
    tier: str
    sort_order: int
    is_active: bool
    is_featured: bool


class SubscriptionCreate(Schema):
    plan_id: str
    auto_renew: bool = True
    payment_provider: Optional[str] = Field(None, max_length=50)
    external_subscription_id: Optional[str] = Field(None, max_length=255)
    metadata_json: Optional[dict[str, Any]] = None


class CancelRequest(Schema):
    reason: Optional[str] = Field(None, max_length=1000)


class SubscriptionRead(ORMModel):
    id: str
    user_id: str
    plan_id: str
    status: str
    start_date: datetime
    end_date: Optional[datetime] = None
    trial_end_date: Optional[datetime] = None
    canceled_at: Optional[datetime] = None
    current_period_start: datetime
    current_period_end: datetime
    auto_renew: bool
    cancellation_reason: Optional[str] = None
    payment_provider: Optional[str] = None
    created_at: datetime


class PaymentCreate(Schema):
    amount: float = Field(..., gt=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    payment_method: PaymentMethod = PaymentMethod.CARD
    status: PaymentStatus = PaymentStatus.PENDING
    description: Optional[str] = Field(None, max_length=500)
    subscription_id: Optional[str] = None
    external_payment_id: Optional[str] = Field(None, max_length=255)
    receipt_url: Optional[str] = Field(None, max_length=500)
    metadata_json: Optional[dict[str, Any]] = None


class RefundRequest(Schema):
    amount: Optional[float] = Field(None, gt=0)
    reason: Optional[str] = Field(None, max_length=1000)


class PaymentRead(ORMModel):
    id: str
    user_id: str
    subscription_id: Optional[str] = None
    amount: float
    currency: str
    status: str
    payment_method: str
    description: Optional[str] = None
    receipt_url: Optional[str] = None
    refund_amount: Optional[float] = None
    refund_reason: Optional[str] = None
    refunded_at: Optional[datetime] = None
    created_at: datetime
