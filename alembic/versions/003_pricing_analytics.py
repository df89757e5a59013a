"""create pricing_plans, subscriptions, payments, page_views and visitors

Revision ID: c3e5a7b9d125
Revises: b2d4f6a8c013
Create Date: 2026-10-14

"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "c3e5a7b9d125"
down_revision: Union[str, None] = "b2d4f6a8c013"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _fk(column: str, table: str, target: str, ondelete: str, nullable: bool) -> sa.Column:
    return sa.Column(
        column,
        sa.String(36),
        sa.ForeignKey(
            f"{target}.id", ondelete=ondelete, name=f"fk_{table}_{column}_{target}"
        ),
        nullable=nullable,
    )


def upgrade() -> None:
    # ── 1. pricing_plans ─────────────────────────────────────────────────
    op.create_table(
        "pricing_plans",
        sa.Column("id", sa.String(36), nullable=False),
        *_timestamps(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("billing_interval", sa.String(20), nullable=False),
        sa.Column("trial_period_days", sa.Integer(), nullable=False),
        sa.Column("features", sa.JSON(), nullable=False),
        sa.Column("limits", sa.JSON(), nullable=True),
        sa.Column("tier", sa.String(20), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_featured", sa.Boolean(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_pricing_plans"),
    )
    op.create_index("ix_pricing_plans_deleted_at", "pricing_plans", ["deleted_at"])

    # ── 2. subscriptions ─────────────────────────────────────────────────
    op.create_table(
        "subscriptions",
        sa.Column("id", sa.String(36), nullable=False),
        *_timestamps(),
        _fk("user_id", "subscriptions", "users", "CASCADE", nullable=False),
        _fk("plan_id", "subscriptions", "pricing_plans", "RESTRICT", nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("trial_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("canceled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("current_period_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("auto_renew", sa.Boolean(), nullable=False),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("payment_provider", sa.String(50), nullable=True),
        sa.Column("external_subscription_id", sa.String(255), nullable=True),
        sa.Column("metadata_json", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_subscriptions"),
    )
    op.create_index("ix_subscriptions_user_id", "subscriptions", ["user_id"])
    op.create_index("ix_subscriptions_status", "subscriptions", ["status"])

    # ── 3. payments (bookkeeping only) ───────────────────────────────────
    op.create_table(
        "payments",
        sa.Column("id", sa.String(36), nullable=False),
        *_timestamps(),
        _fk("user_id", "payments", "users", "CASCADE", nullable=False),
        _fk("subscription_id", "payments", "subscriptions", "SET NULL", nullable=True),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("payment_method", sa.String(20), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("external_payment_id", sa.String(255), nullable=True),
        sa.Column("receipt_url", sa.String(500), nullable=True),
        sa.Column("refund_amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("refund_reason", sa.Text(), nullable=True),
        sa.Column("refunded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("metadata_json", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_payments"),
    )
    op.create_index("ix_payments_user_id", "payments", ["user_id"])
    op.create_index("ix_payments_subscription_id", "payments", ["subscription_id"])

    # ── 4. page_views ────────────────────────────────────────────────────
    op.create_table(
        "page_views",
        sa.Column("id", sa.String(36), nullable=False),
        *_timestamps(),
        _fk("portfolio_id", "page_views", "portfolios", "CASCADE", nullable=False),
        _fk("user_id", "page_views", "users", "CASCADE", nullable=False),
        sa.Column("visitor_id", sa.String(64), nullable=False),
        sa.Column("session_id", sa.String(64), nullable=False),
        sa.Column("page_path", sa.String(500), nullable=False),
        sa.Column("page_title", sa.String(255), nullable=True),
        sa.Column("referrer", sa.String(1000), nullable=True),
        sa.Column("referrer_domain", sa.String(255), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("device_type", sa.String(20), nullable=False),
        sa.Column("browser", sa.String(50), nullable=True),
        sa.Column("operating_system", sa.String(50), nullable=True),
        sa.Column("language", sa.String(20), nullable=True),
        sa.Column("time_on_page", sa.Integer(), nullable=False),
        sa.Column("scroll_depth", sa.Integer(), nullable=False),
        sa.Column("is_bot", sa.Boolean(), nullable=False),
        sa.Column("is_unique_visitor", sa.Boolean(), nullable=False),
        sa.Column("is_returning_visitor", sa.Boolean(), nullable=False),
        sa.Column("utm_source", sa.String(100), nullable=True),
        sa.Column("utm_medium", sa.String(100), nullable=True),
        sa.Column("utm_campaign", sa.String(100), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_page_views"),
    )
    op.create_index(
        "ix_page_views_portfolio_created", "page_views", ["portfolio_id", "created_at"]
    )
    op.create_index("ix_page_views_visitor_id", "page_views", ["visitor_id"])

    # ── 5. visitors (one row per visitor per portfolio) ──────────────────
    op.create_table(
        "visitors",
        sa.Column("id", sa.String(36), nullable=False),
        *_timestamps(),
        sa.Column("visitor_id", sa.String(64), nullable=False),
        _fk("portfolio_id", "visitors", "portfolios", "CASCADE", nullable=False),
        _fk("user_id", "visitors", "users", "CASCADE", nullable=False),
        sa.Column("first_visit", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_visit", sa.DateTime(timezone=True), nullable=False),
        sa.Column("visit_count", sa.Integer(), nullable=False),
        sa.Column("page_views", sa.Integer(), nullable=False),
        sa.Column("total_time_spent", sa.Integer(), nullable=False),
        sa.Column("first_referrer", sa.String(1000), nullable=True),
        sa.Column("last_referrer", sa.String(1000), nullable=True),
        sa.Column("first_landing_page", sa.String(500), nullable=True),
        sa.Column("last_landing_page", sa.String(500), nullable=True),
        sa.Column("primary_device", sa.String(20), nullable=True),
        sa.Column("primary_browser", sa.String(50), nullable=True),
        sa.Column("primary_os", sa.String(50), nullable=True),
        sa.Column("is_bot", sa.Boolean(), nullable=False),
        sa.Column("engagement_score", sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_visitors"),
        sa.UniqueConstraint(
            "visitor_id", "portfolio_id", name="uq_visitors_visitor_portfolio"
        ),
    )


def downgrade() -> None:
    op.drop_table("visitors")
    op.drop_table("page_views")
    op.drop_table("payments")
    op.drop_table("subscriptions")
    op.drop_table("pricing_plans")
