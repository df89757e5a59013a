"""create users, portfolios and portfolio content tables

Revision ID: a1c3e5f7b901
Revises:
Create Date: 2026-10-12

"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1c3e5f7b901"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _key_and_timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _owner(table: str, with_portfolio: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey(
                "users.id",
                ondelete="CASCADE",
                name=f"fk_{table}_user_id_users",
            ),
            nullable=False,
        ),
    ]
    if with_portfolio:
        columns.append(
            sa.Column(
                "portfolio_id",
                sa.String(36),
                sa.ForeignKey(
                    "portfolios.id",
                    ondelete="SET NULL",
                    name=f"fk_{table}_portfolio_id_portfolios",
                ),
                nullable=True,
            )
        )
    return columns


def _soft_delete() -> sa.Column:
    return sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True)


def upgrade() -> None:
    # ── 1. users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        *_key_and_timestamps(),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("linkedin_url", sa.String(500), nullable=True),
        sa.Column("github_url", sa.String(500), nullable=True),
        sa.Column("twitter_url", sa.String(500), nullable=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("is_email_verified", sa.Boolean(), nullable=False),
        sa.Column("profile_completeness", sa.Integer(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        _soft_delete(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_deleted_at", "users", ["deleted_at"])

    # ── 2. portfolios (id == owning user id) ─────────────────────────────
    op.create_table(
        "portfolios",
        *_key_and_timestamps(),
        *_owner("portfolios", with_portfolio=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("subtitle", sa.String(255), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("theme", sa.String(20), nullable=False),
        sa.Column("primary_color", sa.String(20), nullable=True),
        sa.Column("secondary_color", sa.String(20), nullable=True),
        sa.Column("visibility", sa.String(20), nullable=False),
        sa.Column("custom_domain", sa.String(255), nullable=True),
        sa.Column("meta_title", sa.String(255), nullable=True),
        sa.Column("meta_description", sa.Text(), nullable=True),
        sa.Column("meta_keywords", sa.JSON(), nullable=True),
        sa.Column("sections", sa.JSON(), nullable=True),
        sa.Column("settings", sa.JSON(), nullable=True),
        sa.Column("resume_id", sa.String(36), nullable=True),
        sa.Column("cover_image_id", sa.String(36), nullable=True),
        sa.Column("profile_image_id", sa.String(36), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("is_featured", sa.Boolean(), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("view_count", sa.Integer(), nullable=False),
        sa.Column("last_viewed_at", sa.DateTime(timezone=True), nullable=True),
        _soft_delete(),
        sa.PrimaryKeyConstraint("id", name="pk_portfolios"),
    )
    op.create_index("ix_portfolios_user_id", "portfolios", ["user_id"])
    op.create_index(
        "ix_portfolios_published", "portfolios", ["is_published", "visibility"]
    )
    op.create_index("ix_portfolios_deleted_at", "portfolios", ["deleted_at"])

    # ── 3. projects ──────────────────────────────────────────────────────
    op.create_table(
        "projects",
        *_key_and_timestamps(),
        *_owner("projects"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("long_description", sa.Text(), nullable=True),
        sa.Column("technologies", sa.JSON(), nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("github_url", sa.String(500), nullable=True),
        sa.Column("live_url", sa.String(500), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("featured", sa.Boolean(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False),
        _soft_delete(),
        sa.PrimaryKeyConstraint("id", name="pk_projects"),
    )
    op.create_index("ix_projects_user_id", "projects", ["user_id"])
    op.create_index("ix_projects_portfolio_id", "projects", ["portfolio_id"])
    op.create_index("ix_projects_deleted_at", "projects", ["deleted_at"])

    # ── 4. skill_categories + skills ─────────────────────────────────────
    op.create_table(
        "skill_categories",
        *_key_and_timestamps(),
        *_owner("skill_categories", with_portfolio=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("icon", sa.String(100), nullable=True),
        sa.Column("color", sa.String(20), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("is_visible", sa.Boolean(), nullable=False),
        _soft_delete(),
        sa.PrimaryKeyConstraint("id", name="pk_skill_categories"),
    )
    op.create_index("ix_skill_categories_user_id", "skill_categories", ["user_id"])
    op.create_index(
        "ix_skill_categories_deleted_at", "skill_categories", ["deleted_at"]
    )

    op.create_table(
        "skills",
        *_key_and_timestamps(),
        *_owner("skills"),
        sa.Column(
            "category_id",
            sa.String(36),
            sa.ForeignKey(
                "skill_categories.id",
                ondelete="SET NULL",
                name="fk_skills_category_id_skill_categories",
            ),
            nullable=True,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("proficiency_level", sa.String(20), nullable=False),
        sa.Column("years_of_experience", sa.Float(), nullable=True),
        sa.Column("last_used_date", sa.Date(), nullable=True),
        sa.Column("icon", sa.String(100), nullable=True),
        sa.Column("color", sa.String(20), nullable=True),
        sa.Column("is_featured", sa.Boolean(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("endorsement_count", sa.Integer(), nullable=False),
        sa.Column("metadata_json", sa.JSON(), nullable=True),
        _soft_delete(),
        sa.PrimaryKeyConstraint("id", name="pk_skills"),
    )
    op.create_index("ix_skills_user_id", "skills", ["user_id"])
    op.create_index("ix_skills_category_id", "skills", ["category_id"])
    op.create_index("ix_skills_deleted_at", "skills", ["deleted_at"])

    # ── 5. experiences ───────────────────────────────────────────────────
    op.create_table(
        "experiences",
        *_key_and_timestamps(),
        *_owner("experiences"),
        sa.Column("company_name", sa.String(255), nullable=False),
        sa.Column("position", sa.String(255), nullable=False),
        sa.Column("employment_type", sa.String(20), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("is_remote", sa.Boolean(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_current", sa.Boolean(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("responsibilities", sa.JSON(), nullable=False),
        sa.Column("achievements", sa.JSON(), nullable=False),
        sa.Column("technologies", sa.JSON(), nullable=False),
        sa.Column("company_url", sa.String(500), nullable=True),
        sa.Column("company_logo_url", sa.String(500), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("is_highlighted", sa.Boolean(), nullable=False),
        _soft_delete(),
        sa.PrimaryKeyConstraint("id", name="pk_experiences"),
    )
    op.create_index("ix_experiences_user_id", "experiences", ["user_id"])
    op.create_index("ix_experiences_portfolio_id", "experiences", ["portfolio_id"])
    op.create_index("ix_experiences_deleted_at", "experiences", ["deleted_at"])

    # ── 6. educations ────────────────────────────────────────────────────
    op.create_table(
        "educations",
        *_key_and_timestamps(),
        *_owner("educations"),
        sa.Column("institution_name", sa.String(255), nullable=False),
        sa.Column("institution_logo", sa.String(500), nullable=True),
        sa.Column("institution_url", sa.String(500), nullable=True),
        sa.Column("degree", sa.String(255), nullable=False),
        sa.Column("field_of_study", sa.String(255), nullable=True),
        sa.Column("education_type", sa.String(20), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_current", sa.Boolean(), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("is_remote", sa.Boolean(), nullable=False),
        sa.Column("gpa", sa.Float(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("courses", sa.JSON(), nullable=False),
        sa.Column("honors", sa.JSON(), nullable=False),
        sa.Column("activities", sa.JSON(), nullable=False),
        sa.Column("achievements", sa.JSON(), nullable=False),
        sa.Column("skills", sa.JSON(), nullable=False),
        sa.Column("is_highlighted", sa.Boolean(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("certificate_url", sa.String(500), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("verification_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verification_method", sa.String(100), nullable=True),
        _soft_delete(),
        sa.PrimaryKeyConstraint("id", name="pk_educations"),
    )
    op.create_index("ix_educations_user_id", "educations", ["user_id"])
    op.create_index("ix_educations_portfolio_id", "educations", ["portfolio_id"])
    op.create_index("ix_educations_deleted_at", "educations", ["deleted_at"])

    # ── 7. social_links (hard delete, one link per platform) ─────────────
    op.create_table(
        "social_links",
        *_key_and_timestamps(),
        *_owner("social_links"),
        sa.Column("platform", sa.String(30), nullable=False),
        sa.Column("url", sa.String(500), nullable=False),
        sa.Column("label", sa.String(100), nullable=True),
        sa.Column("username", sa.String(100), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("show_in_nav", sa.Boolean(), nullable=False),
        sa.Column("open_in_new_tab", sa.Boolean(), nullable=False),
        sa.Column("click_count", sa.Integer(), nullable=False),
        sa.Column("metadata_json", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_social_links"),
        sa.UniqueConstraint(
            "user_id", "platform", name="uq_social_links_user_platform"
        ),
    )
    op.create_index("ix_social_links_portfolio_id", "social_links", ["portfolio_id"])

    # ── 8. contacts ──────────────────────────────────────────────────────
    op.create_table(
        "contacts",
        *_key_and_timestamps(),
        sa.Column(
            "portfolio_id",
            sa.String(36),
            sa.ForeignKey(
                "portfolios.id",
                ondelete="SET NULL",
                name="fk_contacts_portfolio_id_portfolios",
            ),
            nullable=True,
        ),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey(
                "users.id", ondelete="SET NULL", name="fk_contacts_user_id_users"
            ),
            nullable=True,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("subject", sa.String(255), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_contacts"),
    )
    op.create_index("ix_contacts_user_id", "contacts", ["user_id"])
    op.create_index("ix_contacts_status", "contacts", ["status"])


def downgrade() -> None:
    op.drop_table("contacts")
    op.drop_table("social_links")
    op.drop_table("educations")
    op.drop_table("experiences")
    op.drop_table("skills")
    op.drop_table("skill_categories")
    op.drop_table("projects")
    op.drop_table("portfolios")
    op.drop_table("users")
