"""create blog_categories, blogs, images and image_variants

Revision ID: b2d4f6a8c013
Revises: a1c3e5f7b901
Create Date: 2026-10-13

"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "b2d4f6a8c013"
down_revision: Union[str, None] = "a1c3e5f7b901"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # ── 1. blog_categories (self-referencing tree) ───────────────────────
    op.create_table(
        "blog_categories",
        sa.Column("id", sa.String(36), nullable=False),
        *_timestamps(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "parent_id",
            sa.String(36),
            sa.ForeignKey(
                "blog_categories.id",
                ondelete="SET NULL",
                name="fk_blog_categories_parent_id_blog_categories",
            ),
            nullable=True,
        ),
        sa.Column("color", sa.String(20), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_blog_categories"),
        sa.UniqueConstraint("slug", name="uq_blog_categories_slug"),
    )
    op.create_index(
        "ix_blog_categories_deleted_at", "blog_categories", ["deleted_at"]
    )

    # ── 2. blogs ─────────────────────────────────────────────────────────
    op.create_table(
        "blogs",
        sa.Column("id", sa.String(36), nullable=False),
        *_timestamps(),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_blogs_user_id_users"),
            nullable=False,
        ),
        sa.Column(
            "portfolio_id",
            sa.String(36),
            sa.ForeignKey(
                "portfolios.id",
                ondelete="SET NULL",
                name="fk_blogs_portfolio_id_portfolios",
            ),
            nullable=True,
        ),
        sa.Column(
            "category_id",
            sa.String(36),
            sa.ForeignKey(
                "blog_categories.id",
                ondelete="SET NULL",
                name="fk_blogs_category_id_blog_categories",
            ),
            nullable=True,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(280), nullable=False),
        sa.Column("subtitle", sa.String(255), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("excerpt", sa.String(500), nullable=True),
        sa.Column("featured_image_url", sa.String(500), nullable=True),
        sa.Column("reading_time", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("visibility", sa.String(20), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("meta_title", sa.String(255), nullable=True),
        sa.Column("meta_description", sa.Text(), nullable=True),
        sa.Column("allow_comments", sa.Boolean(), nullable=False),
        sa.Column("is_featured", sa.Boolean(), nullable=False),
        sa.Column("views_count", sa.Integer(), nullable=False),
        sa.Column("likes_count", sa.Integer(), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_blogs"),
        sa.UniqueConstraint("slug", name="uq_blogs_slug"),
    )
    op.create_index("ix_blogs_user_id", "blogs", ["user_id"])
    op.create_index("ix_blogs_status", "blogs", ["status"])
    op.create_index("ix_blogs_deleted_at", "blogs", ["deleted_at"])

    # ── 3. images ────────────────────────────────────────────────────────
    op.create_table(
        "images",
        sa.Column("id", sa.String(36), nullable=False),
        *_timestamps(),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_images_user_id_users"),
            nullable=False,
        ),
        sa.Column("original_name", sa.String(255), nullable=False),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("path", sa.String(500), nullable=False),
        sa.Column("mimetype", sa.String(100), nullable=False),
        sa.Column("size", sa.BigInteger(), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("width", sa.Integer(), nullable=True),
        sa.Column("height", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("alt_text", sa.String(255), nullable=True),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("focal_point_x", sa.Float(), nullable=True),
        sa.Column("focal_point_y", sa.Float(), nullable=True),
        sa.Column("dominant_color", sa.String(7), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("metadata_json", sa.JSON(), nullable=True),
        sa.Column("url", sa.String(500), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_images"),
        sa.UniqueConstraint("filename", name="uq_images_filename"),
    )
    op.create_index("ix_images_user_id", "images", ["user_id"])
    op.create_index("ix_images_category", "images", ["category"])
    op.create_index("ix_images_deleted_at", "images", ["deleted_at"])

    # ── 4. image_variants ────────────────────────────────────────────────
    op.create_table(
        "image_variants",
        sa.Column("id", sa.String(36), nullable=False),
        *_timestamps(),
        sa.Column(
            "image_id",
            sa.String(36),
            sa.ForeignKey(
                "images.id",
                ondelete="CASCADE",
                name="fk_image_variants_image_id_images",
            ),
            nullable=False,
        ),
        sa.Column("size", sa.String(20), nullable=False),
        sa.Column("format", sa.String(10), nullable=False),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("path", sa.String(500), nullable=False),
        sa.Column("mimetype", sa.String(100), nullable=False),
        sa.Column("width", sa.Integer(), nullable=False),
        sa.Column("height", sa.Integer(), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("quality", sa.Integer(), nullable=False),
        sa.Column("url", sa.String(500), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_image_variants"),
    )
    op.create_index("ix_image_variants_image_id", "image_variants", ["image_id"])


def downgrade() -> None:
    op.drop_table("image_variants")
    op.drop_table("images")
    op.drop_table("blogs")
    op.drop_table("blog_categories")
