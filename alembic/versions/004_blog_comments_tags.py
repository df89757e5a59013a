"""create blog_tags and blog_comments, add blog share and comment counters

Revision ID: d4f6b8c0e237
Revises: c3e5a7b9d125
Create Date: 2026-10-19

"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "d4f6b8c0e237"
down_revision: Union[str, None] = "c3e5a7b9d125"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # ── 1. counters on blogs ─────────────────────────────────────────────
    op.add_column(
        "blogs",
        sa.Column("shares_count", sa.Integer(), nullable=False, server_default="0"),
    )
    op.add_column(
        "blogs",
        sa.Column("comments_count", sa.Integer(), nullable=False, server_default="0"),
    )

    # ── 2. blog_tags ─────────────────────────────────────────────────────
    op.create_table(
        "blog_tags",
        sa.Column("id", sa.String(36), nullable=False),
        *_timestamps(),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("slug", sa.String(60), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(20), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_blog_tags"),
        sa.UniqueConstraint("slug", name="uq_blog_tags_slug"),
    )
    op.create_index("ix_blog_tags_deleted_at", "blog_tags", ["deleted_at"])

    # ── 3. blog_comments (threaded through parent_id) ────────────────────
    op.create_table(
        "blog_comments",
        sa.Column("id", sa.String(36), nullable=False),
        *_timestamps(),
        sa.Column(
            "blog_id",
            sa.String(36),
            sa.ForeignKey(
                "blogs.id", ondelete="CASCADE", name="fk_blog_comments_blog_id_blogs"
            ),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey(
                "users.id", ondelete="CASCADE", name="fk_blog_comments_user_id_users"
            ),
            nullable=False,
        ),
        sa.Column(
            "parent_id",
            sa.String(36),
            sa.ForeignKey(
                "blog_comments.id",
                ondelete="CASCADE",
                name="fk_blog_comments_parent_id_blog_comments",
            ),
            nullable=True,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_approved", sa.Boolean(), nullable=False),
        sa.Column("likes_count", sa.Integer(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_blog_comments"),
    )
    op.create_index("ix_blog_comments_blog_id", "blog_comments", ["blog_id"])
    op.create_index("ix_blog_comments_parent_id", "blog_comments", ["parent_id"])
    op.create_index("ix_blog_comments_deleted_at", "blog_comments", ["deleted_at"])


def downgrade() -> None:
    op.drop_table("blog_comments")
    op.drop_table("blog_tags")
    op.drop_column("blogs", "comments_count")
    op.drop_column("blogs", "shares_count")
