"""Social schema: accounts, follows, posts, comments, post_reports

Revision ID: 001
Revises:
Create Date: 2026-10-12

Tables created:
  - accounts       Profiles, privacy flag, role, denormalized counters
  - follows        Directed follow edges; is_pending until a private target accepts
  - posts          Posts with report_count / is_removed / is_priority_review
  - comments       Flat comments on posts
  - post_reports   One report per (post, reporter)

PostgreSQL-native ENUM types created:
  - accountrole    user / admin
  - reportreason   Hateful / Harmful_or_Abusive / Criminal_Activity / Sexually_Explicit
  - reportstatus   pending / reviewed_ok / removed

Downgrade: drops all tables and ENUM types in reverse dependency order.
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _enum(name: str, *values: str) -> None:
    # PostgreSQL has no CREATE TYPE IF NOT EXISTS, so we use a DO/EXCEPTION block.
    labels = ", ".join(f"'{v}'" for v in values)
    op.execute(
        f"""
        DO $$ BEGIN
            CREATE TYPE {name} AS ENUM ({labels});
        EXCEPTION WHEN duplicate_object THEN NULL;
        END $$;
        """
    )


# ─────────────────────────────────────────────────────────────────────────────
#  UPGRADE
# ─────────────────────────────────────────────────────────────────────────────

def upgrade() -> None:
    # ── 1. PostgreSQL ENUM types ──────────────────────────────────────────────
    _enum("accountrole", "user", "admin")
    _enum(
        "reportreason",
        "Hateful",
        "Harmful_or_Abusive",
        "Criminal_Activity",
        "Sexually_Explicit",
    )
    _enum("reportstatus", "pending", "reviewed_ok", "removed")

    # ── 2. accounts ───────────────────────────────────────────────────────────
    op.create_table(
        "accounts",
        # Same id as the identity layer's user; no server default
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.String(1024), nullable=True),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "role",
            postgresql.ENUM(name="accountrole", create_type=False),
            nullable=False,
            server_default=sa.text("'user'"),
        ),
        sa.Column("follower_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("following_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("removed_post_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_accounts"),
        sa.CheckConstraint("follower_count >= 0", name="ck_accounts_follower_count_non_negative"),
        sa.CheckConstraint(
            "following_count >= 0", name="ck_accounts_following_count_non_negative"
        ),
        sa.CheckConstraint(
            "removed_post_count >= 0", name="ck_accounts_removed_post_count_non_negative"
        ),
    )
    op.create_index("ix_accounts_username", "accounts", ["username"], unique=True)

    # ── 3. follows ────────────────────────────────────────────────────────────
    op.create_table(
        "follows",
        sa.Column(
            "follow_id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("follower_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("following_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("is_pending", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("follow_id", name="pk_follows"),
        sa.ForeignKeyConstraint(
            ["follower_id"],
            ["accounts.id"],
            name="fk_follows_follower_id",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["following_id"],
            ["accounts.id"],
            name="fk_follows_following_id",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
        sa.CheckConstraint("follower_id != following_id", name="ck_follows_no_self"),
    )
    op.create_index("idx_follows_follower_pending", "follows", ["follower_id", "is_pending"])
    op.create_index("idx_follows_following_pending", "follows", ["following_id", "is_pending"])

    # ── 4. posts ──────────────────────────────────────────────────────────────
    op.create_table(
        "posts",
        sa.Column(
            "post_id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("media_urls", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column("report_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_removed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_priority_review", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("post_id", name="pk_posts"),
        sa.ForeignKeyConstraint(
            ["owner_id"],
            ["accounts.id"],
            name="fk_posts_owner_id",
            ondelete="CASCADE",
        ),
        sa.CheckConstraint("report_count >= 0", name="ck_posts_report_count_non_negative"),
    )
    op.create_index("idx_posts_owner_created", "posts", ["owner_id", "created_at"])
    op.create_index("idx_posts_priority_review", "posts", ["is_priority_review"])

    # ── 5. comments ───────────────────────────────────────────────────────────
    op.create_table(
        "comments",
        sa.Column(
            "comment_id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("post_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("author_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("comment_id", name="pk_comments"),
        sa.ForeignKeyConstraint(
            ["post_id"],
            ["posts.post_id"],
            name="fk_comments_post_id",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["author_id"],
            ["accounts.id"],
            name="fk_comments_author_id",
            ondelete="CASCADE",
        ),
    )
    op.create_index("idx_comments_post_created", "comments", ["post_id", "created_at"])

    # ── 6. post_reports ───────────────────────────────────────────────────────
    op.create_table(
        "post_reports",
        sa.Column("post_id", postgresql.UUID(as_uuid=True), nullable=False),
        # Soft reference: reports outlive the reporter's account
        sa.Column("reporter_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "reason",
            postgresql.ENUM(name="reportreason", create_type=False),
            nullable=False,
        ),
        sa.Column(
            "status",
            postgresql.ENUM(name="reportstatus", create_type=False),
            nullable=False,
            server_default=sa.text("'pending'"),
        ),
        sa.Column("reviewed_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        # The composite key is the duplicate-report guard
        sa.PrimaryKeyConstraint("post_id", "reporter_id", name="pk_post_reports"),
        sa.ForeignKeyConstraint(
            ["post_id"],
            ["posts.post_id"],
            name="fk_post_reports_post_id",
            ondelete="CASCADE",
        ),
    )
    op.create_index("idx_post_reports_status", "post_reports", ["status"])


# ─────────────────────────────────────────────────────────────────────────────
#  DOWNGRADE
# ─────────────────────────────────────────────────────────────────────────────

def downgrade() -> None:
    op.drop_index("idx_post_reports_status", table_name="post_reports")
    op.drop_table("post_reports")

    op.drop_index("idx_comments_post_created", table_name="comments")
    op.drop_table("comments")

    op.drop_index("idx_posts_priority_review", table_name="posts")
    op.drop_index("idx_posts_owner_created", table_name="posts")
    op.drop_table("posts")

    op.drop_index("idx_follows_following_pending", table_name="follows")
    op.drop_index("idx_follows_follower_pending", table_name="follows")
    op.drop_table("follows")

    op.drop_index("ix_accounts_username", table_name="accounts")
    op.drop_table("accounts")

    op.execute("DROP TYPE IF EXISTS reportstatus")
    op.execute("DROP TYPE IF EXISTS reportreason")
    op.execute("DROP TYPE IF EXISTS accountrole")
