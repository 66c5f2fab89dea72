"""
Accounts domain — SQLAlchemy ORM model.

Tables owned by this module:
  - accounts   Social profile, privacy flag, role and the denormalized
               follower / following / removed-post counters
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base

from app.accounts.constants import AccountRole


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Account(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        sa.CheckConstraint("follower_count >= 0", name="ck_accounts_follower_count_non_negative"),
        sa.CheckConstraint("following_count >= 0", name="ck_accounts_following_count_non_negative"),
        sa.CheckConstraint(
            "removed_post_count >= 0", name="ck_accounts_removed_post_count_non_negative"
        ),
    )

    # Same id the identity layer puts in the JWT `sub` claim
    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)

    # ── Profile fields ────────────────────────────────────────────────────────
    username: Mapped[str] = mapped_column(sa.String(50), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    bio: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    # Opaque object-storage URL; existence is not checked here
    avatar_url: Mapped[str | None] = mapped_column(sa.String(1024), nullable=True)
    # New follow requests start pending while this is set
    is_private: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)
    role: Mapped[AccountRole] = mapped_column(
        sa.Enum(
            AccountRole,
            name="accountrole",
            values_callable=lambda e: [x.value for x in e],
        ),
        nullable=False,
        default=AccountRole.USER,
    )

    # ── Counters (written only by app.social_graph.counters) ──────────────────
    follower_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    following_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    removed_post_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN
