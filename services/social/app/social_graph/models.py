"""
Social graph domain — SQLAlchemy ORM models.

Tables:
  follows  — directed follow edges (follower → following), pending until a
             private target accepts
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Follow(Base):
    __tablename__ = "follows"

    follow_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    follower_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    following_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    is_pending: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )

    follower = relationship("Account", foreign_keys=[follower_id], lazy="raise")
    following = relationship("Account", foreign_keys=[following_id], lazy="raise")

    __table_args__ = (
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
        sa.CheckConstraint("follower_id != following_id", name="ck_follows_no_self"),
        sa.Index("idx_follows_follower_pending", "follower_id", "is_pending"),
        sa.Index("idx_follows_following_pending", "following_id", "is_pending"),
    )
