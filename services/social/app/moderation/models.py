"""
Moderation domain — SQLAlchemy ORM models.

Tables:
  post_reports  — one report per (post, reporter); reviewed by an admin
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base
from app.moderation.constants import ReportReason, ReportStatus


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Report(Base):
    __tablename__ = "post_reports"

    post_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("posts.post_id", ondelete="CASCADE"),
        primary_key=True,
    )
    # Soft reference: reports outlive the reporter's account
    reporter_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True)
    reason: Mapped[ReportReason] = mapped_column(
        sa.Enum(
            ReportReason,
            name="reportreason",
            values_callable=lambda e: [x.value for x in e],
        ),
        nullable=False,
    )
    status: Mapped[ReportStatus] = mapped_column(
        sa.Enum(
            ReportStatus,
            name="reportstatus",
            values_callable=lambda e: [x.value for x in e],
        ),
        nullable=False,
        default=ReportStatus.PENDING,
    )
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(sa.Uuid, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )

    __table_args__ = (
        sa.Index("idx_post_reports_status", "status"),
    )
