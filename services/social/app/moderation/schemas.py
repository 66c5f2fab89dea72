"""
Moderation domain — Pydantic V2 request/response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.moderation.constants import ReportReason, ReportStatus, ReviewAction


class _Base(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


# ── Reporting ──────────────────────────────────────────────────────────────────

class ReportRequest(_Base):
    reason: ReportReason


class ReportResponse(BaseModel):
    post_id: uuid.UUID
    reason: ReportReason
    status: ReportStatus
    report_count: int
    is_priority_review: bool
    created_at: datetime


# ── Admin review ───────────────────────────────────────────────────────────────

class ReviewRequest(_Base):
    action: ReviewAction


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    post_id: uuid.UUID
    owner_id: uuid.UUID
    is_removed: bool
    is_priority_review: bool
    report_count: int


class ReviewQueueItem(BaseModel):
    post_id: uuid.UUID
    owner_id: uuid.UUID
    content: str
    created_at: datetime
    report_count: int
    pending_reports: int
    is_priority_review: bool
    is_removed: bool


class ReviewQueueResponse(BaseModel):
    items: list[ReviewQueueItem]
    total: int
    priority_count: int  # posts at or above the report threshold
    page: int
    size: int


class AdminReportItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    post_id: uuid.UUID
    reporter_id: uuid.UUID
    reason: ReportReason
    status: ReportStatus
    reviewed_by: uuid.UUID | None
    reviewed_at: datetime | None
    created_at: datetime


class AdminReportListResponse(BaseModel):
    items: list[AdminReportItem]
