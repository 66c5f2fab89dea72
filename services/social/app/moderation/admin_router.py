"""
Moderation domain — admin-facing routes.

Routes:
  GET  /api/v1/admin/moderation/posts                     Review queue (priority first)
  GET  /api/v1/admin/moderation/posts/{post_id}/reports   Reports filed against a post
  POST /api/v1/admin/moderation/posts/{post_id}/review    Approve or remove a post

Requires: an account holding the admin role.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_event_publisher, require_admin
from app.events.publishers import EventPublisher
from app.moderation import controller as ctrl
from app.moderation.schemas import (
    AdminReportListResponse,
    ReviewQueueResponse,
    ReviewRequest,
    ReviewResponse,
)
from shared.models.user import CurrentUser

router = APIRouter(prefix="/admin/moderation", tags=["admin-moderation"])


@router.get(
    "/posts",
    response_model=ReviewQueueResponse,
    summary="[Admin] Review queue",
    description=(
        "Posts with pending reports or flagged for priority review. "
        "Priority posts come first, then the most reported."
    ),
)
async def review_queue(
    priority_only: bool = Query(False, description="Only posts at or above the threshold"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> ReviewQueueResponse:
    return await ctrl.admin_review_queue(
        session, priority_only=priority_only, page=page, size=size
    )


@router.get(
    "/posts/{post_id}/reports",
    response_model=AdminReportListResponse,
    summary="[Admin] List reports on a post",
)
async def post_reports(
    post_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> AdminReportListResponse:
    return await ctrl.admin_post_reports(session, post_id)


@router.post(
    "/posts/{post_id}/review",
    response_model=ReviewResponse,
    summary="[Admin] Review a post",
    description=(
        "`remove` hides the post; `approve` keeps or restores it. Either way the post "
        "leaves priority review and its pending reports are closed."
    ),
)
async def review_post(
    post_id: uuid.UUID,
    body: ReviewRequest,
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
) -> ReviewResponse:
    return await ctrl.admin_review_post(session, publisher, post_id, admin.id, body)
