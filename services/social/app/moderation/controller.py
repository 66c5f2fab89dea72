"""
Moderation domain — request orchestration.
"""
from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.events.publishers import (
    EventPublisher,
    build_post_flagged_event,
    build_post_reviewed_event,
)
from app.moderation import service as svc
from app.moderation.schemas import (
    AdminReportItem,
    AdminReportListResponse,
    ReportRequest,
    ReportResponse,
    ReviewQueueItem,
    ReviewQueueResponse,
    ReviewRequest,
    ReviewResponse,
)


async def report_post(
    session: AsyncSession,
    publisher: EventPublisher,
    reporter_id: uuid.UUID,
    post_id: uuid.UUID,
    body: ReportRequest,
    *,
    threshold: int,
) -> ReportResponse:
    outcome = await svc.submit_report(
        session, post_id, reporter_id, body.reason, threshold=threshold
    )
    if outcome.became_priority:
        await publisher.publish(
            build_post_flagged_event(post_id, outcome.owner_id, outcome.report_count)
        )
    return ReportResponse(
        post_id=post_id,
        reason=outcome.report.reason,
        status=outcome.report.status,
        report_count=outcome.report_count,
        is_priority_review=outcome.is_priority_review,
        created_at=outcome.report.created_at,
    )


async def admin_review_queue(
    session: AsyncSession,
    priority_only: bool,
    page: int,
    size: int,
) -> ReviewQueueResponse:
    rows, total, priority_total = await svc.list_review_queue(
        session, priority_only=priority_only, page=page, size=size
    )
    items = [
        ReviewQueueItem(
            post_id=p.post_id,
            owner_id=p.owner_id,
            content=p.content,
            created_at=p.created_at,
            report_count=p.report_count,
            pending_reports=pending,
            is_priority_review=p.is_priority_review,
            is_removed=p.is_removed,
        )
        for p, pending in rows
    ]
    return ReviewQueueResponse(
        items=items, total=total, priority_count=priority_total, page=page, size=size
    )


async def admin_post_reports(
    session: AsyncSession,
    post_id: uuid.UUID,
) -> AdminReportListResponse:
    reports = await svc.list_post_reports(session, post_id)
    return AdminReportListResponse(items=[AdminReportItem.model_validate(r) for r in reports])


async def admin_review_post(
    session: AsyncSession,
    publisher: EventPublisher,
    post_id: uuid.UUID,
    admin_id: uuid.UUID,
    body: ReviewRequest,
) -> ReviewResponse:
    post = await svc.review_post(session, post_id, admin_id, body.action)
    await publisher.publish(
        build_post_reviewed_event(post.post_id, post.owner_id, admin_id, body.action.value)
    )
    return ReviewResponse.model_validate(post)
