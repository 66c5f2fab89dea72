"""
Moderation domain — report intake and admin review (zero FastAPI imports).

Report lifecycle:  pending → reviewed_ok | removed   (set by review_post)
Post flags:
  report_count        +1 per distinct reporter, never decremented
  is_priority_review  set once report_count reaches the threshold; cleared
                      only by an admin review
  is_removed          set or cleared only by an admin review
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.models import Account
from app.database import atomic
from app.exceptions import (
    AccountNotFound,
    AdminRequired,
    DuplicateReport,
    PostNotFound,
    SelfReport,
    ValidationError,
)
from app.moderation.constants import (
    PRIORITY_REVIEW_THRESHOLD,
    ReportReason,
    ReportStatus,
    ReviewAction,
)
from app.moderation.models import Report
from app.posts.models import Post
from app.social_graph import counters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportOutcome:
    report: Report
    owner_id: uuid.UUID
    report_count: int
    is_priority_review: bool
    # True only for the report that pushed the post over the threshold
    became_priority: bool


async def _get_post(
    session: AsyncSession, post_id: uuid.UUID, *, for_update: bool = False
) -> Post:
    stmt = sa.select(Post).where(Post.post_id == post_id).execution_options(
        populate_existing=True
    )
    if for_update:
        stmt = stmt.with_for_update()
    post = (await session.execute(stmt)).scalar_one_or_none()
    if post is None:
        raise PostNotFound()
    return post


def _parse_reason(reason: ReportReason | str) -> ReportReason:
    try:
        return ReportReason(reason)
    except ValueError as exc:
        raise ValidationError("Unknown report reason.") from exc


async def submit_report(
    session: AsyncSession,
    post_id: uuid.UUID,
    reporter_id: uuid.UUID,
    reason: ReportReason | str,
    *,
    threshold: int = PRIORITY_REVIEW_THRESHOLD,
) -> ReportOutcome:
    """File one report per (post, reporter) and bump the post's report count."""
    reason = _parse_reason(reason)
    async with atomic(session):
        # Row lock: concurrent reports see each other's priority flag.
        post = await _get_post(session, post_id, for_update=True)
        if post.owner_id == reporter_id:
            raise SelfReport()
        if await session.get(Account, reporter_id) is None:
            raise AccountNotFound()
        was_priority = post.is_priority_review

        # The (post_id, reporter_id) key decides duplicates, not the identity map.
        try:
            await session.execute(
                sa.insert(Report).values(
                    post_id=post_id,
                    reporter_id=reporter_id,
                    reason=reason,
                    status=ReportStatus.PENDING,
                )
            )
        except IntegrityError as exc:
            raise DuplicateReport() from exc
        report = await session.get(Report, (post_id, reporter_id), populate_existing=True)

        # Both SET expressions see the pre-update row.
        await session.execute(
            sa.update(Post)
            .where(Post.post_id == post_id)
            .values(
                report_count=Post.report_count + 1,
                is_priority_review=sa.or_(
                    Post.is_priority_review, Post.report_count + 1 >= threshold
                ),
            )
            .execution_options(synchronize_session=False)
        )
        await session.refresh(post)

    became_priority = post.is_priority_review and not was_priority
    if became_priority:
        logger.info("Post %s flagged for priority review (%d reports)", post_id, post.report_count)
    return ReportOutcome(
        report=report,
        owner_id=post.owner_id,
        report_count=post.report_count,
        is_priority_review=post.is_priority_review,
        became_priority=became_priority,
    )


async def review_post(
    session: AsyncSession,
    post_id: uuid.UUID,
    admin_id: uuid.UUID,
    action: ReviewAction | str,
) -> Post:
    """
    Apply an admin decision to a reported post.

    ``remove`` hides the post, ``approve`` keeps (or restores) it.  Either way
    the post leaves the priority queue and every pending report on it is
    closed with the matching status.  report_count is left as history.
    """
    try:
        action = ReviewAction(action)
    except ValueError as exc:
        raise ValidationError("Unknown review action.") from exc

    async with atomic(session):
        reviewer = await session.get(Account, admin_id, populate_existing=True)
        if reviewer is None or not reviewer.is_admin:
            raise AdminRequired()
        post = await _get_post(session, post_id, for_update=True)

        remove = action is ReviewAction.REMOVE
        newly_removed = remove and not post.is_removed
        post.is_removed = remove
        post.is_priority_review = False

        await session.execute(
            sa.update(Report)
            .where(Report.post_id == post_id, Report.status == ReportStatus.PENDING)
            .values(
                status=action.report_status,
                reviewed_by=admin_id,
                reviewed_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        if newly_removed:
            await counters.increment_removed_posts(session, post.owner_id)
        await session.flush()

    logger.info("Post %s reviewed by %s: %s", post_id, admin_id, action.value)
    return post


async def list_review_queue(
    session: AsyncSession,
    *,
    priority_only: bool = False,
    page: int = 1,
    size: int = 20,
) -> tuple[list[tuple[Post, int]], int, int]:
    """
    Return (rows, total, priority_total).

    Rows are (Post, pending_report_count) for every post that is flagged for
    priority review or still has pending reports; priority posts first, then
    the most reported.
    """
    pending_count = (
        sa.select(sa.func.count())
        .select_from(Report)
        .where(Report.post_id == Post.post_id, Report.status == ReportStatus.PENDING)
        .correlate(Post)
        .scalar_subquery()
    )
    if priority_only:
        in_queue = Post.is_priority_review.is_(True)
    else:
        in_queue = sa.or_(Post.is_priority_review.is_(True), pending_count > 0)

    async with atomic(session):
        total = (
            await session.execute(sa.select(sa.func.count()).select_from(Post).where(in_queue))
        ).scalar_one()
        priority_total = (
            await session.execute(
                sa.select(sa.func.count())
                .select_from(Post)
                .where(Post.is_priority_review.is_(True))
            )
        ).scalar_one()
        rows = (
            await session.execute(
                sa.select(Post, pending_count.label("pending_reports"))
                .where(in_queue)
                .order_by(
                    Post.is_priority_review.desc(),
                    Post.report_count.desc(),
                    Post.created_at.asc(),
                )
                .limit(size)
                .offset((page - 1) * size)
                .execution_options(populate_existing=True)
            )
        ).all()
    return [(post, pending) for post, pending in rows], total, priority_total


async def list_post_reports(session: AsyncSession, post_id: uuid.UUID) -> list[Report]:
    async with atomic(session):
        await _get_post(session, post_id)
        result = await session.execute(
            sa.select(Report)
            .where(Report.post_id == post_id)
            .order_by(Report.created_at.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())
