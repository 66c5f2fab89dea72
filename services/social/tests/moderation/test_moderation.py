import asyncio
import uuid

import pytest

from app.accounts.constants import AccountRole
from app.exceptions import (
    AccountNotFound,
    AdminRequired,
    ConflictError,
    DuplicateReport,
    PostNotFound,
    SelfReport,
    ValidationError,
)
from app.moderation import service as svc
from app.moderation.constants import ReportReason, ReportStatus, ReviewAction
from app.posts.service import get_post


@pytest.mark.asyncio
async def test_report_counts_and_crosses_threshold(db_session, make_account, make_post) -> None:
    owner = await make_account("owner")
    post = await make_post(owner)
    reporters = [await make_account(f"rep{i}") for i in range(5)]

    outcomes = [
        await svc.submit_report(
            db_session, post.post_id, r.id, ReportReason.HATEFUL, threshold=5
        )
        for r in reporters
    ]

    assert [o.report_count for o in outcomes] == [1, 2, 3, 4, 5]
    assert [o.is_priority_review for o in outcomes] == [False, False, False, False, True]
    assert [o.became_priority for o in outcomes] == [False, False, False, False, True]
    assert outcomes[-1].owner_id == owner.id

    fresh = await get_post(db_session, post.post_id)
    assert fresh.report_count == 5
    assert fresh.is_priority_review is True


@pytest.mark.asyncio
async def test_default_threshold_is_three(db_session, make_account, make_post) -> None:
    owner = await make_account("owner")
    post = await make_post(owner)
    for i in range(3):
        reporter = await make_account(f"rep{i}")
        outcome = await svc.submit_report(
            db_session, post.post_id, reporter.id, "Harmful_or_Abusive"
        )
    assert outcome.is_priority_review is True


@pytest.mark.asyncio
async def test_duplicate_report_is_conflict(db_session, make_account, make_post) -> None:
    owner = await make_account("owner")
    reporter = await make_account("rep")
    post = await make_post(owner)
    await svc.submit_report(db_session, post.post_id, reporter.id, ReportReason.HATEFUL)

    with pytest.raises(DuplicateReport) as exc_info:
        await svc.submit_report(
            db_session, post.post_id, reporter.id, ReportReason.CRIMINAL_ACTIVITY
        )
    assert isinstance(exc_info.value, ConflictError)
    assert (await get_post(db_session, post.post_id)).report_count == 1


@pytest.mark.asyncio
async def test_report_validation(db_session, make_account, make_post) -> None:
    owner = await make_account("owner")
    reporter = await make_account("rep")
    post = await make_post(owner)

    with pytest.raises(ValidationError):
        await svc.submit_report(db_session, post.post_id, reporter.id, "Boring")
    with pytest.raises(SelfReport):
        await svc.submit_report(db_session, post.post_id, owner.id, ReportReason.HATEFUL)
    with pytest.raises(PostNotFound):
        await svc.submit_report(db_session, uuid.uuid4(), reporter.id, ReportReason.HATEFUL)
    with pytest.raises(AccountNotFound):
        await svc.submit_report(db_session, post.post_id, uuid.uuid4(), ReportReason.HATEFUL)
    assert (await get_post(db_session, post.post_id)).report_count == 0


async def _report_in_own_session(session_factory, post_id, reporter_id, threshold):
    async with session_factory() as session:
        return await svc.submit_report(
            session, post_id, reporter_id, ReportReason.HATEFUL, threshold=threshold
        )


@pytest.mark.asyncio
async def test_concurrent_reports_flag_the_post_once(
    session_factory, db_session, make_account, make_post
) -> None:
    owner = await make_account("owner")
    post = await make_post(owner)
    reporters = [await make_account(f"rep{i}") for i in range(6)]

    outcomes = await asyncio.gather(
        *(_report_in_own_session(session_factory, post.post_id, r.id, 2) for r in reporters)
    )

    assert sum(o.became_priority for o in outcomes) == 1
    assert sorted(o.report_count for o in outcomes) == [1, 2, 3, 4, 5, 6]
    assert (await get_post(db_session, post.post_id)).report_count == 6


async def _flagged_post(db_session, make_account, make_post, reports: int = 3):
    owner = await make_account("owner")
    post = await make_post(owner)
    for i in range(reports):
        reporter = await make_account(f"rep{i}")
        await svc.submit_report(
            db_session, post.post_id, reporter.id, ReportReason.SEXUALLY_EXPLICIT
        )
    return owner, post


@pytest.mark.asyncio
async def test_review_remove(db_session, make_account, make_post, reload) -> None:
    admin = await make_account("admin", role=AccountRole.ADMIN)
    owner, post = await _flagged_post(db_session, make_account, make_post)

    reviewed = await svc.review_post(db_session, post.post_id, admin.id, ReviewAction.REMOVE)

    assert reviewed.is_removed is True
    assert reviewed.is_priority_review is False
    assert reviewed.report_count == 3
    reports = await svc.list_post_reports(db_session, post.post_id)
    assert {r.status for r in reports} == {ReportStatus.REMOVED}
    assert all(r.reviewed_by == admin.id for r in reports)
    assert all(r.reviewed_at is not None for r in reports)
    assert (await reload(owner.id)).removed_post_count == 1

    # Removing again does not count twice
    await svc.review_post(db_session, post.post_id, admin.id, "remove")
    assert (await reload(owner.id)).removed_post_count == 1


@pytest.mark.asyncio
async def test_review_approve_restores(db_session, make_account, make_post, reload) -> None:
    admin = await make_account("admin", role=AccountRole.ADMIN)
    owner, post = await _flagged_post(db_session, make_account, make_post)

    reviewed = await svc.review_post(db_session, post.post_id, admin.id, ReviewAction.APPROVE)

    assert reviewed.is_removed is False
    assert reviewed.is_priority_review is False
    reports = await svc.list_post_reports(db_session, post.post_id)
    assert {r.status for r in reports} == {ReportStatus.REVIEWED_OK}
    assert (await reload(owner.id)).removed_post_count == 0


@pytest.mark.asyncio
async def test_review_closes_only_pending_reports(db_session, make_account, make_post) -> None:
    admin = await make_account("admin", role=AccountRole.ADMIN)
    owner, post = await _flagged_post(db_session, make_account, make_post, reports=1)
    await svc.review_post(db_session, post.post_id, admin.id, ReviewAction.APPROVE)

    late = await make_account("late")
    await svc.submit_report(db_session, post.post_id, late.id, ReportReason.HATEFUL)
    await svc.review_post(db_session, post.post_id, admin.id, ReviewAction.REMOVE)

    reports = await svc.list_post_reports(db_session, post.post_id)
    statuses = {r.reporter_id: r.status for r in reports}
    assert statuses[late.id] is ReportStatus.REMOVED
    assert sorted(statuses.values()) == sorted([ReportStatus.REVIEWED_OK, ReportStatus.REMOVED])


@pytest.mark.asyncio
async def test_review_requires_admin(db_session, make_account, make_post) -> None:
    user = await make_account("user")
    owner, post = await _flagged_post(db_session, make_account, make_post)
    with pytest.raises(AdminRequired):
        await svc.review_post(db_session, post.post_id, user.id, ReviewAction.REMOVE)
    assert (await get_post(db_session, post.post_id)).is_removed is False


@pytest.mark.asyncio
async def test_review_queue_orders_priority_first(db_session, make_account, make_post) -> None:
    owner = await make_account("owner")
    quiet = await make_post(owner, "quiet")
    loud = await make_post(owner, "loud")
    untouched = await make_post(owner, "untouched")
    reporters = [await make_account(f"rep{i}") for i in range(3)]

    await svc.submit_report(db_session, quiet.post_id, reporters[0].id, ReportReason.HATEFUL)
    for r in reporters:
        await svc.submit_report(db_session, loud.post_id, r.id, ReportReason.HATEFUL)

    rows, total, priority_total = await svc.list_review_queue(db_session)
    assert total == 2
    assert priority_total == 1
    assert [p.post_id for p, _ in rows] == [loud.post_id, quiet.post_id]
    assert [pending for _, pending in rows] == [3, 1]
    assert untouched.post_id not in {p.post_id for p, _ in rows}

    rows, total, _ = await svc.list_review_queue(db_session, priority_only=True)
    assert total == 1
    assert rows[0][0].post_id == loud.post_id
