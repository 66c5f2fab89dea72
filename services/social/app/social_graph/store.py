"""
Relationship store — the only writer of follow edge existence and state.

Every function runs inside the caller's transaction (see app.database.atomic)
and never commits.  State-changing statements carry the expected state in
their WHERE clause so a concurrent transition makes them miss rather than
double-apply.
"""
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.models import Account
from app.exceptions import DuplicateEdge, EdgeNotFound, SelfReference
from app.social_graph.constants import Direction, EdgeState
from app.social_graph.models import Follow


def _pair(follower_id: uuid.UUID, following_id: uuid.UUID) -> tuple:
    return (Follow.follower_id == follower_id, Follow.following_id == following_id)


async def create_edge(
    session: AsyncSession,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
    *,
    pending: bool,
) -> Follow:
    if follower_id == following_id:
        raise SelfReference()
    edge = Follow(follower_id=follower_id, following_id=following_id, is_pending=pending)
    session.add(edge)
    try:
        await session.flush()
    except IntegrityError as exc:
        # uq_follows_pair: a concurrent unit inserted the same pair first
        raise DuplicateEdge() from exc
    return edge


async def transition_to_approved(
    session: AsyncSession,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
) -> None:
    result = await session.execute(
        sa.update(Follow)
        .where(*_pair(follower_id, following_id), Follow.is_pending.is_(True))
        .values(is_pending=False)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise EdgeNotFound()


async def delete_edge(
    session: AsyncSession,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
    *,
    pending: bool | None = None,
) -> None:
    """Delete the edge; ``pending`` restricts the delete to that state."""
    stmt = sa.delete(Follow).where(*_pair(follower_id, following_id))
    if pending is not None:
        stmt = stmt.where(Follow.is_pending.is_(pending))
    result = await session.execute(stmt.execution_options(synchronize_session=False))
    if result.rowcount == 0:
        raise EdgeNotFound()


async def edge_state(
    session: AsyncSession,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
) -> EdgeState:
    result = await session.execute(
        sa.select(Follow.is_pending).where(*_pair(follower_id, following_id))
    )
    is_pending = result.scalar_one_or_none()
    if is_pending is None:
        return EdgeState.NONE
    return EdgeState.PENDING if is_pending else EdgeState.APPROVED


async def _list_edges(
    session: AsyncSession,
    account_id: uuid.UUID,
    direction: Direction,
    *,
    pending: bool,
    page: int,
    size: int,
) -> tuple[list[tuple[Follow, Account]], int]:
    """
    Return (rows, total) where each row is (Follow, Account[other party]).

    FOLLOWERS lists edges pointing at ``account_id``; FOLLOWING lists edges
    leaving it.  Newest edges first.
    """
    if direction is Direction.FOLLOWERS:
        own_side, other_side = Follow.following_id, Follow.follower_id
    else:
        own_side, other_side = Follow.follower_id, Follow.following_id

    conditions = (own_side == account_id, Follow.is_pending.is_(pending))
    total_r = await session.execute(
        sa.select(sa.func.count()).select_from(Follow).where(*conditions)
    )
    total = total_r.scalar_one()

    rows_r = await session.execute(
        sa.select(Follow, Account)
        .join(Account, Account.id == other_side)
        .where(*conditions)
        .order_by(Follow.created_at.desc(), Follow.follow_id)
        .limit(size)
        .offset((page - 1) * size)
    )
    return [(f, a) for f, a in rows_r.all()], total


async def list_approved(
    session: AsyncSession,
    account_id: uuid.UUID,
    direction: Direction,
    *,
    page: int = 1,
    size: int = 50,
) -> tuple[list[tuple[Follow, Account]], int]:
    return await _list_edges(
        session, account_id, direction, pending=False, page=page, size=size
    )


async def list_pending(
    session: AsyncSession,
    account_id: uuid.UUID,
    direction: Direction,
    *,
    page: int = 1,
    size: int = 50,
) -> tuple[list[tuple[Follow, Account]], int]:
    """FOLLOWERS = incoming requests, FOLLOWING = outgoing requests."""
    return await _list_edges(
        session, account_id, direction, pending=True, page=page, size=size
    )


def approved_following_ids(account_id: uuid.UUID) -> sa.Select:
    """Subquery of account ids that ``account_id`` actively follows."""
    return sa.select(Follow.following_id).where(
        Follow.follower_id == account_id, Follow.is_pending.is_(False)
    )


async def detach_account(
    session: AsyncSession, account_id: uuid.UUID
) -> tuple[list[uuid.UUID], list[uuid.UUID]]:
    """
    Delete every edge touching ``account_id``.

    Returns (followed_ids, follower_ids) for the approved edges removed so the
    caller can decrement the counterparties' counters in the same unit.
    """
    followed_r = await session.execute(
        sa.select(Follow.following_id).where(
            Follow.follower_id == account_id, Follow.is_pending.is_(False)
        )
    )
    follower_r = await session.execute(
        sa.select(Follow.follower_id).where(
            Follow.following_id == account_id, Follow.is_pending.is_(False)
        )
    )
    followed_ids = list(followed_r.scalars().all())
    follower_ids = list(follower_r.scalars().all())
    await session.execute(
        sa.delete(Follow)
        .where(sa.or_(Follow.follower_id == account_id, Follow.following_id == account_id))
        .execution_options(synchronize_session=False)
    )
    return followed_ids, follower_ids
