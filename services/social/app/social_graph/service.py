"""
Social graph domain — follow workflow (zero FastAPI imports).

State rules per ordered pair (follower → target):
  Absent  → Pending    request_follow on a private target
  Absent  → Approved   request_follow on a public target
  Pending → Approved   accept_follow (by target)
  Pending → Absent     reject_follow (by target) / cancel_follow_request (by follower)
  Approved → Absent    unfollow (by follower) / remove_follower (by target)

Counters move only on transitions into or out of Approved.  Every operation
is one atomic unit: the capacity check is the conditional counter UPDATE
itself, so two racing follows from the same account cannot both pass it.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.models import Account
from app.database import atomic
from app.exceptions import (
    AccountNotFound,
    AlreadyRelated,
    DuplicateEdge,
    EdgeNotFound,
    FollowCapReached,
    NotAFollower,
    NotFollowing,
    RequestNotFound,
    SelfFollow,
    TargetNotFound,
)
from app.social_graph import counters, store
from app.social_graph.constants import FOLLOW_LIMIT, Direction, EdgeState
from app.social_graph.models import Follow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Relationship:
    """Edge state in both directions between the viewer and another account."""

    following: EdgeState
    followed_by: EdgeState


async def _get_account(session: AsyncSession, account_id: uuid.UUID) -> Account | None:
    result = await session.execute(
        sa.select(Account)
        .where(Account.id == account_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _approve_counters(
    session: AsyncSession,
    follower_id: uuid.UUID,
    target_id: uuid.UUID,
    *,
    limit: int,
) -> None:
    if not await counters.increment_following(session, follower_id, limit=limit):
        raise FollowCapReached(limit)
    await counters.increment_follower(session, target_id)


async def _release_counters(
    session: AsyncSession, follower_id: uuid.UUID, target_id: uuid.UUID
) -> None:
    await counters.decrement_following(session, follower_id)
    await counters.decrement_follower(session, target_id)


# ── Follow ─────────────────────────────────────────────────────────────────────

async def request_follow(
    session: AsyncSession,
    follower_id: uuid.UUID,
    target_id: uuid.UUID,
    *,
    limit: int = FOLLOW_LIMIT,
) -> Follow:
    """
    Follow ``target_id``.

    Public targets are followed immediately; private targets get a pending
    request and no counter changes until they accept.
    """
    if follower_id == target_id:
        raise SelfFollow()
    async with atomic(session):
        target = await _get_account(session, target_id)
        if target is None:
            raise TargetNotFound()
        follower = await _get_account(session, follower_id)
        if follower is None:
            raise AccountNotFound()
        if await store.edge_state(session, follower_id, target_id) is not EdgeState.NONE:
            raise AlreadyRelated()

        try:
            if target.is_private:
                if follower.following_count >= limit:
                    raise FollowCapReached(limit)
                edge = await store.create_edge(session, follower_id, target_id, pending=True)
            else:
                # Counter CAS first: it locks the follower row for the rest of the unit.
                if not await counters.increment_following(session, follower_id, limit=limit):
                    raise FollowCapReached(limit)
                edge = await store.create_edge(session, follower_id, target_id, pending=False)
                await counters.increment_follower(session, target_id)
        except DuplicateEdge as exc:
            raise AlreadyRelated() from exc

    logger.info(
        "Follow %s → %s created (%s)",
        follower_id,
        target_id,
        "pending" if edge.is_pending else "approved",
    )
    return edge


async def accept_follow(
    session: AsyncSession,
    follower_id: uuid.UUID,
    target_id: uuid.UUID,
    *,
    limit: int = FOLLOW_LIMIT,
) -> None:
    """Target approves a pending request; counts exactly like a public follow."""
    async with atomic(session):
        try:
            await store.transition_to_approved(session, follower_id, target_id)
        except EdgeNotFound as exc:
            raise RequestNotFound() from exc
        # A follower who filled up their cap since requesting keeps the request pending.
        await _approve_counters(session, follower_id, target_id, limit=limit)
    logger.info("Follow request %s → %s accepted", follower_id, target_id)


async def reject_follow(
    session: AsyncSession,
    follower_id: uuid.UUID,
    target_id: uuid.UUID,
) -> None:
    async with atomic(session):
        try:
            await store.delete_edge(session, follower_id, target_id, pending=True)
        except EdgeNotFound as exc:
            raise RequestNotFound() from exc
    logger.info("Follow request %s → %s rejected", follower_id, target_id)


async def cancel_follow_request(
    session: AsyncSession,
    follower_id: uuid.UUID,
    target_id: uuid.UUID,
) -> None:
    """Follower withdraws their own pending request."""
    async with atomic(session):
        try:
            await store.delete_edge(session, follower_id, target_id, pending=True)
        except EdgeNotFound as exc:
            raise RequestNotFound() from exc


async def unfollow(
    session: AsyncSession,
    follower_id: uuid.UUID,
    target_id: uuid.UUID,
) -> None:
    async with atomic(session):
        try:
            await store.delete_edge(session, follower_id, target_id, pending=False)
        except EdgeNotFound as exc:
            raise NotFollowing() from exc
        await _release_counters(session, follower_id, target_id)
    logger.info("Unfollow %s → %s", follower_id, target_id)


async def remove_follower(
    session: AsyncSession,
    owner_id: uuid.UUID,
    follower_id: uuid.UUID,
) -> None:
    """Owner forcibly detaches one of their followers."""
    async with atomic(session):
        try:
            await store.delete_edge(session, follower_id, owner_id, pending=False)
        except EdgeNotFound as exc:
            raise NotAFollower() from exc
        await _release_counters(session, follower_id, owner_id)
    logger.info("Follower %s removed by %s", follower_id, owner_id)


# ── Reads ──────────────────────────────────────────────────────────────────────

async def get_relationship(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    other_id: uuid.UUID,
) -> Relationship:
    async with atomic(session):
        following = await store.edge_state(session, viewer_id, other_id)
        followed_by = await store.edge_state(session, other_id, viewer_id)
    return Relationship(following=following, followed_by=followed_by)


async def get_followers(
    session: AsyncSession, user_id: uuid.UUID, *, page: int, size: int
) -> tuple[list[tuple[Follow, Account]], int]:
    async with atomic(session):
        return await store.list_approved(
            session, user_id, Direction.FOLLOWERS, page=page, size=size
        )


async def get_following(
    session: AsyncSession, user_id: uuid.UUID, *, page: int, size: int
) -> tuple[list[tuple[Follow, Account]], int]:
    async with atomic(session):
        return await store.list_approved(
            session, user_id, Direction.FOLLOWING, page=page, size=size
        )


async def get_incoming_requests(
    session: AsyncSession, user_id: uuid.UUID, *, page: int, size: int
) -> tuple[list[tuple[Follow, Account]], int]:
    async with atomic(session):
        return await store.list_pending(
            session, user_id, Direction.FOLLOWERS, page=page, size=size
        )


async def get_outgoing_requests(
    session: AsyncSession, user_id: uuid.UUID, *, page: int, size: int
) -> tuple[list[tuple[Follow, Account]], int]:
    async with atomic(session):
        return await store.list_pending(
            session, user_id, Direction.FOLLOWING, page=page, size=size
        )
