"""
Social graph domain — request orchestration.

Events are published here, after the service call has committed.
"""
from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.events.publishers import (
    EventPublisher,
    build_follow_accepted_event,
    build_follow_event,
)
from app.social_graph import service as svc
from app.social_graph.constants import EdgeState
from app.social_graph.schemas import (
    AccountRef,
    FollowListItem,
    FollowListResponse,
    FollowResponse,
    RelationshipResponse,
)


def _list_response(rows, total: int, page: int, size: int) -> FollowListResponse:
    items = [
        FollowListItem(
            id=f.follow_id,
            account=AccountRef.model_validate(a),
            created_at=f.created_at,
        )
        for f, a in rows
    ]
    return FollowListResponse(items=items, total=total, page=page, size=size)


async def follow_user(
    session: AsyncSession,
    publisher: EventPublisher,
    follower_id: uuid.UUID,
    target_id: uuid.UUID,
    *,
    limit: int,
) -> FollowResponse:
    edge = await svc.request_follow(session, follower_id, target_id, limit=limit)
    await publisher.publish(build_follow_event(follower_id, target_id, pending=edge.is_pending))
    if edge.is_pending:
        return FollowResponse(
            target_id=target_id, state=EdgeState.PENDING, message="Follow request sent."
        )
    return FollowResponse(
        target_id=target_id, state=EdgeState.APPROVED, message="Followed successfully."
    )


async def unfollow_user(
    session: AsyncSession,
    follower_id: uuid.UUID,
    target_id: uuid.UUID,
) -> None:
    await svc.unfollow(session, follower_id, target_id)


async def cancel_request(
    session: AsyncSession,
    follower_id: uuid.UUID,
    target_id: uuid.UUID,
) -> None:
    await svc.cancel_follow_request(session, follower_id, target_id)


async def remove_follower(
    session: AsyncSession,
    owner_id: uuid.UUID,
    follower_id: uuid.UUID,
) -> None:
    await svc.remove_follower(session, owner_id, follower_id)


async def accept_request(
    session: AsyncSession,
    publisher: EventPublisher,
    target_id: uuid.UUID,
    follower_id: uuid.UUID,
    *,
    limit: int,
) -> dict:
    await svc.accept_follow(session, follower_id, target_id, limit=limit)
    await publisher.publish(build_follow_accepted_event(follower_id, target_id))
    return {"message": "Follow request accepted."}


async def reject_request(
    session: AsyncSession,
    target_id: uuid.UUID,
    follower_id: uuid.UUID,
) -> dict:
    await svc.reject_follow(session, follower_id, target_id)
    return {"message": "Follow request rejected."}


async def relationship(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    other_id: uuid.UUID,
) -> RelationshipResponse:
    rel = await svc.get_relationship(session, viewer_id, other_id)
    return RelationshipResponse(
        account_id=other_id, following=rel.following, followed_by=rel.followed_by
    )


async def list_followers(
    session: AsyncSession, user_id: uuid.UUID, page: int, size: int
) -> FollowListResponse:
    rows, total = await svc.get_followers(session, user_id, page=page, size=size)
    return _list_response(rows, total, page, size)


async def list_following(
    session: AsyncSession, user_id: uuid.UUID, page: int, size: int
) -> FollowListResponse:
    rows, total = await svc.get_following(session, user_id, page=page, size=size)
    return _list_response(rows, total, page, size)


async def list_incoming_requests(
    session: AsyncSession, user_id: uuid.UUID, page: int, size: int
) -> FollowListResponse:
    rows, total = await svc.get_incoming_requests(session, user_id, page=page, size=size)
    return _list_response(rows, total, page, size)


async def list_outgoing_requests(
    session: AsyncSession, user_id: uuid.UUID, page: int, size: int
) -> FollowListResponse:
    rows, total = await svc.get_outgoing_requests(session, user_id, page=page, size=size)
    return _list_response(rows, total, page, size)
