"""
Social graph domain — user-facing routes.

All routes prefixed /api/v1/users.

Routes:
  POST   /{user_id}/follow              Follow (public) or request to follow (private)
  DELETE /{user_id}/follow              Unfollow
  DELETE /{user_id}/follow-request      Withdraw my pending request
  DELETE /{user_id}/follower            Remove one of my followers
  GET    /{user_id}/relationship        Edge state in both directions
  POST   /requests/{user_id}/accept     Accept an incoming request
  POST   /requests/{user_id}/reject     Reject an incoming request
  GET    /me/followers                  Who follows me (paginated)
  GET    /me/following                  Who I follow (paginated)
  GET    /me/requests                   Incoming pending requests
  GET    /me/requests/outgoing          My pending requests

Note: /me/... and /requests/... routes are registered before /{user_id}/...
routes so Starlette's literal-path matching takes precedence.
"""
import uuid

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import get_db
from app.dependencies import get_current_user, get_event_publisher, get_settings
from app.events.publishers import EventPublisher
from app.rate_limit import follow_rate_limit, limiter
from app.social_graph import controller as ctrl
from app.social_graph.schemas import (
    FollowListResponse,
    FollowResponse,
    RelationshipResponse,
)
from shared.models.user import CurrentUser

router = APIRouter(prefix="/users", tags=["social-graph"])


# ── My lists ───────────────────────────────────────────────────────────────────

@router.get(
    "/me/followers",
    response_model=FollowListResponse,
    summary="List accounts that follow me",
)
async def my_followers(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> FollowListResponse:
    return await ctrl.list_followers(session, current_user.id, page=page, size=size)


@router.get(
    "/me/following",
    response_model=FollowListResponse,
    summary="List accounts I follow",
)
async def my_following(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> FollowListResponse:
    return await ctrl.list_following(session, current_user.id, page=page, size=size)


@router.get(
    "/me/requests",
    response_model=FollowListResponse,
    summary="List follow requests waiting for my decision",
)
async def my_incoming_requests(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> FollowListResponse:
    return await ctrl.list_incoming_requests(session, current_user.id, page=page, size=size)


@router.get(
    "/me/requests/outgoing",
    response_model=FollowListResponse,
    summary="List my pending follow requests",
)
async def my_outgoing_requests(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> FollowListResponse:
    return await ctrl.list_outgoing_requests(session, current_user.id, page=page, size=size)


# ── Request decisions ──────────────────────────────────────────────────────────

@router.post(
    "/requests/{user_id}/accept",
    status_code=status.HTTP_200_OK,
    summary="Accept a follow request",
    description="Fails with 409 if the requester has reached their follow limit since asking.",
)
async def accept_request(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    publisher: EventPublisher = Depends(get_event_publisher),
) -> dict:
    return await ctrl.accept_request(
        session, publisher, current_user.id, user_id, limit=settings.follow_limit
    )


@router.post(
    "/requests/{user_id}/reject",
    status_code=status.HTTP_200_OK,
    summary="Reject a follow request",
)
async def reject_request(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> dict:
    return await ctrl.reject_request(session, current_user.id, user_id)


# ── Follow ─────────────────────────────────────────────────────────────────────

@router.post(
    "/{user_id}/follow",
    response_model=FollowResponse,
    status_code=status.HTTP_200_OK,
    summary="Follow a user",
    description=(
        "Public accounts are followed immediately; private accounts receive a "
        "request. Rate-limited to 50 follow actions per hour."
    ),
)
@limiter.limit(follow_rate_limit)
async def follow_user(
    request: Request,
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    publisher: EventPublisher = Depends(get_event_publisher),
) -> FollowResponse:
    return await ctrl.follow_user(
        session, publisher, current_user.id, user_id, limit=settings.follow_limit
    )


@router.delete(
    "/{user_id}/follow",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unfollow a user",
)
async def unfollow_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> None:
    await ctrl.unfollow_user(session, current_user.id, user_id)


@router.delete(
    "/{user_id}/follow-request",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Withdraw a pending follow request",
)
async def cancel_request(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> None:
    await ctrl.cancel_request(session, current_user.id, user_id)


@router.delete(
    "/{user_id}/follower",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a follower",
)
async def remove_follower(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> None:
    await ctrl.remove_follower(session, current_user.id, user_id)


@router.get(
    "/{user_id}/relationship",
    response_model=RelationshipResponse,
    summary="Relationship with another user",
)
async def relationship(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> RelationshipResponse:
    return await ctrl.relationship(session, current_user.id, user_id)
