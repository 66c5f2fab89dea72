"""
Posts domain — routes.

Routes (prefix /api/v1):
  POST   /posts                        Create a post
  DELETE /posts/{post_id}              Delete my post
  GET    /feed                         My posts plus posts of accounts I follow
  GET    /users/{user_id}/posts        An account's posts (followers only)
  POST   /posts/{post_id}/comments     Comment (followers only)
  GET    /posts/{post_id}/comments     List comments (followers only)
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user
from app.posts import controller as ctrl
from app.posts.schemas import (
    CommentListResponse,
    CommentResponse,
    CreateCommentRequest,
    CreatePostRequest,
    PostListResponse,
    PostResponse,
)
from shared.models.user import CurrentUser

router = APIRouter(tags=["posts"])


@router.post(
    "/posts",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a post",
    description="Media URLs are stored as given; upload happens elsewhere.",
)
async def create_post(
    body: CreatePostRequest,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> PostResponse:
    return await ctrl.create_post(session, current_user.id, body)


@router.delete(
    "/posts/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete my post",
)
async def delete_post(
    post_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> None:
    await ctrl.delete_post(session, current_user.id, post_id)


@router.get(
    "/feed",
    response_model=PostListResponse,
    summary="Home feed",
    description="Newest first. Removed posts are excluded.",
)
async def feed(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> PostListResponse:
    return await ctrl.feed(session, current_user.id, page=page, size=size)


@router.get(
    "/users/{user_id}/posts",
    response_model=PostListResponse,
    summary="List an account's posts",
    description="Returns 403 unless you are the owner or an approved follower.",
)
async def account_posts(
    user_id: uuid.UUID,
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> PostListResponse:
    return await ctrl.list_account_posts(
        session, current_user.id, user_id, page=page, size=size
    )


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a post",
)
async def add_comment(
    post_id: uuid.UUID,
    body: CreateCommentRequest,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CommentResponse:
    return await ctrl.add_comment(session, current_user.id, post_id, body)


@router.get(
    "/posts/{post_id}/comments",
    response_model=CommentListResponse,
    summary="List comments on a post",
)
async def list_comments(
    post_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CommentListResponse:
    return await ctrl.list_comments(session, current_user.id, post_id)
