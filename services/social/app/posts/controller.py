"""
Posts domain — request orchestration.
"""
from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.posts import service as svc
from app.posts.schemas import (
    CommentListResponse,
    CommentResponse,
    CreateCommentRequest,
    CreatePostRequest,
    PostListResponse,
    PostResponse,
)


async def create_post(
    session: AsyncSession,
    owner_id: uuid.UUID,
    body: CreatePostRequest,
) -> PostResponse:
    post = await svc.create_post(session, owner_id, body.content, body.media_urls)
    return PostResponse.model_validate(post)


async def delete_post(
    session: AsyncSession,
    owner_id: uuid.UUID,
    post_id: uuid.UUID,
) -> None:
    await svc.delete_post(session, owner_id, post_id)


async def list_account_posts(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    owner_id: uuid.UUID,
    page: int,
    size: int,
) -> PostListResponse:
    posts, total = await svc.list_account_posts(
        session, viewer_id, owner_id, page=page, size=size
    )
    return PostListResponse(
        items=[PostResponse.model_validate(p) for p in posts],
        total=total,
        page=page,
        size=size,
    )


async def feed(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    page: int,
    size: int,
) -> PostListResponse:
    posts, total = await svc.get_feed(session, viewer_id, page=page, size=size)
    return PostListResponse(
        items=[PostResponse.model_validate(p) for p in posts],
        total=total,
        page=page,
        size=size,
    )


async def add_comment(
    session: AsyncSession,
    author_id: uuid.UUID,
    post_id: uuid.UUID,
    body: CreateCommentRequest,
) -> CommentResponse:
    comment = await svc.add_comment(session, author_id, post_id, body.content)
    return CommentResponse.model_validate(comment)


async def list_comments(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    post_id: uuid.UUID,
) -> CommentListResponse:
    comments = await svc.list_comments(session, viewer_id, post_id)
    return CommentListResponse(items=[CommentResponse.model_validate(c) for c in comments])
