"""
Posts domain — posts, feed and comments, gated by the visibility resolver.
"""
from __future__ import annotations

import logging
import uuid

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import atomic
from app.accounts.models import Account
from app.exceptions import (
    AccountNotFound,
    CommentNotAllowed,
    NotPostOwner,
    PostNotFound,
    PostsHidden,
)
from app.moderation.models import Report
from app.posts.models import Comment, Post
from app.social_graph import store
from app.visibility import service as visibility

logger = logging.getLogger(__name__)


async def get_post(session: AsyncSession, post_id: uuid.UUID) -> Post:
    async with atomic(session):
        result = await session.execute(
            sa.select(Post)
            .where(Post.post_id == post_id)
            .execution_options(populate_existing=True)
        )
        post = result.scalar_one_or_none()
    if post is None:
        raise PostNotFound()
    return post


async def create_post(
    session: AsyncSession,
    owner_id: uuid.UUID,
    content: str,
    media_urls: list[str] | None = None,
) -> Post:
    post = Post(owner_id=owner_id, content=content, media_urls=list(media_urls or []))
    async with atomic(session):
        if await session.get(Account, owner_id) is None:
            raise AccountNotFound()
        session.add(post)
        await session.flush()
    return post


async def delete_post(session: AsyncSession, owner_id: uuid.UUID, post_id: uuid.UUID) -> None:
    """Hard-delete a post with its comments and reports (author only)."""
    async with atomic(session):
        post = await get_post(session, post_id)
        if post.owner_id != owner_id:
            raise NotPostOwner()
        await session.execute(
            sa.delete(Comment)
            .where(Comment.post_id == post_id)
            .execution_options(synchronize_session=False)
        )
        await session.execute(
            sa.delete(Report)
            .where(Report.post_id == post_id)
            .execution_options(synchronize_session=False)
        )
        await session.delete(post)
    logger.info("Post %s deleted by its author", post_id)


async def list_account_posts(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    owner_id: uuid.UUID,
    *,
    page: int,
    size: int,
) -> tuple[list[Post], int]:
    """Posts of ``owner_id`` newest first; removed posts only show to their owner."""
    async with atomic(session):
        if not await visibility.can_view_posts(session, viewer_id, owner_id):
            raise PostsHidden()
        conditions = [Post.owner_id == owner_id]
        if viewer_id != owner_id:
            conditions.append(Post.is_removed.is_(False))
        total = (
            await session.execute(
                sa.select(sa.func.count()).select_from(Post).where(*conditions)
            )
        ).scalar_one()
        rows = await session.execute(
            sa.select(Post)
            .where(*conditions)
            .order_by(Post.created_at.desc(), Post.post_id)
            .limit(size)
            .offset((page - 1) * size)
            .execution_options(populate_existing=True)
        )
        return list(rows.scalars().all()), total


async def get_feed(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    *,
    page: int,
    size: int,
) -> tuple[list[Post], int]:
    """Own posts plus posts of accounts the viewer actively follows."""
    authors = sa.or_(
        Post.owner_id == viewer_id,
        Post.owner_id.in_(store.approved_following_ids(viewer_id)),
    )
    conditions = (authors, Post.is_removed.is_(False))
    async with atomic(session):
        total = (
            await session.execute(
                sa.select(sa.func.count()).select_from(Post).where(*conditions)
            )
        ).scalar_one()
        rows = await session.execute(
            sa.select(Post)
            .where(*conditions)
            .order_by(Post.created_at.desc(), Post.post_id)
            .limit(size)
            .offset((page - 1) * size)
            .execution_options(populate_existing=True)
        )
        return list(rows.scalars().all()), total


# ── Comments ───────────────────────────────────────────────────────────────────

async def add_comment(
    session: AsyncSession,
    author_id: uuid.UUID,
    post_id: uuid.UUID,
    content: str,
) -> Comment:
    async with atomic(session):
        post = await get_post(session, post_id)
        if post.is_removed and post.owner_id != author_id:
            raise PostNotFound()
        if not await visibility.can_comment(session, author_id, post.owner_id):
            raise CommentNotAllowed()
        comment = Comment(post_id=post_id, author_id=author_id, content=content)
        session.add(comment)
        await session.flush()
    return comment


async def list_comments(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    post_id: uuid.UUID,
) -> list[Comment]:
    async with atomic(session):
        post = await get_post(session, post_id)
        if post.is_removed and post.owner_id != viewer_id:
            raise PostNotFound()
        if not await visibility.can_view_posts(session, viewer_id, post.owner_id):
            raise PostsHidden()
        rows = await session.execute(
            sa.select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.asc(), Comment.comment_id)
        )
        return list(rows.scalars().all())
