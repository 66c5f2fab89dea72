"""
Accounts domain — registration hook, profiles and admin account management.

Counters are never written here except through app.social_graph.counters.
"""
from __future__ import annotations

import logging
import uuid

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.constants import AccountRole
from app.accounts.models import Account
from app.database import atomic
from app.exceptions import (
    AccountExists,
    AccountNotFound,
    AdminRequired,
    CannotDeleteSelf,
    UsernameTaken,
    ValidationError,
)
from app.moderation.models import Report
from app.posts.models import Comment, Post
from app.social_graph import counters, store

logger = logging.getLogger(__name__)

# The only columns a profile update may touch.
_PROFILE_FIELDS = frozenset({"name", "bio", "avatar_url", "is_private"})


async def _load(session: AsyncSession, account_id: uuid.UUID) -> Account:
    account = await session.get(Account, account_id, populate_existing=True)
    if account is None:
        raise AccountNotFound()
    return account


async def _require_admin(session: AsyncSession, admin_id: uuid.UUID) -> Account:
    admin = await session.get(Account, admin_id, populate_existing=True)
    if admin is None or not admin.is_admin:
        raise AdminRequired()
    return admin


async def register_account(
    session: AsyncSession,
    account_id: uuid.UUID,
    username: str,
    name: str,
    *,
    is_private: bool = True,
    role: AccountRole = AccountRole.USER,
) -> Account:
    """Create the social profile for an identity the auth layer just registered."""
    async with atomic(session):
        if await session.get(Account, account_id) is not None:
            raise AccountExists()
        taken = await session.execute(
            sa.select(sa.exists().where(sa.func.lower(Account.username) == username.lower()))
        )
        if taken.scalar_one():
            raise UsernameTaken()
        account = Account(
            id=account_id,
            username=username,
            name=name,
            bio=None,
            avatar_url=None,
            is_private=is_private,
            role=role,
            follower_count=0,
            following_count=0,
            removed_post_count=0,
        )
        session.add(account)
        try:
            await session.flush()
        except IntegrityError as exc:
            raise UsernameTaken() from exc
    logger.info("Account %s registered as @%s", account_id, username)
    return account


async def get_account(session: AsyncSession, account_id: uuid.UUID) -> Account:
    async with atomic(session):
        return await _load(session, account_id)


async def search_accounts(
    session: AsyncSession,
    query: str,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Account], int]:
    """Search accounts by name or username using ILIKE."""
    pattern = f"%{query}%"
    base = sa.select(Account).where(
        sa.or_(Account.name.ilike(pattern), Account.username.ilike(pattern))
    )
    async with atomic(session):
        total = (
            await session.execute(sa.select(sa.func.count()).select_from(base.subquery()))
        ).scalar_one()
        result = await session.execute(
            base.order_by(Account.username.asc()).offset(offset).limit(limit)
        )
        return list(result.scalars().all()), total


async def update_profile(
    session: AsyncSession,
    account_id: uuid.UUID,
    fields: dict,
) -> Account:
    """Patch profile fields; counters and role are not updatable here."""
    unknown = set(fields) - _PROFILE_FIELDS
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}.")
    async with atomic(session):
        account = await _load(session, account_id)
        for key, value in fields.items():
            setattr(account, key, value)
        await session.flush()
    return account


async def promote_to_admin(
    session: AsyncSession,
    admin_id: uuid.UUID,
    username: str,
) -> Account:
    async with atomic(session):
        await _require_admin(session, admin_id)
        result = await session.execute(
            sa.select(Account)
            .where(sa.func.lower(Account.username) == username.lower())
            .execution_options(populate_existing=True)
        )
        account = result.scalar_one_or_none()
        if account is None:
            raise AccountNotFound()
        account.role = AccountRole.ADMIN
        await session.flush()
    logger.info("Account @%s promoted to admin by %s", username, admin_id)
    return account


async def bootstrap_admin(
    session: AsyncSession,
    account_id: uuid.UUID,
    username: str,
    name: str,
) -> tuple[Account, bool]:
    """
    Make sure ``username`` exists and holds the admin role.

    Used by scripts/create_admin.py to seed the first administrator, who
    cannot be promoted through the API.  Returns (account, created).
    """
    async with atomic(session):
        result = await session.execute(
            sa.select(Account)
            .where(sa.func.lower(Account.username) == username.lower())
            .execution_options(populate_existing=True)
        )
        existing = result.scalar_one_or_none()
        if existing is not None:
            existing.role = AccountRole.ADMIN
            await session.flush()
            return existing, False
    account = await register_account(
        session, account_id, username, name, role=AccountRole.ADMIN
    )
    return account, True


async def delete_account(
    session: AsyncSession,
    admin_id: uuid.UUID,
    account_id: uuid.UUID,
) -> None:
    """
    Remove an account and everything it owns.

    Each approved edge it took part in is released on the other side's
    counter within the same unit, so no counter outlives its edge.
    """
    if admin_id == account_id:
        raise CannotDeleteSelf()
    async with atomic(session):
        await _require_admin(session, admin_id)
        account = await _load(session, account_id)

        followed_ids, follower_ids = await store.detach_account(session, account_id)
        for target_id in followed_ids:
            await counters.decrement_follower(session, target_id)
        for follower_id in follower_ids:
            await counters.decrement_following(session, follower_id)

        own_posts = sa.select(Post.post_id).where(Post.owner_id == account_id)
        await session.execute(
            sa.delete(Comment)
            .where(sa.or_(Comment.author_id == account_id, Comment.post_id.in_(own_posts)))
            .execution_options(synchronize_session=False)
        )
        await session.execute(
            sa.delete(Report)
            .where(Report.post_id.in_(own_posts))
            .execution_options(synchronize_session=False)
        )
        await session.execute(
            sa.delete(Post)
            .where(Post.owner_id == account_id)
            .execution_options(synchronize_session=False)
        )
        await session.delete(account)
    logger.info(
        "Account %s deleted by %s (%d follows, %d followers released)",
        account_id,
        admin_id,
        len(followed_ids),
        len(follower_ids),
    )
