"""
Counter maintainer — the only writer of an account's denormalized counters.

Each function is one conditional UPDATE executed inside the caller's
transaction, alongside the edge change it accounts for.  None of them may be
retried on their own.
"""
from __future__ import annotations

import logging
import uuid

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from app.accounts.models import Account

logger = logging.getLogger(__name__)


async def _increment(
    session: AsyncSession,
    account_id: uuid.UUID,
    column: InstrumentedAttribute,
    *,
    limit: int | None = None,
) -> bool:
    stmt = sa.update(Account).where(Account.id == account_id)
    if limit is not None:
        # compare-and-swap: the row lock taken here serializes racing follows
        stmt = stmt.where(column < limit)
    result = await session.execute(
        stmt.values({column.key: column + 1}).execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def _decrement(
    session: AsyncSession,
    account_id: uuid.UUID,
    column: InstrumentedAttribute,
) -> None:
    result = await session.execute(
        sa.update(Account)
        .where(Account.id == account_id, column > 0)
        .values({column.key: column - 1})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        logger.warning(
            "Counter %s for account %s already at zero; clamped", column.key, account_id
        )


async def increment_following(
    session: AsyncSession, account_id: uuid.UUID, *, limit: int | None = None
) -> bool:
    """Bump following_count; with ``limit`` only while it is below the limit."""
    return await _increment(session, account_id, Account.following_count, limit=limit)


async def decrement_following(session: AsyncSession, account_id: uuid.UUID) -> None:
    await _decrement(session, account_id, Account.following_count)


async def increment_follower(session: AsyncSession, account_id: uuid.UUID) -> bool:
    return await _increment(session, account_id, Account.follower_count)


async def decrement_follower(session: AsyncSession, account_id: uuid.UUID) -> None:
    await _decrement(session, account_id, Account.follower_count)


async def increment_removed_posts(session: AsyncSession, account_id: uuid.UUID) -> bool:
    return await _increment(session, account_id, Account.removed_post_count)
