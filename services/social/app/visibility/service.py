"""
Visibility resolver — who may read an account's posts and who may comment.

An account always sees and comments on its own content.  Anyone else needs
an approved follow edge viewer → owner.  The owner's privacy flag plays no
part here: it only decides whether new follow requests start pending, and a
pending request grants nothing.
"""
from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.database import atomic
from app.social_graph import store
from app.social_graph.constants import EdgeState


async def _actively_follows(
    session: AsyncSession, viewer_id: uuid.UUID, owner_id: uuid.UUID
) -> bool:
    async with atomic(session):
        state = await store.edge_state(session, viewer_id, owner_id)
    return state is EdgeState.APPROVED


async def can_view_posts(
    session: AsyncSession, viewer_id: uuid.UUID | None, owner_id: uuid.UUID
) -> bool:
    if viewer_id is None:
        return False
    if viewer_id == owner_id:
        return True
    return await _actively_follows(session, viewer_id, owner_id)


async def can_comment(
    session: AsyncSession, viewer_id: uuid.UUID | None, owner_id: uuid.UUID
) -> bool:
    # Commenting follows the read rule.
    return await can_view_posts(session, viewer_id, owner_id)
