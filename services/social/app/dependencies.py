"""
Social service — FastAPI dependencies shared by every router.
"""
from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.models import Account
from app.config import Settings
from app.database import atomic, get_db
from app.events.publishers import EventPublisher
from app.exceptions import AdminRequired
from shared.auth.dependencies import (
    get_current_user_optional,
    get_current_user_required,
)
from shared.models.user import CurrentUser

# Routes import these aliases rather than the shared ones directly.
get_current_user = get_current_user_required
get_optional_user = get_current_user_optional


def get_settings() -> Settings:
    return Settings()


def get_event_publisher(request: Request) -> EventPublisher:
    return request.app.state.event_publisher


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """
    Raise 403 unless the caller's account holds the admin role.

    The stored role is authoritative: a promotion takes effect without a new
    token.
    """
    async with atomic(session):
        account = await session.get(Account, current_user.id, populate_existing=True)
    if account is None or not account.is_admin:
        raise AdminRequired()
    return current_user
