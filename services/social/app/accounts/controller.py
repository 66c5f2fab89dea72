"""
Accounts domain — request orchestration.
"""
from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts import service as svc
from app.accounts.schemas import (
    AccountResponse,
    AccountSearchResponse,
    MessageResponse,
    PublicAccountResponse,
    RegisterAccountRequest,
    UpdateProfileRequest,
)


async def register(
    session: AsyncSession,
    account_id: uuid.UUID,
    body: RegisterAccountRequest,
) -> AccountResponse:
    account = await svc.register_account(
        session, account_id, body.username, body.name, is_private=body.is_private
    )
    return AccountResponse.model_validate(account)


async def get_me(session: AsyncSession, account_id: uuid.UUID) -> AccountResponse:
    account = await svc.get_account(session, account_id)
    return AccountResponse.model_validate(account)


async def update_me(
    session: AsyncSession,
    account_id: uuid.UUID,
    body: UpdateProfileRequest,
) -> AccountResponse:
    fields = body.model_dump(exclude_unset=True)
    # bio and avatar_url may be cleared with null; name and is_private may not
    for key in ("name", "is_private"):
        if key in fields and fields[key] is None:
            del fields[key]
    account = await svc.update_profile(session, account_id, fields)
    return AccountResponse.model_validate(account)


async def get_public(session: AsyncSession, account_id: uuid.UUID) -> PublicAccountResponse:
    account = await svc.get_account(session, account_id)
    return PublicAccountResponse.model_validate(account)


async def search(
    session: AsyncSession,
    query: str,
    page: int,
    size: int,
) -> AccountSearchResponse:
    accounts, total = await svc.search_accounts(
        session, query, limit=size, offset=(page - 1) * size
    )
    return AccountSearchResponse(
        items=[PublicAccountResponse.model_validate(a) for a in accounts],
        total=total,
        page=page,
        size=size,
    )


async def promote(
    session: AsyncSession,
    admin_id: uuid.UUID,
    username: str,
) -> AccountResponse:
    account = await svc.promote_to_admin(session, admin_id, username)
    return AccountResponse.model_validate(account)


async def delete(
    session: AsyncSession,
    admin_id: uuid.UUID,
    account_id: uuid.UUID,
) -> MessageResponse:
    await svc.delete_account(session, admin_id, account_id)
    return MessageResponse(message="Account deleted.")
