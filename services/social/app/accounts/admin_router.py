"""
Accounts domain — admin-facing routes.

Routes:
  POST   /api/v1/admin/accounts/promote/{username}   Grant the admin role
  DELETE /api/v1/admin/accounts/{account_id}         Delete an account and its content

Requires: an account holding the admin role.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts import controller as ctrl
from app.accounts.schemas import AccountResponse, MessageResponse
from app.database import get_db
from app.dependencies import require_admin
from shared.models.user import CurrentUser

router = APIRouter(prefix="/admin/accounts", tags=["admin-accounts"])


@router.post(
    "/promote/{username}",
    response_model=AccountResponse,
    summary="[Admin] Promote an account to admin",
)
async def promote(
    username: str,
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> AccountResponse:
    return await ctrl.promote(session, admin.id, username)


@router.delete(
    "/{account_id}",
    response_model=MessageResponse,
    summary="[Admin] Delete an account",
    description=(
        "Removes the account's follow edges (releasing every counterparty's counter), "
        "its posts with their comments and reports, and its comments elsewhere."
    ),
)
async def delete_account(
    account_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> MessageResponse:
    return await ctrl.delete(session, admin.id, account_id)
