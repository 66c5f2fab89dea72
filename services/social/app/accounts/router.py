"""
Accounts domain — user-facing routes.

Routes (prefix /api/v1/accounts):
  POST   ""               Create the caller's social account (id from the token)
  GET    ""               Search accounts by name or username
  GET    /me              Own profile, including role and counters
  PATCH  /me              Update name, bio, avatar URL or privacy
  GET    /{account_id}    Another account's public profile

/me routes are registered before /{account_id} so the literal path wins.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts import controller as ctrl
from app.accounts.schemas import (
    AccountResponse,
    AccountSearchResponse,
    PublicAccountResponse,
    RegisterAccountRequest,
    UpdateProfileRequest,
)
from app.database import get_db
from app.dependencies import get_current_user
from shared.models.user import CurrentUser

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create my social account",
    description="Called once after sign-up. Accounts are private unless `is_private` is false.",
)
async def register(
    body: RegisterAccountRequest,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> AccountResponse:
    return await ctrl.register(session, current_user.id, body)


@router.get(
    "",
    response_model=AccountSearchResponse,
    summary="Search accounts",
)
async def search(
    q: str = Query(..., min_length=1, max_length=100, description="Name or username fragment"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> AccountSearchResponse:
    return await ctrl.search(session, q, page=page, size=size)


@router.get(
    "/me",
    response_model=AccountResponse,
    summary="Get my profile",
)
async def get_me(
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> AccountResponse:
    return await ctrl.get_me(session, current_user.id)


@router.patch(
    "/me",
    response_model=AccountResponse,
    summary="Update my profile",
    description="Counters and role cannot be changed here.",
)
async def update_me(
    body: UpdateProfileRequest,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> AccountResponse:
    return await ctrl.update_me(session, current_user.id, body)


@router.get(
    "/{account_id}",
    response_model=PublicAccountResponse,
    summary="Get a public profile",
)
async def get_account(
    account_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> PublicAccountResponse:
    return await ctrl.get_public(session, account_id)
