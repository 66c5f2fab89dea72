"""
Accounts domain — Pydantic V2 request/response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.accounts.constants import AccountRole


class _Base(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


# ── Requests ───────────────────────────────────────────────────────────────────

class RegisterAccountRequest(_Base):
    """Social profile for the identity in the caller's token."""

    username: str = Field(
        min_length=3,
        max_length=50,
        pattern=r"^[A-Za-z0-9_.]+$",
        description="Unique handle (letters, digits, underscore, dot)",
    )
    name: str = Field(min_length=1, max_length=150)
    is_private: bool = Field(True, description="New accounts are private unless stated")


class UpdateProfileRequest(_Base):
    """All fields optional; only the provided ones change."""

    name: str | None = Field(None, min_length=1, max_length=150)
    bio: str | None = Field(None, max_length=500)
    avatar_url: str | None = Field(None, max_length=1024)
    is_private: bool | None = None


# ── Responses ──────────────────────────────────────────────────────────────────

class PublicAccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    name: str
    bio: str | None
    avatar_url: str | None
    is_private: bool
    follower_count: int
    following_count: int


class AccountResponse(PublicAccountResponse):
    """The caller's own profile, including role and moderation history."""

    role: AccountRole
    removed_post_count: int
    created_at: datetime


class AccountSearchResponse(BaseModel):
    items: list[PublicAccountResponse]
    total: int
    page: int
    size: int


class MessageResponse(BaseModel):
    message: str
