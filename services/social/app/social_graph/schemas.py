"""
Social graph domain — Pydantic V2 response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.social_graph.constants import EdgeState


class AccountRef(BaseModel):
    """Minimal profile embedded in follower / following / request lists."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    name: str
    avatar_url: str | None
    is_private: bool


class FollowResponse(BaseModel):
    target_id: uuid.UUID
    state: EdgeState
    message: str


class FollowListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID  # follow_id
    account: AccountRef  # the other party
    created_at: datetime


class FollowListResponse(BaseModel):
    items: list[FollowListItem]
    total: int
    page: int
    size: int


class RelationshipResponse(BaseModel):
    account_id: uuid.UUID
    following: EdgeState
    followed_by: EdgeState
