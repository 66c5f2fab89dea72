"""
Posts domain — Pydantic V2 request/response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class _Base(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class CreatePostRequest(_Base):
    content: str = Field(min_length=1, max_length=5000)
    media_urls: list[str] = Field(default_factory=list, max_length=10)


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    post_id: uuid.UUID
    owner_id: uuid.UUID
    content: str
    media_urls: list[str]
    created_at: datetime
    is_removed: bool


class PostListResponse(BaseModel):
    items: list[PostResponse]
    total: int
    page: int
    size: int


class CreateCommentRequest(_Base):
    content: str = Field(min_length=1, max_length=2000)


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    comment_id: uuid.UUID
    post_id: uuid.UUID
    author_id: uuid.UUID
    content: str
    created_at: datetime


class CommentListResponse(BaseModel):
    items: list[CommentResponse]
