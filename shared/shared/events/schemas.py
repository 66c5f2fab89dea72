from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DomainEvent(BaseModel):
    """Base for events handed to notification subscribers after commit."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    event_type: str
    occurred_at: datetime = Field(default_factory=_utcnow)


class FollowRequested(DomainEvent):
    """A follow request is waiting for the private target's decision."""

    event_type: str = "follow_requested"
    follower_id: UUID
    target_id: UUID


class Followed(DomainEvent):
    """A public account gained a follower immediately."""

    event_type: str = "followed"
    follower_id: UUID
    target_id: UUID


class FollowAccepted(DomainEvent):
    event_type: str = "follow_accepted"
    follower_id: UUID
    target_id: UUID


class PostFlagged(DomainEvent):
    """A post's report count reached the priority-review threshold."""

    event_type: str = "post_flagged"
    post_id: UUID
    owner_id: UUID
    report_count: int


class PostReviewed(DomainEvent):
    event_type: str = "post_reviewed"
    post_id: UUID
    owner_id: UUID
    reviewer_id: UUID
    action: str
