"""
Domain event fan-out.

Controllers publish only after the service call returned, i.e. after the
atomic unit committed.  A subscriber that raises is logged and skipped; the
remaining subscribers still run and the caller never sees the error.
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from uuid import UUID

from shared.events.schemas import (
    DomainEvent,
    FollowAccepted,
    Followed,
    FollowRequested,
    PostFlagged,
    PostReviewed,
)

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventPublisher:
    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    async def publish(self, event: DomainEvent) -> None:
        for handler in list(self._handlers):
            try:
                await handler(event)
            except Exception:
                logger.exception(
                    "Subscriber %s failed on %s",
                    getattr(handler, "__name__", handler),
                    event.event_type,
                )


async def log_event(event: DomainEvent) -> None:
    """Default subscriber until a push-notification dispatcher is wired in."""
    logger.info("event %s %s", event.event_type, event.model_dump_json(exclude={"event_type"}))


# ── Builders ──────────────────────────────────────────────────────────────────

def build_follow_event(
    follower_id: UUID, target_id: UUID, *, pending: bool
) -> FollowRequested | Followed:
    if pending:
        return FollowRequested(follower_id=follower_id, target_id=target_id)
    return Followed(follower_id=follower_id, target_id=target_id)


def build_follow_accepted_event(follower_id: UUID, target_id: UUID) -> FollowAccepted:
    return FollowAccepted(follower_id=follower_id, target_id=target_id)


def build_post_flagged_event(post_id: UUID, owner_id: UUID, report_count: int) -> PostFlagged:
    return PostFlagged(post_id=post_id, owner_id=owner_id, report_count=report_count)


def build_post_reviewed_event(
    post_id: UUID, owner_id: UUID, reviewer_id: UUID, action: str
) -> PostReviewed:
    return PostReviewed(
        post_id=post_id, owner_id=owner_id, reviewer_id=reviewer_id, action=action
    )
