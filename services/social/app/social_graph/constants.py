"""
Social graph domain — enums and limits.
"""
from __future__ import annotations

import enum

# Maximum number of approved outgoing follows per account (Dunbar's number).
FOLLOW_LIMIT: int = 150


class EdgeState(str, enum.Enum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"


class Direction(str, enum.Enum):
    """Which side of the edge the listed account sits on."""

    FOLLOWERS = "followers"
    FOLLOWING = "following"
