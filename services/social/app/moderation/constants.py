"""
Moderation domain — report reasons, statuses and the priority threshold.
"""
from __future__ import annotations

import enum

# Posts with this many reports jump to the priority review queue.
PRIORITY_REVIEW_THRESHOLD: int = 3


class ReportReason(str, enum.Enum):
    HATEFUL = "Hateful"
    HARMFUL_OR_ABUSIVE = "Harmful_or_Abusive"
    CRIMINAL_ACTIVITY = "Criminal_Activity"
    SEXUALLY_EXPLICIT = "Sexually_Explicit"


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWED_OK = "reviewed_ok"
    REMOVED = "removed"


class ReviewAction(str, enum.Enum):
    APPROVE = "approve"
    REMOVE = "remove"

    @property
    def report_status(self) -> ReportStatus:
        if self is ReviewAction.REMOVE:
            return ReportStatus.REMOVED
        return ReportStatus.REVIEWED_OK
