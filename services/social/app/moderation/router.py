"""
Moderation domain — user-facing routes.

Routes:
  POST /api/v1/posts/{post_id}/report   Report a post (once per reporter)
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import get_db
from app.dependencies import get_current_user, get_event_publisher, get_settings
from app.events.publishers import EventPublisher
from app.moderation import controller as ctrl
from app.moderation.schemas import ReportRequest, ReportResponse
from shared.models.user import CurrentUser

router = APIRouter(tags=["moderation"])


@router.post(
    "/posts/{post_id}/report",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report a post",
    description=(
        "Reasons: Hateful, Harmful_or_Abusive, Criminal_Activity, Sexually_Explicit. "
        "A post reaching the report threshold moves to the priority review queue."
    ),
)
async def report_post(
    post_id: uuid.UUID,
    body: ReportRequest,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    publisher: EventPublisher = Depends(get_event_publisher),
) -> ReportResponse:
    return await ctrl.report_post(
        session,
        publisher,
        current_user.id,
        post_id,
        body,
        threshold=settings.report_priority_threshold,
    )
