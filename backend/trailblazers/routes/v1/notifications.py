# backend/trailblazers/routes/v1/notifications.py
"""
Notification inbox routes - API v1.

Mutations publish a feed event after their write commits; ``/stream``
relays the caller's feed as Server-Sent Events so a badge can follow the
unread count without polling.
"""

from collections.abc import AsyncGenerator
import logging

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from sse_starlette.sse import EventSourceResponse

from ...api.dependencies import get_current_user, get_notification_service, get_stream_user
from ...schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    NotificationUnreadCountResponse,
)
from ...services.identity_service import AuthUser
from ...services.notification_feed import NotificationFeed
from ...services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications-v1"])

SSE_PING_SECONDS = 15


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    limit: int = Query(50, ge=1, le=100),
    unread_only: bool = Query(False),
    current_user: AuthUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationListResponse:
    """List notifications for the current user, newest first."""
    notifications = service.list_notifications(
        current_user.uid, unread_only=unread_only, limit=limit
    )
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        total=len(notifications),
        unread_count=service.unread_count(current_user.uid),
    )


@router.get("/unread-count", response_model=NotificationUnreadCountResponse)
def get_unread_count(
    current_user: AuthUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationUnreadCountResponse:
    return NotificationUnreadCountResponse(unread_count=service.unread_count(current_user.uid))


@router.get("/stream")
async def stream_notifications(
    current_user: AuthUser = Depends(get_stream_user),
) -> EventSourceResponse:
    """SSE stream of the caller's notification events."""
    logger.info("[NOTIFY-SSE] Stream opened for user %s", current_user.uid)

    async def event_generator() -> AsyncGenerator[dict[str, str], None]:
        async with NotificationFeed(current_user.uid) as feed:
            async for event in feed:
                yield {"event": event.kind, "data": event.to_json()}

    return EventSourceResponse(
        event_generator(),
        ping=SSE_PING_SECONDS,
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_notifications_read(
    current_user: AuthUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
) -> MarkAllReadResponse:
    updated = await run_in_threadpool(service.mark_all_read, current_user.uid)
    await service.flush_events()
    return MarkAllReadResponse(updated=updated)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    current_user: AuthUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    notification = await run_in_threadpool(service.mark_read, notification_id, current_user.uid)
    await service.flush_events()
    return NotificationResponse.model_validate(notification)
