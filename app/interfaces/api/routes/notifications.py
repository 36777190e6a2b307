"""Endpoints for sending notifications and managing a user's inbox."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.application.use_cases.notifications import (
    NotificationDeliveryService,
    NotificationReadStateService,
)
from app.domain.entities import BroadcastResult, NotificationAudience, User
from app.domain.exceptions import InvalidIdentifierError, InvalidNotificationRequest
from app.interfaces.api.dependencies import (
    get_current_active_user,
    get_delivery_service,
    get_read_state_service,
    require_admin,
)
from app.interfaces.api.routes_helpers import (
    notification_to_schema,
    resolve_inbox_owner,
    summary_to_schema,
)
from app.interfaces.api.schemas import (
    BroadcastResultRead,
    MarkAllReadResponse,
    NotificationBroadcastRequest,
    NotificationListMeta,
    NotificationListResponse,
    NotificationRead,
    NotificationSendRequest,
    NotificationSummaryRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


def _delivery_result(result) -> NotificationRead | BroadcastResultRead:
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send notification",
        )
    if isinstance(result, BroadcastResult):
        return BroadcastResultRead.model_validate(result)
    return notification_to_schema(result)


@router.post("/send", response_model=NotificationRead | BroadcastResultRead)
def send_notification(
    body: NotificationSendRequest,
    service: NotificationDeliveryService = Depends(get_delivery_service),
    _: User = Depends(require_admin),
):
    """Deliver a notification to one user or to every member."""

    try:
        result = service.send(
            audience=body.audience,
            target_id=body.target_id,
            type=body.type,
            title=body.title,
            message=body.message,
            payload=body.payload,
        )
    except InvalidNotificationRequest as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _delivery_result(result)


@router.post("/broadcast", response_model=BroadcastResultRead)
def broadcast_notification(
    body: NotificationBroadcastRequest,
    service: NotificationDeliveryService = Depends(get_delivery_service),
    _: User = Depends(require_admin),
):
    """Deliver a notification to every member."""

    if body.audience != NotificationAudience.ALL_USERS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid audience for broadcast",
        )
    try:
        result = service.broadcast(
            type=body.type,
            title=body.title,
            message=body.message,
            payload=body.payload,
        )
    except InvalidNotificationRequest as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _delivery_result(result)


@router.get("/", response_model=NotificationListResponse)
def list_notifications(
    page: int | None = Query(None, description="Page number, starting at 1"),
    limit: int | None = Query(None, description="Page size, between 5 and 100"),
    status_filter: str = Query("all", alias="status", description="all, read or unread"),
    user_id: str | None = Query(None, description="Admin only: inspect another user"),
    service: NotificationReadStateService = Depends(get_read_state_service),
    current_user: User = Depends(get_current_active_user),
) -> NotificationListResponse:
    """Return a page of the authenticated user's notifications, newest first."""

    try:
        result = service.list_for_user(
            resolve_inbox_owner(current_user, user_id),
            page=page,
            limit=limit,
            status=status_filter,
        )
    except InvalidIdentifierError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return NotificationListResponse(
        items=[notification_to_schema(item) for item in result.items],
        meta=NotificationListMeta.model_validate(result.meta),
    )


@router.get("/summary", response_model=NotificationSummaryRead)
def notification_summary(
    user_id: str | None = Query(None, description="Admin only: inspect another user"),
    service: NotificationReadStateService = Depends(get_read_state_service),
    current_user: User = Depends(get_current_active_user),
) -> NotificationSummaryRead:
    """Return unread counters and the latest notification."""

    try:
        summary = service.get_summary(resolve_inbox_owner(current_user, user_id))
    except InvalidIdentifierError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return summary_to_schema(summary)


@router.patch("/read-all", response_model=MarkAllReadResponse)
def mark_all_notifications_read(
    service: NotificationReadStateService = Depends(get_read_state_service),
    current_user: User = Depends(get_current_active_user),
) -> MarkAllReadResponse:
    """Mark every unread notification of the authenticated user as read."""

    try:
        updated = service.mark_all_as_read(current_user.id)
    except InvalidIdentifierError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return MarkAllReadResponse(updated=updated)


@router.patch("/{notification_id}/read", response_model=NotificationRead)
def mark_notification_read(
    notification_id: str,
    service: NotificationReadStateService = Depends(get_read_state_service),
    current_user: User = Depends(get_current_active_user),
) -> NotificationRead:
    """Mark one notification as read; repeated calls keep the first ``read_at``."""

    try:
        updated = service.mark_as_read(current_user.id, notification_id)
    except InvalidIdentifierError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return notification_to_schema(updated)
