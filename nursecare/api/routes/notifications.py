"""Notification endpoints.

The acting user is identified by the ``X-User-Id`` request header.
"""

import logging

from fastapi import APIRouter, Header, Query, Response, status
from pydantic import BaseModel

from nursecare.api.dependencies import NotificationServiceDep
from nursecare.domain.models import Notification

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


class MarkAllReadResponse(BaseModel):
    updated: int


@router.get("", response_model=list[Notification])
async def list_notifications(
    service: NotificationServiceDep,
    user_id: str = Header(..., alias="X-User-Id"),
    unread_only: bool = Query(False, alias="unreadOnly", description="Only unread notifications"),
) -> list[Notification]:
    """Notifications of the current user, newest first."""
    return service.list_for_user(user_id, unread_only=unread_only)


@router.put("/read-all", response_model=MarkAllReadResponse)
async def mark_all_as_read(
    service: NotificationServiceDep,
    user_id: str = Header(..., alias="X-User-Id"),
) -> MarkAllReadResponse:
    return MarkAllReadResponse(updated=service.mark_all_as_read(user_id))


@router.put("/{notification_id}/read", response_model=Notification)
async def mark_as_read(notification_id: str, service: NotificationServiceDep) -> Notification:
    return service.mark_as_read(notification_id)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(notification_id: str, service: NotificationServiceDep) -> Response:
    service.delete(notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
