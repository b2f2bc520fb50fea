"""Notification service.

Per-user notifications and the one-shot reminder dispatch. Dispatch is
caller-driven (CLI or an external cron); nothing here runs on a timer.
"""

import logging
from datetime import datetime
from typing import Optional

from nursecare.domain.enums import NotificationType
from nursecare.domain.models import Notification, Todo
from nursecare.domain.ports import NotFoundError, StorageError, StoragePort, TodoFilter
from nursecare.domain.services import DEFAULT_UPCOMING_HOURS, upcoming_todos, validate_hours
from nursecare.services.common import Clock, unwrap

logger = logging.getLogger(__name__)


def reminder_message(todo: Todo) -> str:
    return f"Reminder: '{todo.title}' is due at {todo.due_date:%Y-%m-%d %H:%M}"


class NotificationService:
    """Service for user notifications."""

    def __init__(self, storage: StoragePort, clock: Clock = datetime.now):
        """Initialize NotificationService.

        Parameters:
            storage: Storage adapter instance
            clock: Source of the current local time
        """
        self.storage = storage
        self.clock = clock

    def create(
        self,
        user_id: str,
        type: NotificationType,
        message: str,
        todo_id: Optional[str] = None
    ) -> Notification:
        notification = Notification(user_id=user_id, type=type, message=message, todo_id=todo_id)
        return unwrap(self.storage.save_notification(notification), "save_notification")

    def list_for_user(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        """A user's notifications, newest first."""
        return unwrap(self.storage.list_notifications(user_id, unread_only), "list_notifications")

    def _get(self, notification_id: str) -> Notification:
        notification = unwrap(self.storage.get_notification(notification_id), "get_notification")
        if notification is None:
            raise NotFoundError(
                "Notification not found", entity="notification", entity_id=notification_id
            )
        return notification

    def mark_as_read(self, notification_id: str) -> Notification:
        """Flag a notification read and stamp read_at."""
        notification = self._get(notification_id)
        updated = notification.model_copy(update={"read": True, "read_at": self.clock()})
        return unwrap(self.storage.save_notification(updated), "save_notification")

    def mark_all_as_read(self, user_id: str) -> int:
        """Flag every unread notification of a user read.

        Returns:
            int: Number of notifications updated
        """
        now = self.clock()
        unread = self.list_for_user(user_id, unread_only=True)
        for notification in unread:
            unwrap(
                self.storage.save_notification(
                    notification.model_copy(update={"read": True, "read_at": now})
                ),
                "save_notification"
            )
        return len(unread)

    def delete(self, notification_id: str) -> None:
        deleted = unwrap(self.storage.delete_notification(notification_id), "delete_notification")
        if not deleted:
            raise NotFoundError(
                "Notification not found", entity="notification", entity_id=notification_id
            )

    def dispatch_reminders(
        self,
        hours: float = DEFAULT_UPCOMING_HOURS,
        now: Optional[datetime] = None
    ) -> list[Notification]:
        """Create reminders for upcoming todos and flag them notified.

        Only todos with an assignee produce a notification; the
        notification_sent flag keeps a todo from being reminded twice.

        Returns:
            list[Notification]: Notifications created in this pass
        """
        validate_hours(hours)
        now = now or self.clock()
        open_todos = unwrap(self.storage.list_todos(TodoFilter(completed=False)), "list_todos")

        created = []
        for todo in upcoming_todos(open_todos, now, hours):
            if not todo.assigned_to_id:
                continue
            # A reminder is only saved for a todo already flagged as notified
            unwrap(
                self.storage.save_todo(todo.model_copy(update={"notification_sent": True})),
                "save_todo"
            )
            try:
                created.append(self.create(
                    user_id=todo.assigned_to_id,
                    type=NotificationType.TODO_REMINDER,
                    message=reminder_message(todo),
                    todo_id=todo.id,
                ))
            except StorageError:
                restored = self.storage.save_todo(todo)
                if restored.is_failure():
                    logger.error(f"Todo {todo.id} stays flagged without a reminder: {restored.error}")
                raise

        logger.info(f"Dispatched {len(created)} reminder(s) for the next {hours}h")
        return created
