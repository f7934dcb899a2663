"""Public helpers for emitting and reading notifications."""

from .dispatcher import (
    NotificationDispatcher,
    NotificationValidationError,
    validate_notification,
)
from .inbox import (
    NotificationNotFoundError,
    clear_all_notifications,
    clear_notification,
    list_inbox,
    mark_all_notifications_read,
    mark_notification_read,
    resolve_inbox_limit,
)
from .session_emails import (
    render_session_email,
    select_email_recipients,
    send_session_lifecycle_email,
)

__all__ = [
    "NotificationDispatcher",
    "NotificationNotFoundError",
    "NotificationValidationError",
    "clear_all_notifications",
    "clear_notification",
    "list_inbox",
    "mark_all_notifications_read",
    "mark_notification_read",
    "render_session_email",
    "resolve_inbox_limit",
    "select_email_recipients",
    "send_session_lifecycle_email",
    "validate_notification",
]
