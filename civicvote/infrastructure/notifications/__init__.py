"""Realtime notification helpers for the infrastructure layer."""

from .manager import NotificationConnectionManager, notification_manager
from .publisher import (
    NEW_NOTIFICATION_MESSAGE,
    NotificationPublisher,
    notification_publisher,
    serialize_notification,
)

__all__ = [
    "NEW_NOTIFICATION_MESSAGE",
    "NotificationConnectionManager",
    "notification_manager",
    "NotificationPublisher",
    "notification_publisher",
    "serialize_notification",
]
