"""Notifications package."""

from fintrack.notifications.notifier import (
    NotificationListener,
    Notifier,
    configure_stdlib_logging,
)

__all__ = ["NotificationListener", "Notifier", "configure_stdlib_logging"]
