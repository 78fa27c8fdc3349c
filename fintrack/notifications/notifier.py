"""
Notifier

DESIGN DECISION: Every outcome of a user-facing operation is reported
exactly once. The notifier:
- Always writes the notification to the structured log
- Keeps a short history for the presentation layer to show
- Fans out to listeners (toasts) without letting a broken listener
  affect the state manager
"""

import logging
from collections import deque
from typing import Callable, Optional

import structlog

from fintrack.models.notification import Notification, NotificationLevel


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_stdlib_logging(level: str = "INFO") -> None:
    """Route structlog output to stderr at the given level."""
    logging.basicConfig(format="%(message)s", level=level.upper())


NotificationListener = Callable[[Notification], None]


class Notifier:
    """
    Central notification service.

    Publishes notifications to:
    1. Structured local log (for debugging)
    2. Subscribed listeners (for user visibility)
    """

    def __init__(self, history_size: int = 50):
        """
        Initialize notifier.

        Args:
            history_size: How many recent notifications to keep.
        """
        self._history: deque[Notification] = deque(maxlen=history_size)
        self._listeners: list[NotificationListener] = []
        self._logger = structlog.get_logger(__name__)

    @property
    def history(self) -> list[Notification]:
        """Recent notifications, oldest first."""
        return list(self._history)

    @property
    def latest(self) -> Optional[Notification]:
        return self._history[-1] if self._history else None

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        """
        Register a listener.

        Returns a callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, notification: Notification) -> None:
        """Log a notification and deliver it to every listener."""
        log_dict = notification.to_log_dict()

        if notification.level is NotificationLevel.ERROR:
            self._logger.error("notification", **log_dict)
        elif notification.level is NotificationLevel.WARNING:
            self._logger.warning("notification", **log_dict)
        else:
            self._logger.info("notification", **log_dict)

        self._history.append(notification)

        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "notification_listener_failed",
                    error=str(e),
                    notification_id=str(notification.notification_id),
                    exc_info=True,
                )

    def clear_history(self) -> None:
        self._history.clear()
