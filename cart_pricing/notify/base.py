"""Base classes for user notification mechanisms."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import structlog

from ..data.models import Notification


class NotificationStatus(Enum):
    """Notification delivery status."""
    SENT = "sent"
    FAILED = "failed"


@dataclass
class NotificationResult:
    """Result of handing a notification to its destination."""
    status: NotificationStatus
    message: Optional[str] = None
    error: Optional[Exception] = None


class BaseNotifier(ABC):
    """
    Base class for notification mechanisms.

    Notifications are fire-and-forget: ``notify`` reports failures in its
    result and never raises.
    """

    def __init__(self, name: str, config: Any = None):
        self.name = name
        self.config = config
        self.logger = structlog.get_logger(f"notify.{name}")
        self._sent_count = 0
        self._error_count = 0

    @abstractmethod
    def _send(self, notification: Notification) -> None:
        """Send one notification; raise on failure."""
        pass

    def notify(self, notification: Notification) -> NotificationResult:
        """Send a notification, converting any failure into a FAILED result."""
        try:
            self._send(notification)
        except Exception as e:
            self._error_count += 1
            self.logger.error(
                "Failed to send notification",
                notifier=self.name,
                title=notification.title,
                error=str(e)
            )
            return NotificationResult(
                status=NotificationStatus.FAILED,
                message=f"{self.name} error: {e}",
                error=e
            )

        self._sent_count += 1
        return NotificationResult(status=NotificationStatus.SENT)

    def get_stats(self) -> dict[str, Any]:
        """Get notification statistics."""
        return {
            "name": self.name,
            "sent_count": self._sent_count,
            "error_count": self._error_count,
        }

    def reset_stats(self):
        """Reset notification statistics."""
        self._sent_count = 0
        self._error_count = 0
