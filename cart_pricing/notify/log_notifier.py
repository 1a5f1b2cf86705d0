"""Notification mechanism that writes into the structured log."""

from ..data.models import Notification, Severity
from .base import BaseNotifier

_LEVELS = {
    Severity.SUCCESS: "info",
    Severity.INFO: "info",
    Severity.WARNING: "warning",
    Severity.ERROR: "error",
}


class LogNotifier(BaseNotifier):
    """Routes notifications to structlog at a level matching their severity."""

    def __init__(self, name: str = "log", config=None):
        super().__init__(name, config)

    def _send(self, notification: Notification) -> None:
        log = getattr(self.logger, _LEVELS[notification.severity])
        log(
            notification.message,
            title=notification.title,
            severity=notification.severity.value
        )
