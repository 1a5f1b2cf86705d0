"""Standard output notification mechanism."""

import json
import sys
from datetime import datetime, timezone

from ..config.defaults import NotificationParams
from ..data.models import Notification
from .base import BaseNotifier


class StdoutNotifier(BaseNotifier):
    """Prints notifications to stdout, either pretty or as JSON lines."""

    def __init__(self, name: str = "stdout", config: NotificationParams = None):
        super().__init__(name, config or NotificationParams(method="stdout"))
        self.config: NotificationParams

    def _send(self, notification: Notification) -> None:
        print(self._format(notification), file=sys.stdout, flush=True)

    def _format(self, notification: Notification) -> str:
        """Format notification for stdout output."""
        if self.config.format == "json":
            payload = notification.to_dict()
            payload["timestamp"] = datetime.now(timezone.utc).isoformat()
            return json.dumps(payload)

        return f"[{notification.severity.value.upper()}] {notification.title}: {notification.message}"
