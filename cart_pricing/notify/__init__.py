"""
Notification module.

Delivers save/refresh outcomes to the user through a pluggable notifier.
"""
from ..config.defaults import NotificationParams
from .base import BaseNotifier, NotificationResult, NotificationStatus
from .log_notifier import LogNotifier
from .stdout_notifier import StdoutNotifier


def create_notifier(params: NotificationParams) -> BaseNotifier:
    """Build the notifier selected by configuration."""
    if params.method == "stdout":
        return StdoutNotifier(config=params)
    return LogNotifier(config=params)


__all__ = [
    "BaseNotifier",
    "LogNotifier",
    "NotificationResult",
    "NotificationStatus",
    "StdoutNotifier",
    "create_notifier",
]
