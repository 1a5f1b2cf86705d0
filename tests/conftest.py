"""Pytest configuration and shared fixtures."""

import heapq
import itertools
from typing import Any, Callable, Dict, List

import pytest

from cart_pricing.config.defaults import get_default_config
from cart_pricing.data.models import Notification
from cart_pricing.engine import ReconciliationEngine
from cart_pricing.notify.base import BaseNotifier


class ManualHandle:
    """Timer handle returned by ManualScheduler."""

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic stand-in for the event loop's call_later."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[tuple] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualHandle:
        handle = ManualHandle(self.now + delay, callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    def advance(self, seconds: float) -> None:
        """Move the clock forward, running every timer that comes due."""
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target + 1e-9:
            when, _, handle = heapq.heappop(self._queue)
            self.now = when
            if not handle.cancelled:
                handle.callback(*handle.args)
        self.now = target

    @property
    def active(self) -> int:
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)


class RecordingNotifier(BaseNotifier):
    """Notifier that keeps every notification it receives."""

    def __init__(self) -> None:
        super().__init__("recording")
        self.sent: List[Notification] = []

    def _send(self, notification: Notification) -> None:
        self.sent.append(notification)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def sample_records() -> List[Dict[str, Any]]:
    """Flat cart records as returned by the record source."""
    return [
        {"id": "item-1", "price": 10.0, "cost": 6.0, "pricing_restricted": False},
        {"id": "item-2", "price": 20.0, "cost": 15.0, "pricing_restricted": False},
        {"id": "item-3", "price": 50.0, "cost": 40.0, "pricing_restricted": True},
    ]


@pytest.fixture
def nested_records() -> List[Dict[str, Any]]:
    """Cart records in the record system's nested product shape."""
    return [
        {
            "Id": "802A0001",
            "SalesPrice": 125.0,
            "Product2": {"Product_Cost__c": 100.0, "Agency_Pricing__c": False},
        },
        {
            "Id": "802A0002",
            "SalesPrice": 80.0,
            "Product2": {"Product_Cost__c": 60.0, "Agency_Pricing__c": True},
        },
    ]


@pytest.fixture
def engine(scheduler, sample_records) -> ReconciliationEngine:
    engine = ReconciliationEngine(get_default_config(), scheduler=scheduler)
    engine.load(sample_records)
    return engine
