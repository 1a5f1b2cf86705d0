"""
Keyed single-slot debouncer for user edits.

Each (item id, field) pair owns at most one pending edit. Scheduling a new
edit for a pair cancels the previous timer for that exact pair; other pairs
are untouched. Timers run on anything exposing ``call_later(delay, callback)``
and returning a handle with ``cancel()``, which is the asyncio event loop
by default.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

import structlog

from ..data.models import EditField

logger = structlog.get_logger(__name__)

EditKey = tuple[str, EditField]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


@dataclass
class PendingEdit:
    """An edit waiting for its quiet period to elapse."""
    item_id: str
    field: EditField
    value: float
    callback: Callable[[], None]
    handle: Optional[TimerHandle] = None

    @property
    def key(self) -> EditKey:
        return (self.item_id, self.field)


class Debouncer:
    """Per-key debounce timers with cancel-on-reschedule semantics."""

    def __init__(self, quiet_period_ms: int = 500, scheduler: Optional[Scheduler] = None):
        self.quiet_period_ms = quiet_period_ms
        self._scheduler = scheduler
        self._pending: dict[EditKey, PendingEdit] = {}

    @property
    def quiet_period(self) -> float:
        """Quiet period in seconds."""
        return self.quiet_period_ms / 1000

    @property
    def scheduler(self) -> Scheduler:
        """
        The injected scheduler, else the running asyncio loop.

        Raises:
            RuntimeError: If no scheduler was injected and no loop is running
        """
        if self._scheduler is not None:
            return self._scheduler
        try:
            return asyncio.get_running_loop()
        except RuntimeError as e:
            raise RuntimeError(
                "Debouncer needs an injected scheduler or a running event loop"
            ) from e

    def schedule(
        self,
        item_id: str,
        field: EditField,
        value: float,
        callback: Callable[[], None]
    ) -> PendingEdit:
        """Schedule ``callback`` after the quiet period, replacing any pending edit for the pair."""
        scheduler = self.scheduler
        key = (item_id, field)
        previous = self._pending.pop(key, None)
        if previous is not None and previous.handle is not None:
            previous.handle.cancel()
            logger.debug(
                "Cancelled pending edit",
                item_id=item_id,
                field=field.value,
                superseded_value=previous.value
            )

        edit = PendingEdit(item_id=item_id, field=field, value=value, callback=callback)
        edit.handle = scheduler.call_later(self.quiet_period, self._fire, edit)
        self._pending[key] = edit
        return edit

    def _fire(self, edit: PendingEdit) -> None:
        # A handle cancelled after its callback was queued can still run; only
        # the edit currently in the slot may commit.
        if self._pending.get(edit.key) is not edit:
            return
        del self._pending[edit.key]
        edit.callback()

    def cancel(self, item_id: str, field: EditField) -> bool:
        """Cancel the pending edit for one pair. Returns True if one existed."""
        edit = self._pending.pop((item_id, field), None)
        if edit is None:
            return False
        if edit.handle is not None:
            edit.handle.cancel()
        return True

    def cancel_all(self) -> int:
        """Cancel every pending edit. Returns the number cancelled."""
        pending = list(self._pending.values())
        self._pending.clear()
        for edit in pending:
            if edit.handle is not None:
                edit.handle.cancel()
        if pending:
            logger.info("Cancelled all pending edits", count=len(pending))
        return len(pending)

    def flush(self) -> int:
        """Run every pending edit now, in scheduling order. Returns the number run."""
        pending = list(self._pending.values())
        for edit in pending:
            if edit.handle is not None:
                edit.handle.cancel()
            self._fire(edit)
        return len(pending)

    def pending(self) -> list[PendingEdit]:
        """Pending edits in scheduling order."""
        return list(self._pending.values())

    def __contains__(self, key: object) -> bool:
        return key in self._pending

    def __len__(self) -> int:
        return len(self._pending)
