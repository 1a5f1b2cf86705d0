"""
UI-facing cart pricing session.

Binds the reconciliation engine to the fetch, write and notification
collaborators and exposes the entry points a rendering layer calls:
``on_price_edit``, ``on_margin_edit``, ``save`` and ``refresh``.
"""

from collections.abc import Awaitable
from pathlib import Path
from typing import Any, Callable, Optional

import structlog

from .commit.coordinator import BatchCommitCoordinator, CommitResult, WriteFn
from .config.defaults import DefaultConfig, get_default_config
from .config.loader import ConfigLoader
from .data.models import EditStatus, FetchResult, LineItem, Notification, Severity
from .engine import ReconciliationEngine
from .errors import FetchError, error_message
from .notify import BaseNotifier, LogNotifier, create_notifier
from .state.debounce import Scheduler

logger = structlog.get_logger(__name__)

FetchFn = Callable[[str], Awaitable[FetchResult]]

SAVE_SUCCESS_MESSAGE = "Changes saved successfully"
SAVE_ERROR_MESSAGE = "Error saving changes"
REFRESH_ERROR_MESSAGE = "Error refreshing cart items"


class CartPricingSession:
    """
    One user's pricing session over a single cart.

    No collaborator failure escapes the public entry points; failures are
    retained in ``error_msg`` and reported through the notifier.

    Edits are debounced on ``scheduler`` when one is given, otherwise on the
    running asyncio loop. Without either, ``on_price_edit`` and
    ``on_margin_edit`` raise RuntimeError.
    """

    def __init__(
        self,
        fetch: FetchFn,
        write: WriteFn,
        notifier: Optional[BaseNotifier] = None,
        config: Optional[DefaultConfig] = None,
        scheduler: Optional[Scheduler] = None,
        shop_cart_id: Optional[str] = None
    ) -> None:
        self.config = config or get_default_config()
        self.logger = logger

        self.fetch = fetch
        self.notifier = notifier or LogNotifier()
        self.engine = ReconciliationEngine(self.config, scheduler)
        self.coordinator = BatchCommitCoordinator(write)

        self._cart_id: Optional[str] = shop_cart_id
        self._error_msg: Optional[str] = None

    @classmethod
    def from_config(
        cls,
        fetch: FetchFn,
        write: WriteFn,
        config_dir: Optional[Path] = None,
        overrides: Optional[dict[str, Any]] = None,
        **kwargs: Any
    ) -> "CartPricingSession":
        """Build a session from pricing.yaml plus overrides, with the configured notifier."""
        config = ConfigLoader.create(config_dir).load(overrides)
        kwargs.setdefault("notifier", create_notifier(config.notifications))
        return cls(fetch, write, config=config, **kwargs)

    @property
    def shop_cart_id(self) -> str:
        return self._cart_id or ""

    @shop_cart_id.setter
    def shop_cart_id(self, value: Optional[str]) -> None:
        self._cart_id = value
        self.logger.info("Cart id set", cart_id=value)

    @property
    def items(self) -> tuple[LineItem, ...]:
        return self.engine.items

    @property
    def error_msg(self) -> Optional[str]:
        return self._error_msg

    def on_price_edit(self, item_id: str, raw_value: Any) -> EditStatus:
        return self.engine.on_price_edit(item_id, raw_value)

    def on_margin_edit(self, item_id: str, raw_value: Any) -> EditStatus:
        return self.engine.on_margin_edit(item_id, raw_value)

    async def refresh(self) -> bool:
        """
        Re-fetch the cart and re-seed the collection.

        Pending edits are cancelled first so none can commit into the
        refreshed collection. Returns True when items were loaded.
        """
        cancelled = self.engine.cancel_pending()
        cart_id = self.shop_cart_id
        self.logger.info("Refreshing cart items", cart_id=cart_id, cancelled_edits=cancelled)

        try:
            result = await self.fetch(cart_id)
        except Exception as e:
            error = FetchError(error_message(e), cart_id=cart_id, cause=e)
            self.logger.error("Fetch collaborator raised", cart_id=cart_id, error=error.message)
            result = FetchResult(error=error)

        self.engine.load(result)

        if self.engine.error is not None:
            self._error_msg = self.engine.error
            self._show_error(REFRESH_ERROR_MESSAGE)
            return False

        self._error_msg = None
        self.logger.info("Cart items refreshed successfully", cart_id=cart_id, count=len(self.engine))
        return True

    async def save(self) -> CommitResult:
        """
        Write every item's price and report one aggregate outcome.

        On failure nothing is rolled back; writes that already succeeded
        stay applied in the record store.
        """
        if self.config.session.flush_pending_on_save:
            flushed = self.engine.flush()
            if flushed:
                self.logger.info("Committed pending edits before save", count=flushed)

        result = await self.coordinator.save(self.engine.items)

        if not result.ok:
            self._error_msg = result.message
            self._show_error(SAVE_ERROR_MESSAGE)
            return result

        self._error_msg = None
        self._show_success(SAVE_SUCCESS_MESSAGE)

        if self.config.session.refresh_after_save:
            await self.refresh()

        return result

    def _show_success(self, message: str) -> None:
        self.notifier.notify(Notification(title="Success", message=message, severity=Severity.SUCCESS))

    def _show_error(self, message: str) -> None:
        self.notifier.notify(Notification(title="Error", message=message, severity=Severity.ERROR))
