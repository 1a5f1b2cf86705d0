"""
Price/margin reconciliation engine.

Owns the cart's line items, seeds them from the record source, and applies
debounced user edits to either price or margin while re-deriving the other.
"""

from collections.abc import Iterable
from functools import partial
from typing import Any, Callable, Optional, Union

import structlog

from .config.defaults import DefaultConfig, get_default_config
from .data.models import EditField, EditStatus, FetchResult, LineItem
from .data.parsers import ParseError, parse_raw_item
from .errors import (
    EditRejectedError,
    ForbiddenEditError,
    InvalidInputError,
    NonFiniteResultError,
    NotFoundError,
    error_message,
)
from .logging.config import get_edit_logger, log_edit_decision
from .pricing.margin import margin, parse_amount, price_from_margin
from .state.debounce import Debouncer, PendingEdit, Scheduler

logger = structlog.get_logger(__name__)
edit_logger = get_edit_logger(__name__)

Listener = Callable[[tuple[LineItem, ...]], None]


class ReconciliationEngine:
    """
    Keeps each line item's price and margin consistent.

    Observers read ``items``, an immutable tuple rebuilt on every mutation,
    so a changed collection is always a new object.

    Edit intake needs ``scheduler`` or a running asyncio loop to debounce on.
    """

    def __init__(
        self,
        config: Optional[DefaultConfig] = None,
        scheduler: Optional[Scheduler] = None
    ) -> None:
        self.config = config or get_default_config()
        self.logger = logger
        self.edit_logger = edit_logger

        self.debouncer = Debouncer(self.config.debounce.quiet_period_ms, scheduler)

        self._items: dict[str, LineItem] = {}
        self._snapshot: tuple[LineItem, ...] = ()
        self._listeners: list[Listener] = []

        self.revision = 0
        self.error: Optional[str] = None

    # Read side

    @property
    def items(self) -> tuple[LineItem, ...]:
        """Current snapshot of the collection, in source order."""
        return self._snapshot

    def get(self, item_id: str) -> Optional[LineItem]:
        return self._items.get(item_id)

    def __len__(self) -> int:
        return len(self._items)

    def subscribe(self, listener: Listener) -> None:
        """Call ``listener`` with the new snapshot after every mutation."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # Arithmetic bound to configuration

    def margin(self, price: Any, cost: Any) -> float:
        return margin(price, cost, self.config.pricing.decimals)

    def price_from_margin(self, margin_pct: float, cost: float) -> float:
        pricing = self.config.pricing
        return price_from_margin(
            margin_pct,
            cost,
            decimals=pricing.decimals,
            ceiling_policy=pricing.margin_ceiling_policy,
            max_margin_pct=pricing.max_margin_pct,
        )

    # Seeding

    def load(self, source: Union[FetchResult, Iterable[Any]]) -> tuple[LineItem, ...]:
        """
        Seed the collection from a fetch result or a sequence of records.

        A fetch result carrying an error empties the collection and records
        the error message instead of raising. Records that cannot be parsed
        are skipped.
        """
        if isinstance(source, FetchResult):
            if source.error is not None or source.data is None:
                self.error = error_message(source.error) if source.error is not None else "No data returned"
                self.logger.error("Error fetching cart items", error=self.error)
                self._items = {}
                self._publish()
                return self._snapshot
            records: Iterable[Any] = source.data
        else:
            records = source

        items: dict[str, LineItem] = {}
        for record in records:
            try:
                raw = parse_raw_item(record)
            except ParseError as e:
                self.logger.warning("Skipping malformed cart record", error=str(e), record=record)
                continue

            if raw.id in items:
                self.logger.warning("Duplicate line item id, keeping the last", item_id=raw.id)

            items[raw.id] = LineItem(
                id=raw.id,
                cost=raw.cost,
                price=raw.price,
                margin=self.margin(raw.price, raw.cost),
                locked=raw.pricing_restricted,
            )

        self._items = items
        self.error = None
        self._publish()

        self.logger.info("Loaded cart items", count=len(items), revision=self.revision)
        return self._snapshot

    # Edit intake

    def on_price_edit(self, item_id: str, raw_value: Any) -> EditStatus:
        """Schedule a price edit; margin is re-derived when it commits."""
        return self._intake(item_id, raw_value, EditField.PRICE)

    def on_margin_edit(self, item_id: str, raw_value: Any) -> EditStatus:
        """Schedule a margin edit; price is solved from it when it commits."""
        return self._intake(item_id, raw_value, EditField.MARGIN)

    def _intake(self, item_id: str, raw_value: Any, field: EditField) -> EditStatus:
        try:
            value = self._validate_edit(item_id, raw_value, field)
        except NotFoundError as e:
            return self._refuse(EditStatus.NOT_FOUND, e, raw_value)
        except ForbiddenEditError as e:
            return self._refuse(EditStatus.FORBIDDEN, e, raw_value)
        except EditRejectedError as e:
            return self._refuse(EditStatus.REJECTED, e, raw_value)

        if field is EditField.PRICE:
            commit = partial(self._commit_price, item_id, value)
        else:
            commit = partial(self._commit_margin, item_id, value)

        self.debouncer.schedule(item_id, field, value, commit)
        log_edit_decision(self.edit_logger, item_id, field.value, EditStatus.SCHEDULED.value, raw_value)
        return EditStatus.SCHEDULED

    def _validate_edit(self, item_id: str, raw_value: Any, field: EditField) -> float:
        item = self._items.get(item_id)
        if item is None:
            raise NotFoundError(f"Item {item_id} not found", item_id=item_id, field=field.value)

        if item.locked:
            raise ForbiddenEditError(
                f"Item {item_id} is pricing restricted",
                item_id=item_id,
                field=field.value
            )

        try:
            value = parse_amount(raw_value)
        except InvalidInputError as e:
            e.item_id, e.field = item_id, field.value
            raise

        if field is EditField.PRICE:
            if value < 0:
                raise InvalidInputError(
                    "Price cannot be negative",
                    raw_value=raw_value,
                    item_id=item_id,
                    field=field.value
                )
            return value

        try:
            self.price_from_margin(value, item.cost)
        except NonFiniteResultError as e:
            e.item_id, e.field = item_id, field.value
            raise

        pricing = self.config.pricing
        if pricing.margin_ceiling_policy == "clamp" and value > pricing.max_margin_pct:
            value = pricing.max_margin_pct
        return value

    def _refuse(self, status: EditStatus, error: EditRejectedError, raw_value: Any) -> EditStatus:
        log_edit_decision(
            self.edit_logger,
            error.item_id or "",
            error.field or "",
            status.value,
            raw_value,
            reason=str(error),
        )
        return status

    # Commit

    def _commit_price(self, item_id: str, price: float) -> None:
        item = self._items.get(item_id)
        if item is None:
            self.logger.warning("Item not found at commit, dropping price edit", item_id=item_id)
            return

        updated = LineItem(
            id=item.id,
            cost=item.cost,
            price=price,
            margin=self.margin(price, item.cost),
            locked=item.locked,
        )
        self._replace(updated)
        self.logger.info("Committed price edit", item_id=item_id, price=price, margin=updated.margin)

    def _commit_margin(self, item_id: str, margin_pct: float) -> None:
        item = self._items.get(item_id)
        if item is None:
            self.logger.warning("Item not found at commit, dropping margin edit", item_id=item_id)
            return

        try:
            price = self.price_from_margin(margin_pct, item.cost)
        except NonFiniteResultError as e:
            self.logger.warning("Dropping margin edit with no finite price", item_id=item_id, error=str(e))
            return

        # Margin is kept as typed rather than re-derived from the rounded price
        updated = LineItem(
            id=item.id,
            cost=item.cost,
            price=price,
            margin=margin_pct,
            locked=item.locked,
        )
        self._replace(updated)
        self.logger.info("Committed margin edit", item_id=item_id, price=price, margin=margin_pct)

    def _replace(self, item: LineItem) -> None:
        self._items[item.id] = item
        self._publish()

    def _publish(self) -> None:
        self._snapshot = tuple(self._items.values())
        self.revision += 1
        for listener in list(self._listeners):
            listener(self._snapshot)

    # Pending edit control

    def pending_edits(self) -> list[PendingEdit]:
        return self.debouncer.pending()

    def flush(self) -> int:
        """Commit every pending edit immediately."""
        return self.debouncer.flush()

    def cancel_pending(self) -> int:
        """Discard every pending edit without committing it."""
        return self.debouncer.cancel_all()
