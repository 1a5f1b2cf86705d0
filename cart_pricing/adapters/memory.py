"""In-memory cart record store implementing the fetch and write collaborators."""

import asyncio
import copy
from typing import Any, Optional

import structlog

from ..data.models import FetchResult, WriteRequest

logger = structlog.get_logger(__name__)


class RecordWriteError(Exception):
    """Write rejected by the store, carrying a body like a record API error."""

    def __init__(self, message: str, item_id: Optional[str] = None):
        super().__init__(message)
        self.item_id = item_id
        self.body = {"message": message}


class InMemoryCartStore:
    """
    Cart line item records held in memory.

    Records are stored flat: ``{"id", "price", "cost", "pricing_restricted"}``.
    Ids listed in ``failing_ids`` reject their writes, which lets callers
    exercise partial batch failures.
    """

    def __init__(self, carts: Optional[dict[str, list[dict[str, Any]]]] = None,
                 write_delay: float = 0.0):
        self._carts: dict[str, list[dict[str, Any]]] = copy.deepcopy(carts or {})
        self.write_delay = write_delay
        self.failing_ids: set[str] = set()
        self.fetch_error: Any = None
        self.fetch_count = 0
        self.writes: list[WriteRequest] = []

    def add_cart(self, cart_id: str, records: list[dict[str, Any]]) -> None:
        self._carts[cart_id] = copy.deepcopy(records)

    def records(self, cart_id: str) -> list[dict[str, Any]]:
        """Copy of the stored records for a cart."""
        return copy.deepcopy(self._carts.get(cart_id, []))

    def _find(self, item_id: str) -> Optional[dict[str, Any]]:
        for records in self._carts.values():
            for record in records:
                if str(record.get("id")) == item_id:
                    return record
        return None

    async def fetch(self, cart_id: str) -> FetchResult:
        """Return the cart's records, or an error result for an unknown cart."""
        self.fetch_count += 1

        if self.fetch_error is not None:
            return FetchResult(error=self.fetch_error)

        if cart_id not in self._carts:
            logger.warning("Unknown cart requested", cart_id=cart_id)
            return FetchResult(error={"message": f"Cart {cart_id!r} not found"})

        return FetchResult(data=self.records(cart_id))

    async def write(self, request: WriteRequest) -> dict[str, Any]:
        """Apply one price update."""
        self.writes.append(request)
        if self.write_delay:
            await asyncio.sleep(self.write_delay)

        if request.id in self.failing_ids:
            raise RecordWriteError(f"Record {request.id} is locked for editing", item_id=request.id)

        record = self._find(request.id)
        if record is None:
            raise RecordWriteError(f"Record {request.id} does not exist", item_id=request.id)

        record.update(request.fields)
        logger.debug("Record updated", item_id=request.id, fields=request.fields)
        return {"id": request.id}
