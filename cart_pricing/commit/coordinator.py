"""Concurrent batch commit of line item prices."""

import asyncio
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

import structlog

from ..data.models import LineItem, WriteRequest
from ..errors import WriteError, error_message
from ..logging.config import log_commit_outcome
from ..pricing.margin import is_valid_number

logger = structlog.get_logger(__name__)

WriteFn = Callable[[WriteRequest], Awaitable[Any]]


class CommitStatus(str, Enum):
    """Aggregate batch commit status."""
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class ItemWriteError:
    """A single rejected write within a batch."""
    item_id: str
    message: str
    error: Optional[BaseException] = None


@dataclass
class CommitResult:
    """
    Result of a batch commit.

    Every failed write is kept in ``errors``; ``message`` is the first of
    them in collection order. Writes that succeeded are not rolled back.
    """
    status: CommitStatus
    requested: int = 0
    succeeded: int = 0
    errors: list[ItemWriteError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == CommitStatus.SUCCESS

    @property
    def message(self) -> Optional[str]:
        return self.errors[0].message if self.errors else None

    @property
    def failed_ids(self) -> list[str]:
        return [err.item_id for err in self.errors]

    def as_error(self) -> Optional[WriteError]:
        """The failure as a WriteError, or None on success."""
        if self.ok:
            return None
        return WriteError(
            self.message or "Error saving changes",
            item_id=self.errors[0].item_id,
            detail=[(err.item_id, err.message) for err in self.errors],
        )


class BatchCommitCoordinator:
    """Issues one price write per line item concurrently and aggregates the outcome."""

    def __init__(self, write: WriteFn):
        self.write = write
        self.logger = logger

    @staticmethod
    def build_requests(items: Iterable[LineItem]) -> list[WriteRequest]:
        """One request per item carrying only its id and price."""
        return [WriteRequest(id=item.id, fields={"price": item.price}) for item in items]

    async def _write_one(self, request: WriteRequest) -> Any:
        price = request.fields.get("price")
        if not is_valid_number(price) or price < 0:
            raise WriteError(f"Invalid price for {request.id}: {price!r}", item_id=request.id)
        return await self.write(request)

    async def save(self, items: Iterable[LineItem]) -> CommitResult:
        """
        Write every item's price and wait for all writes to settle.

        Args:
            items: Snapshot of the collection to persist

        Returns:
            SUCCESS if every write resolved, FAILURE with per-item errors otherwise
        """
        requests = self.build_requests(items)
        self.logger.info("Saving changes", requested=len(requests))

        outcomes = await asyncio.gather(
            *(self._write_one(request) for request in requests),
            return_exceptions=True
        )

        errors: list[ItemWriteError] = []
        for request, outcome in zip(requests, outcomes):
            if isinstance(outcome, Exception):
                message = error_message(outcome)
                self.logger.warning("Price write failed", item_id=request.id, error=message)
                errors.append(ItemWriteError(item_id=request.id, message=message, error=outcome))
            elif isinstance(outcome, BaseException):
                raise outcome

        result = CommitResult(
            status=CommitStatus.FAILURE if errors else CommitStatus.SUCCESS,
            requested=len(requests),
            succeeded=len(requests) - len(errors),
            errors=errors,
        )

        log_commit_outcome(self.logger, result.requested, result.succeeded, result.failed_ids, result.message)
        return result
