"""
Canonical data models for cart line items and collaborator messages.

Line items are immutable; the engine replaces an item with a new instance
whenever its price or margin changes.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional


class EditField(str, Enum):
    """Line item fields a user can edit."""
    PRICE = "price"
    MARGIN = "margin"


class EditStatus(str, Enum):
    """Outcome of handing a user edit to the engine."""
    SCHEDULED = "scheduled"
    FORBIDDEN = "forbidden"
    REJECTED = "rejected"
    NOT_FOUND = "not_found"


class Severity(str, Enum):
    """Notification severity, matching toast variants."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class RawItem:
    """Line item as supplied by the record source."""
    id: str
    price: float
    cost: float
    pricing_restricted: bool = False


@dataclass(frozen=True)
class LineItem:
    """Reconciled line item with derived margin."""
    id: str
    cost: float         # Unit cost, never written by the engine
    price: float        # Sale price, the persisted field
    margin: float       # Percentage, derived from price and cost
    locked: bool        # Pricing restricted, edits are refused

    def to_dict(self) -> dict[str, Any]:
        """Plain dictionary for rendering."""
        return asdict(self)


@dataclass(frozen=True)
class FetchResult:
    """
    Result of asking the record source for a cart's items.

    Exactly one of ``data`` and ``error`` is expected to be set.
    """
    data: Optional[list[Any]] = None
    error: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None


@dataclass(frozen=True)
class WriteRequest:
    """Single record update sent to the persistence API."""
    id: str
    fields: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "fields": dict(self.fields)}


@dataclass(frozen=True)
class Notification:
    """User-facing message handed to the notification collaborator."""
    title: str
    message: str
    severity: Severity = Severity.INFO

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "message": self.message, "severity": self.severity.value}
