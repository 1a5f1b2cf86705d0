"""
Edit rejection error classifications.

These exceptions describe why a user edit to a line item's price or margin
was not applied. None of them corrupt state: the item is left unchanged.
"""

from typing import Optional, Any

from .base import CartPricingError


class EditRejectedError(CartPricingError):
    """Base class for edits that were refused without a state change."""

    def __init__(self, message: str, item_id: Optional[str] = None,
                 field: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.item_id = item_id
        self.field = field


class ForbiddenEditError(EditRejectedError):
    """Edit attempted on a pricing-restricted (locked) item."""


class NotFoundError(EditRejectedError):
    """Edit targets an id that is not in the collection."""


class InvalidInputError(EditRejectedError):
    """Typed value is not a usable number for the edited field."""

    def __init__(self, message: str, raw_value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_value = raw_value


class NonFiniteResultError(EditRejectedError):
    """Margin has no finite, non-negative price for the item's cost."""

    def __init__(self, message: str, margin_pct: Optional[float] = None,
                 cost: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.margin_pct = margin_pct
        self.cost = cost
