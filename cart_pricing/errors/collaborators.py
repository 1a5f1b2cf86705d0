"""
Collaborator failure classifications.

Raised or recorded when the external record source or the persistence API
reports an error. These are surfaced to the user; nothing retries them.
"""

from typing import Optional, Any

from .base import CartPricingError


class CollaboratorError(CartPricingError):
    """Base class for failures reported by an external collaborator."""


class FetchError(CollaboratorError):
    """The record source returned an error instead of cart items."""

    def __init__(self, message: str, cart_id: Optional[str] = None,
                 cause: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.cart_id = cart_id
        self.cause = cause


class WriteError(CollaboratorError):
    """A price write was rejected by the persistence API."""

    def __init__(self, message: str, item_id: Optional[str] = None,
                 detail: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.item_id = item_id
        self.detail = detail


def error_message(error: Any) -> str:
    """
    Extract a human readable message from a collaborator error.

    Persistence APIs attach a ``body`` mapping with a ``message`` key to
    their errors; prefer that and fall back to the error text.
    """
    body = getattr(error, "body", None)
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    if isinstance(error, dict):
        body = error.get("body")
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        if error.get("message"):
            return str(error["message"])
    if isinstance(error, BaseException):
        message = str(error)
        return message or error.__class__.__name__
    return str(error)
