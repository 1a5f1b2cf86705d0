"""
Error classification system for the cart pricing engine.

This module provides the exception hierarchy for rejected edits and for
failures reported by the fetch and write collaborators.
"""

from .base import (
    CartPricingError,
    ConfigError,
)
from .edits import (
    EditRejectedError,
    ForbiddenEditError,
    NotFoundError,
    InvalidInputError,
    NonFiniteResultError,
)
from .collaborators import (
    CollaboratorError,
    FetchError,
    WriteError,
    error_message,
)

__all__ = [
    "CartPricingError",
    "ConfigError",
    # Edit rejections
    "EditRejectedError",
    "ForbiddenEditError",
    "NotFoundError",
    "InvalidInputError",
    "NonFiniteResultError",
    # Collaborator failures
    "CollaboratorError",
    "FetchError",
    "WriteError",
    "error_message",
]
