"""
Base error classification for the cart pricing engine.

Every error raised inside the package derives from CartPricingError so the
public entry points can catch one family and convert it into a status, a
retained message, or a notification.
"""

from typing import Optional, Dict, Any


class CartPricingError(Exception):
    """Base class for all cart pricing errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.recoverable = True


class ConfigError(CartPricingError):
    """Configuration file could not be read or is invalid."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.path = path
        self.recoverable = False
