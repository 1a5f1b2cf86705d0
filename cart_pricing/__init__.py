"""
Cart Pricing - Price/Margin Reconciliation Engine

Keeps the sale price and profit margin of each cart line item in sync while
the user edits either one, debouncing keystrokes, and saves the edited prices
back to the record store as a single batch.
"""

__version__ = "0.1.0"
__author__ = "Cart Pricing Team"

from .commit import BatchCommitCoordinator, CommitResult, CommitStatus
from .data.models import EditField, EditStatus, FetchResult, LineItem, Notification, Severity, WriteRequest
from .engine import ReconciliationEngine
from .session import CartPricingSession

__all__ = [
    "BatchCommitCoordinator",
    "CartPricingSession",
    "CommitResult",
    "CommitStatus",
    "EditField",
    "EditStatus",
    "FetchResult",
    "LineItem",
    "Notification",
    "ReconciliationEngine",
    "Severity",
    "WriteRequest",
]
