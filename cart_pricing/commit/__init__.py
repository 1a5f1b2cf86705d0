"""
Batch commit module.

Writes the current price of every line item back to the record store in one
concurrent batch and reports a single aggregate outcome.
"""
from .coordinator import BatchCommitCoordinator, CommitResult, CommitStatus, ItemWriteError

__all__ = ["BatchCommitCoordinator", "CommitResult", "CommitStatus", "ItemWriteError"]
