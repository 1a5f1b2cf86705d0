"""
Collaborator adapters.

Concrete fetch and write collaborators usable without a live record system.
"""
from .memory import InMemoryCartStore, RecordWriteError

__all__ = ["InMemoryCartStore", "RecordWriteError"]
