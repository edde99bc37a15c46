"""
Backend implementations for core interfaces.
"""

from toggles.implementations.storage.local import LocalDocumentStore
from toggles.implementations.storage.memory import MemoryDocumentStore

__all__ = [
    "LocalDocumentStore",
    "MemoryDocumentStore",
]
