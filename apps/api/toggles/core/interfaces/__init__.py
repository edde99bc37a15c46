"""
Core interfaces (protocols) for extensibility.
All backends must implement these protocols to be swappable.
"""

from .storage import DocumentStore

__all__ = ["DocumentStore"]
