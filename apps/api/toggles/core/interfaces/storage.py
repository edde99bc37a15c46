"""
Document store protocol.
Implementations: S3DocumentStore, LocalDocumentStore, MemoryDocumentStore
"""
from __future__ import annotations

from typing import Protocol


class DocumentStore(Protocol):
    """
    Protocol for whole-document blob storage.

    Every write replaces the stored document as a single blob; there is no
    partial update and no version check, so two writers racing on the same
    key resolve as last-write-wins. A version-checked store can implement
    the same protocol without touching callers.

    Example implementations:
    - S3DocumentStore: AWS S3 or S3-compatible (MinIO)
    - LocalDocumentStore: Files under a local directory
    - MemoryDocumentStore: In-process dict
    """

    async def get(self, key: str) -> bytes:
        """Return the stored bytes. Raises NotFoundError if the key is absent."""
        ...

    async def put(self, key: str, data: bytes) -> None:
        """Replace the document stored under key."""
        ...
