"""
In-memory document store for development and testing.
"""

from __future__ import annotations

from toggles.core.errors import NotFoundError


class MemoryDocumentStore:
    """
    Dict-backed document store. Data is lost on restart.

    Useful for:
    - Development without S3
    - Unit testing
    """

    def __init__(self, documents: dict[str, bytes] | None = None):
        self.documents: dict[str, bytes] = dict(documents or {})
        self.writes = 0

    async def get(self, key: str) -> bytes:
        try:
            return self.documents[key]
        except KeyError:
            raise NotFoundError(f"Document not found: {key}", field="key", value=key)

    async def put(self, key: str, data: bytes) -> None:
        self.documents[key] = bytes(data)
        self.writes += 1

