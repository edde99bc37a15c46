"""
Local filesystem document store implementation.
"""

from __future__ import annotations

import aiofiles
import aiofiles.os
from pathlib import Path

from toggles.core.errors import InvalidValueError, NotFoundError


class LocalDocumentStore:
    """
    Local filesystem document store.

    Stores each document as a file under a base directory, using the key as
    the relative path. Useful for development and single-server
    deployments. For production, use S3.

    Usage:
        store = LocalDocumentStore(base_path="./toggle-data")

        await store.put("platforms.json", b'["web"]')
        data = await store.get("platforms.json")
    """

    def __init__(self, base_path: str = "./toggle-data"):
        """
        Initialize local document store.

        Args:
            base_path: Directory to store documents
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._root = self.base_path.resolve()

    def _full_path(self, key: str) -> Path:
        """
        Map a key to a file under the base directory.

        Keys are used as-is. A key resolving outside the base directory is
        rejected.
        """
        full_path = (self._root / key).resolve()
        if full_path == self._root or not full_path.is_relative_to(self._root):
            raise InvalidValueError(
                f"Document key escapes the storage directory: {key}",
                field="key",
                value=key,
            )
        return full_path

    async def get(self, key: str) -> bytes:
        """Read a document."""
        full_path = self._full_path(key)

        if not full_path.exists():
            raise NotFoundError(f"Document not found: {key}", field="key", value=key)

        async with aiofiles.open(full_path, "rb") as f:
            return await f.read()

    async def put(self, key: str, data: bytes) -> None:
        """Replace a document.

        Writes to a temporary sibling first and renames it into place so a
        reader never sees a half-written document.
        """
        full_path = self._full_path(key)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = full_path.with_suffix(full_path.suffix + ".tmp")
        async with aiofiles.open(tmp_path, "wb") as f:
            await f.write(data)

        await aiofiles.os.replace(tmp_path, full_path)

