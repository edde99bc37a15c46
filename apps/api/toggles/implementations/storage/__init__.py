"""
Document store implementations.

Available backends:
- S3DocumentStore: AWS S3 / MinIO (using aioboto3)
- LocalDocumentStore: Local filesystem (development)
- MemoryDocumentStore: In-process dict (testing)

Usage:
    # Use the FastAPI dependency for automatic configuration:
    from toggles.utils.storage import get_store

    # Or instantiate directly:
    from toggles.implementations.storage import LocalDocumentStore

    store = LocalDocumentStore(base_path="./toggle-data")
"""

from toggles.implementations.storage.local import LocalDocumentStore
from toggles.implementations.storage.memory import MemoryDocumentStore
from toggles.implementations.storage.s3 import S3DocumentStore

__all__ = ["LocalDocumentStore", "MemoryDocumentStore", "S3DocumentStore"]
