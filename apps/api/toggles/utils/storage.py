"""
Document Storage Utilities.

Provides:
- Key generation helpers for every stored document
- Default documents for missing keys
- JSON load/save helpers
- FastAPI dependency for the configured document store

Layout:
    platforms.json                          list of platform names
    segments.json                           segment registry
    platforms/<platform>.json               {"groups": [...]}
    logs/<platform>/<group>.json            group audit log
    logs/<platform>/<group>/<feature>.json  feature audit log
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any

from toggles.core.config import settings
from toggles.core.errors import NotFoundError
from toggles.core.interfaces.storage import DocumentStore


PLATFORMS_FILE = "platforms.json"
SEGMENTS_FILE = "segments.json"
PLATFORM_PATH = "platforms/"
LOGS_PATH = "logs/"


# ============================================================
# KEY HELPERS
# ============================================================

def platform_key(platform: str) -> str:
    """Key of a platform's configuration document."""
    return f"{PLATFORM_PATH}{platform}.json"


def group_log_key(platform: str, group_id: str) -> str:
    """Key of a group's audit log."""
    return f"{LOGS_PATH}{platform}/{group_id}.json"


def feature_log_key(platform: str, group_id: str, feature_id: str) -> str:
    """Key of a feature's audit log."""
    return f"{LOGS_PATH}{platform}/{group_id}/{feature_id}.json"


def default_document(key: str) -> Any:
    """
    Default structure for a missing document, by key.

    Returns None when the key has no documented default.
    """
    if key == PLATFORMS_FILE:
        return []
    if key == SEGMENTS_FILE:
        return {}
    if key.startswith(PLATFORM_PATH):
        return {"groups": []}
    if key.startswith(LOGS_PATH):
        return []
    return None


# ============================================================
# LOAD / SAVE
# ============================================================

async def load_document(store: DocumentStore, key: str) -> Any:
    """
    Fetch and decode a JSON document.

    Missing documents resolve to their default structure; a missing key
    without a default re-raises NotFoundError.
    """
    try:
        raw = await store.get(key)
    except NotFoundError:
        default = default_document(key)
        if default is None:
            raise
        return default

    return json.loads(raw)


async def save_document(store: DocumentStore, key: str, document: Any) -> None:
    """Encode and write a JSON document as a single blob."""
    await store.put(key, json.dumps(document).encode("utf-8"))


# ============================================================
# FASTAPI DEPENDENCY
# ============================================================

@lru_cache
def get_store() -> DocumentStore:
    """
    FastAPI dependency to get the configured document store.

    Configuration via environment:
        STORAGE_BACKEND=s3|local|memory
        STORAGE_BUCKET=feature-toggles
        STORAGE_REGION=ap-south-1
        STORAGE_ENDPOINT=http://localhost:9000  (for MinIO)
        STORAGE_LOCAL_PATH=./toggle-data
    """
    storage_config = settings.storage
    backend = storage_config.backend.lower()

    if backend == "memory":
        from toggles.implementations.storage.memory import MemoryDocumentStore

        return MemoryDocumentStore()

    if backend == "local":
        from toggles.implementations.storage.local import LocalDocumentStore

        return LocalDocumentStore(base_path=storage_config.local_path)

    from toggles.implementations.storage.s3 import S3DocumentStore

    return S3DocumentStore(
        bucket=storage_config.bucket,
        region=storage_config.region,
        access_key=storage_config.access_key,
        secret_key=storage_config.secret_key,
        endpoint_url=storage_config.endpoint,
    )
