"""
Tests for document stores and storage helpers.
"""

import pytest

from toggles.core.errors import InvalidValueError, NotFoundError
from toggles.implementations.storage.local import LocalDocumentStore
from toggles.implementations.storage.memory import MemoryDocumentStore
from toggles.utils.storage import (
    feature_log_key,
    group_log_key,
    load_document,
    platform_key,
    save_document,
)


def test_key_layout():
    assert platform_key("web") == "platforms/web.json"
    assert group_log_key("web", "checkout") == "logs/web/checkout.json"
    assert feature_log_key("web", "checkout", "new_cart") == "logs/web/checkout/new_cart.json"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "key, expected",
    [
        ("platforms.json", []),
        ("segments.json", {}),
        ("platforms/web.json", {"groups": []}),
        ("logs/web/checkout.json", []),
        ("logs/web/checkout/new_cart.json", []),
    ],
)
async def test_missing_documents_have_defaults(key, expected):
    assert await load_document(MemoryDocumentStore(), key) == expected


@pytest.mark.asyncio
async def test_missing_document_without_default():
    with pytest.raises(NotFoundError):
        await load_document(MemoryDocumentStore(), "other.json")


@pytest.mark.asyncio
async def test_save_then_load():
    store = MemoryDocumentStore()

    await save_document(store, "platforms.json", ["web", "ios"])

    assert await load_document(store, "platforms.json") == ["web", "ios"]
    assert store.writes == 1


# ============ Local filesystem ============


@pytest.mark.asyncio
async def test_local_store_get_missing(tmp_path):
    store = LocalDocumentStore(base_path=str(tmp_path))

    with pytest.raises(NotFoundError):
        await store.get("platforms.json")


@pytest.mark.asyncio
async def test_local_store_put_and_get_nested(tmp_path):
    store = LocalDocumentStore(base_path=str(tmp_path))

    await store.put("logs/web/checkout/new_cart.json", b"[]")
    await store.put("logs/web/checkout/new_cart.json", b'[{"action": "x"}]')

    assert await store.get("logs/web/checkout/new_cart.json") == b'[{"action": "x"}]'
    assert (tmp_path / "logs" / "web" / "checkout" / "new_cart.json").exists()


@pytest.mark.asyncio
async def test_local_store_leaves_no_temp_files(tmp_path):
    store = LocalDocumentStore(base_path=str(tmp_path))

    await store.put("platforms.json", b'["web"]')

    assert [p.name for p in tmp_path.iterdir()] == ["platforms.json"]


@pytest.mark.asyncio
@pytest.mark.parametrize("key", ["../escape.json", "logs/../../escape.json", "/etc/escape.json"])
async def test_local_store_rejects_keys_outside_base_path(tmp_path, key):
    base = tmp_path / "data"
    store = LocalDocumentStore(base_path=str(base))

    with pytest.raises(InvalidValueError):
        await store.put(key, b"{}")

    assert not (tmp_path / "escape.json").exists()


@pytest.mark.asyncio
async def test_local_store_keeps_similar_keys_apart(tmp_path):
    store = LocalDocumentStore(base_path=str(tmp_path))

    await store.put("platforms/a..b.json", b'{"groups": [1]}')
    await store.put("platforms/ab.json", b'{"groups": [2]}')

    assert await store.get("platforms/a..b.json") == b'{"groups": [1]}'
    assert await store.get("platforms/ab.json") == b'{"groups": [2]}'
