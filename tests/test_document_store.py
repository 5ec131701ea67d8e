"""Tests for the document stores and timestamp encoding."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from eunoia.errors import DatabaseError, NetworkError
from eunoia.remote.base import SERVER_TIMESTAMP, decode_timestamp, encode_timestamp
from eunoia.remote.file_store import FileDocumentStore
from eunoia.remote.memory_store import InMemoryDocumentStore


def test_timestamp_encoding() -> None:
    moment = datetime(2024, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)

    encoded = encode_timestamp(moment)

    assert encoded == {"seconds": int(moment.timestamp()), "nanoseconds": 678901000}
    assert decode_timestamp(encoded) == moment


@pytest.mark.parametrize(
    "value",
    ["2024-01-02T03:04:05Z", "2024-01-02T03:04:05+00:00", 1704164645, datetime(2024, 1, 2, 3, 4, 5)],
)
def test_decode_accepts_other_forms(value) -> None:
    assert decode_timestamp(value) == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def test_decode_bad_values() -> None:
    assert decode_timestamp(None) is None
    assert decode_timestamp("yesterday") is None
    assert decode_timestamp(["x"]) is None


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path: Path):
    if request.param == "memory":
        return InMemoryDocumentStore()
    return FileDocumentStore(tmp_path / "cloud")


@pytest.mark.asyncio
async def test_crud_and_query(store) -> None:
    await store.set("things", "a", {"owner": "u1", "n": 1})
    await store.set("things", "b", {"owner": "u2", "n": 2})
    await store.set("things", "c", {"owner": "u1", "n": 3})

    assert (await store.get("things", "a")) == {"owner": "u1", "n": 1, "id": "a"}
    assert await store.get("things", "missing") is None
    assert sorted(d["id"] for d in await store.query("things", [("owner", "u1")])) == ["a", "c"]
    assert len(await store.query("things", limit=2)) == 2

    await store.set("things", "a", {"n": 10}, merge=True)
    assert (await store.get("things", "a"))["owner"] == "u1"
    assert (await store.get("things", "a"))["n"] == 10

    await store.set("things", "a", {"n": 11})
    assert "owner" not in await store.get("things", "a")

    await store.delete("things", "a")
    await store.delete("things", "a")
    assert await store.get("things", "a") is None


@pytest.mark.asyncio
async def test_server_timestamp_is_resolved(store) -> None:
    await store.set("things", "a", {"meta": {"stamp": SERVER_TIMESTAMP}})

    stamp = (await store.get("things", "a"))["meta"]["stamp"]

    assert set(stamp) == {"seconds", "nanoseconds"}
    assert decode_timestamp(stamp) is not None


@pytest.mark.asyncio
async def test_batch_set(store) -> None:
    await store.batch_set("things", [("x", {"v": 1}), ("y", {"v": 2})])

    assert len(await store.query("things")) == 2


@pytest.mark.asyncio
async def test_memory_store_outages() -> None:
    store = InMemoryDocumentStore()
    store.fail_next = 1

    with pytest.raises(NetworkError):
        await store.get("things", "a")
    assert await store.get("things", "a") is None

    store.online = False
    with pytest.raises(NetworkError):
        await store.query("things")


@pytest.mark.asyncio
async def test_file_store_persists_and_reports_corruption(tmp_path: Path) -> None:
    await FileDocumentStore(tmp_path).set("things", "a", {"v": 1})

    assert (await FileDocumentStore(tmp_path).get("things", "a"))["v"] == 1

    (tmp_path / "things.json").write_text("{broken", encoding="utf-8")
    with pytest.raises(DatabaseError):
        await FileDocumentStore(tmp_path).get("things", "a")
