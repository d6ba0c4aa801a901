"""Record store backend tests."""

import sqlite3

import pytest

from courier.app import CourierApp
from courier.config import CourierConfig
from courier.store import InMemoryRecordStore, SQLiteRecordStore, get_record_store


@pytest.fixture(params=["inmemory", "sqlite"])
def store(request, tmp_path):
    if request.param == "inmemory":
        return InMemoryRecordStore("orders")
    return SQLiteRecordStore(tmp_path / "records.db", "orders")


@pytest.mark.asyncio
async def test_put_get_delete(store):
    await store.put("o-1", {"orderId": "o-1", "lineItems": []})

    assert await store.get("o-1") == {"orderId": "o-1", "lineItems": []}
    assert await store.get("missing") is None
    assert await store.delete("o-1") is True
    assert await store.delete("o-1") is False
    assert await store.get("o-1") is None


@pytest.mark.asyncio
async def test_last_write_wins(store):
    await store.put("o-1", {"version": 1})
    await store.put("o-1", {"version": 2})

    assert await store.get("o-1") == {"version": 2}
    assert await store.list_records() == [{"version": 2}]


@pytest.mark.asyncio
async def test_list_records(store):
    await store.put("a", {"n": 1})
    await store.put("b", {"n": 2})

    assert sorted(r["n"] for r in await store.list_records()) == [1, 2]


@pytest.mark.asyncio
async def test_inmemory_store_isolates_callers():
    store = InMemoryRecordStore("orders")
    record = {"lineItems": [{"productId": "P1"}]}
    await store.put("o-1", record)

    record["lineItems"].clear()
    fetched = await store.get("o-1")
    fetched["lineItems"].append({"productId": "P2"})

    assert await store.get("o-1") == {"lineItems": [{"productId": "P1"}]}


@pytest.mark.asyncio
async def test_sqlite_tables_are_independent(tmp_path):
    db = tmp_path / "records.db"
    orders = SQLiteRecordStore(db, "orders")
    transports = SQLiteRecordStore(db, "transports")

    await orders.put("same-key", {"kind": "order"})
    await transports.put("same-key", {"kind": "transport"})

    assert await orders.get("same-key") == {"kind": "order"}
    assert await transports.get("same-key") == {"kind": "transport"}


@pytest.mark.asyncio
async def test_sqlite_survives_reopen(tmp_path):
    db = tmp_path / "records.db"
    await SQLiteRecordStore(db, "orders").put("o-1", {"orderId": "o-1"})

    assert await SQLiteRecordStore(db, "orders").get("o-1") == {"orderId": "o-1"}


def test_rejects_unsafe_table_names(tmp_path):
    with pytest.raises(ValueError):
        SQLiteRecordStore(tmp_path / "records.db", "orders; DROP TABLE x")


def test_factory_rejects_unknown_scheme():
    with pytest.raises(ValueError):
        get_record_store("orders", database_url="mysql://db")


@pytest.mark.asyncio
async def test_app_close_releases_sqlite_connections(tmp_path):
    config = CourierConfig(
        catalog={"backend": "inmemory"},
        store={"database_url": f"sqlite://{tmp_path / 'records.db'}"},
    )

    async with CourierApp.from_config(config) as courier:
        stores = list(courier.stores.values())
        await stores[0].put("o-1", {"orderId": "o-1"})

    assert all(isinstance(s, SQLiteRecordStore) for s in stores)
    for store in stores:
        with pytest.raises(sqlite3.ProgrammingError):
            store._conn.execute("SELECT 1")
