"""Inventory updater tests."""

import asyncio

import pytest

from courier.catalog import InMemoryCatalog
from courier.contracts import LineItem
from courier.errors import DependencyUnavailable, InventoryUpdateFailed, StockRejected
from courier.inventory import InventoryUpdater


def items(*pairs):
    return [LineItem(product_id=p, quantity=q) for p, q in pairs]


@pytest.mark.asyncio
async def test_apply_decrements_in_list_order():
    catalog = InMemoryCatalog(products={"A": "a", "B": "b"}, stock={"A": 5, "B": 5})
    updater = InventoryUpdater(catalog)

    applied = await updater.apply(items(("B", 2), ("A", 1), ("B", 1)))

    assert [i.product_id for i in applied] == ["B", "A", "B"]
    assert catalog.calls_to("decrement_stock") == [("B", 2), ("A", 1), ("B", 1)]
    assert catalog.stock == {"A": 4, "B": 2}


@pytest.mark.asyncio
async def test_failure_keeps_earlier_decrements():
    catalog = InMemoryCatalog(
        products={"A": "a", "B": "b", "C": "c"}, stock={"A": 5, "B": 1, "C": 5}
    )
    updater = InventoryUpdater(catalog)

    with pytest.raises(InventoryUpdateFailed) as excinfo:
        await updater.apply(items(("A", 2), ("B", 3), ("C", 1)))

    error = excinfo.value
    assert error.index == 1
    assert error.product_id == "B"
    assert isinstance(error.cause, StockRejected)
    assert error.status_code == 409
    assert [i.product_id for i in error.applied] == ["A"]
    assert catalog.stock == {"A": 3, "B": 1, "C": 5}
    assert [pid for pid, _ in catalog.calls_to("decrement_stock")] == ["A", "B"]


@pytest.mark.asyncio
async def test_revert_restocks_in_reverse():
    catalog = InMemoryCatalog(products={"A": "a", "B": "b"}, stock={"A": 5, "B": 5})
    updater = InventoryUpdater(catalog)
    await updater.apply(items(("A", 1), ("B", 2)))

    await updater.revert()

    assert catalog.calls_to("restock") == [("B", 2), ("A", 1)]
    assert catalog.stock == {"A": 5, "B": 5}
    assert updater.applied == []


@pytest.mark.asyncio
async def test_decrement_timeout():
    class SlowCatalog(InMemoryCatalog):
        async def decrement_stock(self, product_id, quantity):
            await asyncio.sleep(1)

    updater = InventoryUpdater(SlowCatalog(products={"A": "a"}), timeout=0.01)

    with pytest.raises(InventoryUpdateFailed) as excinfo:
        await updater.apply(items(("A", 1)))

    assert isinstance(excinfo.value.cause, DependencyUnavailable)
    assert excinfo.value.applied == []
    assert excinfo.value.uncertain


@pytest.mark.asyncio
async def test_revert_reports_timed_out_decrement():
    class LateCatalog(InMemoryCatalog):
        async def decrement_stock(self, product_id, quantity):
            await super().decrement_stock(product_id, quantity)
            if product_id == "B":
                await asyncio.sleep(1)

    catalog = LateCatalog(products={"A": "a", "B": "b"}, stock={"A": 5, "B": 5})
    updater = InventoryUpdater(catalog, timeout=0.05)

    with pytest.raises(InventoryUpdateFailed):
        await updater.apply(items(("A", 1), ("B", 2)))
    assert updater.uncertain.product_id == "B"

    with pytest.raises(DependencyUnavailable):
        await updater.revert()

    assert catalog.calls_to("restock") == [("A", 1)]
    assert catalog.stock == {"A": 5, "B": 3}


@pytest.mark.asyncio
async def test_rejected_decrement_is_not_uncertain():
    catalog = InMemoryCatalog(products={"A": "a"}, stock={"A": 0})
    updater = InventoryUpdater(catalog)

    with pytest.raises(InventoryUpdateFailed) as excinfo:
        await updater.apply(items(("A", 1)))

    assert not excinfo.value.uncertain
    assert updater.uncertain is None
