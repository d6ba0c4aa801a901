"""Enrichment strategy tests."""

import asyncio

import pytest

from courier.catalog import InMemoryCatalog
from courier.contracts import LineItem
from courier.enrichment import (
    ConcurrentEnrichment,
    SequentialEnrichment,
    enrich_line_items,
    get_enrichment_strategy,
)
from courier.errors import DependencyUnavailable, NotFound


class ScriptedCatalog(InMemoryCatalog):
    def __init__(self, delays=None, failures=None, **kwargs):
        super().__init__(**kwargs)
        self.delays = delays or {}
        self.failures = failures or {}
        self.finished = []

    async def resolve_name(self, product_id):
        await asyncio.sleep(self.delays.get(product_id, 0))
        if product_id in self.failures:
            raise self.failures[product_id]
        name = await super().resolve_name(product_id)
        self.finished.append(product_id)
        return name


def items(*product_ids):
    return [LineItem(product_id=p, quantity=1) for p in product_ids]


@pytest.mark.asyncio
async def test_sequential_stops_at_first_failure():
    catalog = ScriptedCatalog(products={"A": "a", "C": "c"})
    line_items = items("A", "B", "C")

    with pytest.raises(NotFound):
        await enrich_line_items(line_items, catalog, SequentialEnrichment())

    assert [pid for pid, _ in catalog.calls_to("resolve_name")] == ["A", "B"]
    assert [i.product_name for i in line_items] == ["", "", ""]


@pytest.mark.asyncio
async def test_concurrent_keeps_item_order():
    catalog = ScriptedCatalog(
        products={"A": "a", "B": "b", "C": "c"}, delays={"A": 0.05, "B": 0.01}
    )
    line_items = items("A", "B", "C")

    await enrich_line_items(line_items, catalog, ConcurrentEnrichment())

    assert [i.product_name for i in line_items] == ["a", "b", "c"]
    assert catalog.finished[0] == "C"


@pytest.mark.asyncio
async def test_concurrent_fails_fast_and_discards_slow_lookups():
    catalog = ScriptedCatalog(
        products={"A": "a", "B": "b"},
        delays={"A": 5.0},
        failures={"B": DependencyUnavailable("catalog", "503")},
    )
    line_items = items("A", "B")

    with pytest.raises(DependencyUnavailable):
        await asyncio.wait_for(
            enrich_line_items(line_items, catalog, ConcurrentEnrichment()), timeout=1.0
        )

    assert catalog.finished == []
    assert [i.product_name for i in line_items] == ["", ""]


@pytest.mark.asyncio
async def test_concurrent_reports_earliest_item_failure():
    catalog = ScriptedCatalog(
        failures={
            "A": NotFound("product", "A"),
            "B": DependencyUnavailable("catalog", "503"),
        }
    )

    with pytest.raises(NotFound):
        await enrich_line_items(items("A", "B"), catalog, ConcurrentEnrichment())


@pytest.mark.parametrize("strategy", [SequentialEnrichment(), ConcurrentEnrichment()])
@pytest.mark.asyncio
async def test_empty_name_is_a_failure(strategy):
    catalog = InMemoryCatalog(products={"A": ""})

    with pytest.raises(DependencyUnavailable):
        await enrich_line_items(items("A"), catalog, strategy)


@pytest.mark.parametrize("strategy", [SequentialEnrichment(), ConcurrentEnrichment()])
@pytest.mark.asyncio
async def test_no_items(strategy):
    catalog = InMemoryCatalog()

    await enrich_line_items([], catalog, strategy)

    assert catalog.calls == []


def test_strategy_lookup():
    assert isinstance(get_enrichment_strategy("sequential"), SequentialEnrichment)
    assert isinstance(get_enrichment_strategy("concurrent"), ConcurrentEnrichment)
    with pytest.raises(ValueError):
        get_enrichment_strategy("parallel-ish")
