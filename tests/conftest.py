"""Shared fixtures: in-memory collaborators that record calls and fail on demand."""

import asyncio
from typing import Dict, List, Optional, Tuple

import pytest

from courier.app import CourierApp
from courier.archive import InMemoryArchive
from courier.catalog import InMemoryCatalog
from courier.config import CourierConfig
from courier.constants import ORDERS_TABLE, TRANSPORTS_TABLE
from courier.contracts import DomainEvent
from courier.enrichment import ConcurrentEnrichment, SequentialEnrichment
from courier.store import InMemoryRecordStore
from courier.transports import InMemoryTransport

CallLog = List[Tuple[str, str]]

PRODUCTS = {"P1": "Widget", "P2": "Gadget", "P3": "Gizmo"}


class FlakyCatalog(InMemoryCatalog):
    """In-memory catalog with per-product failure injection."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.lookup_failures: Dict[str, Exception] = {}
        self.decrement_failures: Dict[str, Exception] = {}
        self.lookup_delays: Dict[str, float] = {}
        self.decrement_delays: Dict[str, float] = {}

    async def resolve_name(self, product_id: str) -> str:
        delay = self.lookup_delays.get(product_id)
        if delay:
            await asyncio.sleep(delay)
        if product_id in self.lookup_failures:
            self.calls.append(("resolve_name", product_id, 0))
            raise self.lookup_failures[product_id]
        return await super().resolve_name(product_id)

    async def decrement_stock(self, product_id: str, quantity: int) -> None:
        if product_id in self.decrement_failures:
            self.calls.append(("decrement_stock", product_id, quantity))
            raise self.decrement_failures[product_id]
        await super().decrement_stock(product_id, quantity)
        # applied, but the answer arrives late
        delay = self.decrement_delays.get(product_id)
        if delay:
            await asyncio.sleep(delay)


class RecordingStore(InMemoryRecordStore):
    def __init__(self, table: str, log: CallLog) -> None:
        super().__init__(table)
        self.log = log
        self.fail_put: Optional[Exception] = None
        self.put_delay: float = 0

    async def put(self, key: str, record: dict) -> None:
        self.log.append(("put", key))
        if self.fail_put:
            raise self.fail_put
        await super().put(key, record)
        if self.put_delay:
            await asyncio.sleep(self.put_delay)

    async def delete(self, key: str) -> bool:
        self.log.append(("delete", key))
        return await super().delete(key)


class RecordingTransport(InMemoryTransport):
    def __init__(self, log: CallLog) -> None:
        super().__init__()
        self.log = log
        self.fail_publish: Optional[Exception] = None

    async def publish(self, queue: str, event: DomainEvent) -> None:
        self.log.append(("publish", event.event_type))
        if self.fail_publish:
            raise self.fail_publish
        await super().publish(queue, event)


class RecordingArchive(InMemoryArchive):
    def __init__(self, log: CallLog) -> None:
        super().__init__()
        self.log = log
        self.fail_store: Optional[Exception] = None

    async def store(self, key: str, body: str) -> None:
        self.log.append(("store", key))
        if self.fail_store:
            raise self.fail_store
        await super().store(key, body)


@pytest.fixture
def call_log() -> CallLog:
    return []


@pytest.fixture
def catalog() -> FlakyCatalog:
    return FlakyCatalog(products=PRODUCTS)


@pytest.fixture
def order_store(call_log) -> RecordingStore:
    return RecordingStore(ORDERS_TABLE, call_log)


@pytest.fixture
def transport_store(call_log) -> RecordingStore:
    return RecordingStore(TRANSPORTS_TABLE, call_log)


@pytest.fixture
def publisher(call_log) -> RecordingTransport:
    return RecordingTransport(call_log)


@pytest.fixture
def archive(call_log) -> RecordingArchive:
    return RecordingArchive(call_log)


@pytest.fixture(params=["sequential", "concurrent"])
def enrichment(request):
    if request.param == "sequential":
        return SequentialEnrichment()
    return ConcurrentEnrichment()


@pytest.fixture
def courier_app(catalog, order_store, transport_store, publisher, archive) -> CourierApp:
    return CourierApp(
        CourierConfig(),
        catalog=catalog,
        stores={ORDERS_TABLE: order_store, TRANSPORTS_TABLE: transport_store},
        transport=publisher,
        archive=archive,
    )
