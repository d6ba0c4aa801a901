"""Transport creation and finalization."""

from __future__ import annotations

import uuid
from typing import Optional

from ..archive import BaseArchive
from ..catalog import BaseCatalogClient
from ..constants import TRANSPORT_ARCHIVE_PREFIX, TRANSPORT_CREATED
from ..contracts import TransportRecord
from ..inventory import InventoryUpdater
from ..saga import WorkflowRun, WorkflowStep
from ..store import RecordStore
from ..transports import BaseTransport
from .base import BaseWorkflow


class TransportWorkflow(BaseWorkflow):
    """Two independent entry points over the same collaborators.

    ``create`` persists then publishes. ``finalize`` decrements stock for the
    line items in the request, then archives a snapshot. It works on the
    record it is given and does not reload or reconcile the stored one.
    Replaying a finalization decrements stock again.
    """

    create_name = "create_transport"
    finalize_name = "finalize_transport"

    def __init__(
        self,
        catalog: BaseCatalogClient,
        store: RecordStore,
        transport: BaseTransport,
        archive: BaseArchive,
        **kwargs,
    ) -> None:
        super().__init__(store, transport, archive, **kwargs)
        self.catalog = catalog

    async def create(
        self, record: TransportRecord, correlation_id: Optional[str] = None
    ) -> WorkflowRun:
        correlation_id = correlation_id or str(uuid.uuid4())
        steps = [
            self._persist_step(record.transport_id, record),
            self._publish_step(TRANSPORT_CREATED, record, correlation_id),
        ]
        return await self._run(self.create_name, steps, correlation_id)

    def _inventory_step(self, record: TransportRecord) -> WorkflowStep:
        updater = InventoryUpdater(self.catalog, timeout=self.call_timeout)

        async def decrement() -> int:
            applied = await updater.apply(record.line_items)
            return len(applied)

        return WorkflowStep(
            "inventory", decrement, compensate=updater.revert, dependency="catalog"
        )

    async def finalize(
        self, record: TransportRecord, correlation_id: Optional[str] = None
    ) -> WorkflowRun:
        correlation_id = correlation_id or str(uuid.uuid4())
        steps = [
            self._inventory_step(record),
            self._archive_step(
                TRANSPORT_ARCHIVE_PREFIX, "transport", record, correlation_id
            ),
        ]
        return await self._run(self.finalize_name, steps, correlation_id)
