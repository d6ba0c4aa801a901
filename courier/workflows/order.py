"""Order creation: enrich, persist, publish, archive."""

from __future__ import annotations

import uuid
from typing import Optional

from ..archive import BaseArchive
from ..catalog import BaseCatalogClient
from ..constants import ORDER_ARCHIVE_PREFIX, ORDER_CREATED
from ..contracts import OrderRecord
from ..enrichment import EnrichmentStrategy, SequentialEnrichment, enrich_line_items
from ..saga import WorkflowRun, WorkflowStep
from ..store import RecordStore
from ..transports import BaseTransport
from .base import BaseWorkflow


class OrderWorkflow(BaseWorkflow):
    """Creates an order.

    Every line item is named through the catalog before anything is written.
    A failed lookup therefore leaves the store, the queue and the archive
    untouched. Once the record is persisted, publish and archive failures
    leave it in place unless compensation is enabled.
    """

    name = "create_order"

    def __init__(
        self,
        catalog: BaseCatalogClient,
        store: RecordStore,
        transport: BaseTransport,
        archive: BaseArchive,
        *,
        enrichment: Optional[EnrichmentStrategy] = None,
        **kwargs,
    ) -> None:
        super().__init__(store, transport, archive, **kwargs)
        self.catalog = catalog
        self.enrichment = enrichment or SequentialEnrichment()

    def _enrich_step(self, order: OrderRecord) -> WorkflowStep:
        async def enrich() -> None:
            await enrich_line_items(
                order.line_items, self.catalog, self.enrichment, self.call_timeout
            )

        return WorkflowStep("enrich", enrich, mutates=False, dependency="catalog")

    async def create(
        self, order: OrderRecord, correlation_id: Optional[str] = None
    ) -> WorkflowRun:
        correlation_id = correlation_id or str(uuid.uuid4())
        steps = [
            self._enrich_step(order),
            self._persist_step(order.order_id, order),
            self._publish_step(ORDER_CREATED, order, correlation_id),
            self._archive_step(
                ORDER_ARCHIVE_PREFIX,
                "order",
                order,
                correlation_id,
                carrier_reference=order.carrier_reference,
            ),
        ]
        return await self._run(self.name, steps, correlation_id)
