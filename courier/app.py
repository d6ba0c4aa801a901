"""Application container wiring collaborators and workflows from configuration."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from .archive import BaseArchive, get_archive
from .catalog import BaseCatalogClient, get_catalog
from .config import CourierConfig, load_config
from .constants import ORDERS_TABLE, TRANSPORTS_TABLE
from .enrichment import get_enrichment_strategy
from .errors import ValidationError
from .store import RecordStore, get_record_store
from .transports import BaseTransport, get_transport
from .workflows import OrderWorkflow, TransportWorkflow

logger = logging.getLogger(__name__)


class CourierApp:
    """Builds every collaborator once and hands them to the workflows.

    Nothing is read from the environment after construction; tests build an
    app directly from in-memory collaborators.
    """

    def __init__(
        self,
        config: CourierConfig,
        catalog: BaseCatalogClient,
        stores: Dict[str, RecordStore],
        transport: BaseTransport,
        archive: BaseArchive,
    ) -> None:
        self.config = config
        self.catalog = catalog
        self.stores = stores
        self.transport = transport
        self.archive = archive

        policy = dict(
            queue=config.transport.queue,
            compensate=config.workflow.compensate,
            call_timeout=config.workflow.call_timeout,
        )
        self.order_workflow = OrderWorkflow(
            catalog,
            stores[ORDERS_TABLE],
            transport,
            archive,
            enrichment=get_enrichment_strategy(config.workflow.enrichment),
            **policy,
        )
        self.transport_workflow = TransportWorkflow(
            catalog, stores[TRANSPORTS_TABLE], transport, archive, **policy
        )

    @classmethod
    def from_config(cls, config: Optional[CourierConfig] = None) -> "CourierApp":
        config = config or load_config()
        stores = {
            table: get_record_store(table, config=config)
            for table in (ORDERS_TABLE, TRANSPORTS_TABLE)
        }
        app = cls(
            config,
            catalog=get_catalog(config),
            stores=stores,
            transport=get_transport(config=config),
            archive=get_archive(config),
        )
        logger.debug(
            f"Courier app ready (catalog={config.catalog.backend}, "
            f"transport={config.transport.backend}, archive={config.archive.backend})"
        )
        return app

    def store_for(self, kind: str) -> RecordStore:
        try:
            return self.stores[kind]
        except KeyError:
            raise ValidationError(
                f"unknown record kind '{kind}', expected one of: {', '.join(self.stores)}"
            ) from None

    async def aclose(self) -> None:
        await self.catalog.aclose()
        await self.transport.disconnect()
        for store in self.stores.values():
            await store.close()

    async def __aenter__(self) -> "CourierApp":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
