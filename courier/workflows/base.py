"""Step builders shared by the order and transport workflows."""

from __future__ import annotations

import uuid
from typing import Awaitable, Optional, Sequence, TypeVar

from ..archive import BaseArchive, new_archive_key
from ..constants import DEFAULT_QUEUE
from ..contracts import ArchiveSnapshot, CourierModel, DomainEvent
from ..saga import SagaRunner, WorkflowRun, WorkflowStep
from ..store import RecordStore
from ..transports import BaseTransport
from ..utils.timeouts import call_with_timeout

T = TypeVar("T")

RECORD_STORE = "record store"
EVENT_QUEUE = "event queue"
ARCHIVE = "archive"


class BaseWorkflow:
    """Holds the collaborators and execution policy of a workflow."""

    def __init__(
        self,
        store: RecordStore,
        transport: BaseTransport,
        archive: BaseArchive,
        *,
        queue: str = DEFAULT_QUEUE,
        compensate: bool = False,
        call_timeout: Optional[float] = None,
    ) -> None:
        self.store = store
        self.transport = transport
        self.archive = archive
        self.queue = queue
        self.compensate = compensate
        self.call_timeout = call_timeout

    async def _bounded(self, awaitable: Awaitable[T], dependency: str) -> T:
        return await call_with_timeout(awaitable, self.call_timeout, dependency)

    def _persist_step(self, key: str, record: CourierModel) -> WorkflowStep:
        """Write ``record`` under ``key``; compensated by deleting it."""

        async def persist() -> None:
            await self._bounded(self.store.put(key, record.to_record()), RECORD_STORE)

        async def retract() -> None:
            await self._bounded(self.store.delete(key), RECORD_STORE)

        return WorkflowStep(
            "persist", persist, compensate=retract, dependency=RECORD_STORE
        )

    def _publish_step(
        self, event_type: str, record: CourierModel, correlation_id: str
    ) -> WorkflowStep:
        """Publish the creation event. A sent event cannot be retracted."""

        async def publish() -> str:
            event = DomainEvent.for_record(event_type, record, correlation_id)
            await self._bounded(self.transport.publish(self.queue, event), EVENT_QUEUE)
            return event.event_id

        return WorkflowStep("publish", publish, dependency=EVENT_QUEUE)

    def _archive_step(
        self,
        prefix: str,
        kind: str,
        record: CourierModel,
        correlation_id: str,
        carrier_reference: Optional[str] = None,
    ) -> WorkflowStep:
        """Write a snapshot under a fresh key. Archive entries are never removed."""

        async def archive() -> str:
            key = new_archive_key(prefix)
            snapshot = ArchiveSnapshot(
                kind=kind,
                correlation_id=correlation_id,
                record=record.to_record(),
                carrier_reference=carrier_reference,
            )
            await self._bounded(self.archive.store(key, snapshot.to_json()), ARCHIVE)
            return key

        return WorkflowStep("archive", archive, dependency=ARCHIVE)

    async def _run(
        self,
        name: str,
        steps: Sequence[WorkflowStep],
        correlation_id: Optional[str],
    ) -> WorkflowRun:
        runner = SagaRunner(name, steps, compensate=self.compensate)
        return await runner.run(correlation_id or str(uuid.uuid4()))
