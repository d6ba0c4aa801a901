"""Entity shapes, event envelope and archive snapshot for courier."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .constants import EVENT_SCHEMA_VERSION


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CourierModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(populate_by_name=True)

    def to_record(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict using wire field names."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class LineItem(CourierModel):
    """One product line; ``product_name`` is filled by enrichment."""

    product_id: str = Field(alias="productId", min_length=1)
    quantity: int = Field(ge=1)
    product_name: str = Field(default="", alias="productName")

    @property
    def is_enriched(self) -> bool:
        return bool(self.product_name)


class OrderRecord(CourierModel):
    key_alias: ClassVar[str] = "orderId"

    order_id: str = Field(default_factory=_new_id, alias="orderId", min_length=1)
    line_items: List[LineItem] = Field(alias="lineItems")
    carrier_reference: str = Field(default="", alias="carrierReference")

    @property
    def key(self) -> str:
        return self.order_id


class TransportRecord(CourierModel):
    key_alias: ClassVar[str] = "transportId"

    transport_id: str = Field(
        default_factory=_new_id, alias="transportId", min_length=1
    )
    line_items: List[LineItem] = Field(alias="lineItems")
    store_name: str = Field(alias="storeName")

    @property
    def key(self) -> str:
        return self.transport_id


class DomainEvent(CourierModel):
    """Envelope published to the event queue.

    ``payload`` carries the full serialized record. Consumers must tolerate
    duplicates, delivery is at-least-once.
    """

    event_id: str = Field(default_factory=_new_id, alias="eventId")
    event_type: str = Field(alias="eventType")
    schema_version: str = Field(default=EVENT_SCHEMA_VERSION, alias="schemaVersion")
    correlation_id: str = Field(alias="correlationId")
    occurred_at: datetime = Field(default_factory=_utcnow, alias="occurredAt")
    payload: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def for_record(
        cls, event_type: str, record: CourierModel, correlation_id: str
    ) -> "DomainEvent":
        return cls(
            event_type=event_type,
            correlation_id=correlation_id,
            payload=record.to_record(),
        )

    @classmethod
    def from_json(cls, data: str | bytes) -> "DomainEvent":
        """Deserialize event from JSON."""
        return cls.model_validate_json(data)


class ArchiveSnapshot(CourierModel):
    """Audit copy of one workflow invocation. Never read back by workflows."""

    snapshot_id: str = Field(default_factory=_new_id, alias="snapshotId")
    kind: str
    correlation_id: str = Field(alias="correlationId")
    archived_at: datetime = Field(default_factory=_utcnow, alias="archivedAt")
    record: Dict[str, Any]
    carrier_reference: Optional[str] = Field(default=None, alias="carrierReference")
