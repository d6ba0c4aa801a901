"""Request handlers: workflow entry points and record CRUD.

Each handler takes an already-extracted request body (JSON text, bytes or a
mapping) and, for CRUD, an already-extracted key, and returns a
:class:`HandlerResponse`. Failures never escape a handler; they are mapped to
a status code and a JSON error body.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Type, Union

import pydantic
from pydantic import BaseModel, Field

from .app import CourierApp
from .constants import (
    ORDERS_TABLE,
    RECORD_HEADERS,
    TRANSPORTS_TABLE,
    WORKFLOW_HEADERS,
)
from .contracts import CourierModel, OrderRecord, TransportRecord
from .errors import CourierError, DependencyUnavailable, NotFound, ValidationError
from .utils.timeouts import call_with_timeout

logger = logging.getLogger(__name__)

RECORD_STORE = "record store"

RequestBody = Union[str, bytes, Mapping[str, Any], None]

RECORD_MODELS: Dict[str, Type[CourierModel]] = {
    ORDERS_TABLE: OrderRecord,
    TRANSPORTS_TABLE: TransportRecord,
}


class HandlerResponse(BaseModel):
    status_code: int = 200
    headers: Dict[str, str] = Field(default_factory=lambda: dict(RECORD_HEADERS))
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def payload(self) -> Any:
        """Decode the JSON body."""
        return json.loads(self.body) if self.body else None


def _load(body: RequestBody) -> Dict[str, Any]:
    if body is None or body == "" or body == b"":
        raise ValidationError("request body is required")
    if isinstance(body, (str, bytes, bytearray)):
        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"request body is not valid JSON: {exc}") from exc
    else:
        data = dict(body)
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")
    return data


def parse_record(
    body: RequestBody, model: Type[CourierModel], key: Optional[str] = None
) -> CourierModel:
    """Validate ``body`` as ``model``.

    When ``key`` is given it fills a missing id and must match a present one.
    """
    data = _load(body)
    key_alias = getattr(model, "key_alias", None)
    if key is not None and key_alias:
        data.setdefault(key_alias, key)
        if data[key_alias] != key:
            raise ValidationError(
                f"{key_alias} '{data[key_alias]}' does not match the addressed record '{key}'"
            )
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ValidationError(f"invalid {model.__name__}: {problems}") from exc


def _respond(
    body: Any, status_code: int = 200, headers: Mapping[str, str] = RECORD_HEADERS
) -> HandlerResponse:
    return HandlerResponse(
        status_code=status_code, headers=dict(headers), body=json.dumps(body)
    )


class Handlers:
    """Entry points exposed to the invoking framework."""

    def __init__(self, app: CourierApp) -> None:
        self.app = app

    async def _handle(
        self,
        action: str,
        call: Callable[[], Awaitable[Any]],
        headers: Mapping[str, str] = RECORD_HEADERS,
    ) -> HandlerResponse:
        try:
            body = await call()
        except CourierError as exc:
            logger.error(f"Failed to {action}: {exc}")
            error = exc.to_dict()
            error["message"] = f"Failed to {action}: {exc}"
            return _respond(error, exc.status_code, headers)
        except Exception as exc:
            logger.exception(f"Unexpected error while trying to {action}")
            return _respond(
                {"error": type(exc).__name__, "message": f"Failed to {action}: {exc}"},
                500,
                headers,
            )
        return _respond(body, headers=headers)

    # ------------------------------------------------------------------
    # Workflows
    async def create_order(
        self, body: RequestBody, correlation_id: Optional[str] = None
    ) -> HandlerResponse:
        async def call() -> Dict[str, Any]:
            order = parse_record(body, OrderRecord)
            run = await self.app.order_workflow.create(order, correlation_id)
            return {
                "message": "Order created successfully",
                "correlationId": run.correlation_id,
                "eventId": run.outputs.get("publish"),
                "archiveKey": run.outputs.get("archive"),
                "order": order.to_record(),
            }

        return await self._handle("create order", call, WORKFLOW_HEADERS)

    async def create_transport(
        self, body: RequestBody, correlation_id: Optional[str] = None
    ) -> HandlerResponse:
        async def call() -> Dict[str, Any]:
            record = parse_record(body, TransportRecord)
            run = await self.app.transport_workflow.create(record, correlation_id)
            return {
                "message": "Transport created successfully",
                "correlationId": run.correlation_id,
                "eventId": run.outputs.get("publish"),
                "transport": record.to_record(),
            }

        return await self._handle("create transport", call, WORKFLOW_HEADERS)

    async def finalize_transport(
        self, body: RequestBody, correlation_id: Optional[str] = None
    ) -> HandlerResponse:
        async def call() -> Dict[str, Any]:
            record = parse_record(body, TransportRecord)
            run = await self.app.transport_workflow.finalize(record, correlation_id)
            return {
                "message": "Transport finalized successfully",
                "correlationId": run.correlation_id,
                "archiveKey": run.outputs.get("archive"),
                "decremented": run.outputs.get("inventory", 0),
            }

        return await self._handle("finalize transport", call, WORKFLOW_HEADERS)

    # ------------------------------------------------------------------
    # Record CRUD
    async def _store_call(self, awaitable: Awaitable[Any]) -> Any:
        """Await a record store call, reporting backend failures as unavailability."""
        try:
            return await call_with_timeout(
                awaitable, self.app.config.workflow.call_timeout, RECORD_STORE
            )
        except CourierError:
            raise
        except Exception as exc:
            raise DependencyUnavailable(RECORD_STORE, str(exc)) from exc

    def _model_for(self, kind: str) -> Type[CourierModel]:
        self.app.store_for(kind)
        return RECORD_MODELS[kind]

    async def save_record(self, kind: str, body: RequestBody) -> HandlerResponse:
        async def call() -> Dict[str, Any]:
            record = parse_record(body, self._model_for(kind))
            await self._store_call(
                self.app.store_for(kind).put(record.key, record.to_record())
            )
            return {"message": "Record saved successfully", "key": record.key}

        return await self._handle(f"save {kind} record", call)

    async def get_record(self, kind: str, key: str) -> HandlerResponse:
        async def call() -> Dict[str, Any]:
            record = await self._store_call(self.app.store_for(kind).get(key))
            if record is None:
                raise NotFound(kind, key)
            return record

        return await self._handle(f"get {kind} record", call)

    async def update_record(
        self, kind: str, key: str, body: RequestBody
    ) -> HandlerResponse:
        async def call() -> Dict[str, Any]:
            record = parse_record(body, self._model_for(kind), key=key)
            store = self.app.store_for(kind)
            if await self._store_call(store.get(key)) is None:
                raise NotFound(kind, key)
            await self._store_call(store.put(key, record.to_record()))
            return {"message": "Record updated successfully", "key": key}

        return await self._handle(f"update {kind} record", call)

    async def delete_record(self, kind: str, key: str) -> HandlerResponse:
        async def call() -> Dict[str, Any]:
            if not await self._store_call(self.app.store_for(kind).delete(key)):
                raise NotFound(kind, key)
            return {"message": "Record deleted successfully", "key": key}

        return await self._handle(f"delete {kind} record", call)

    async def list_records(self, kind: str) -> HandlerResponse:
        async def call() -> list:
            return await self._store_call(self.app.store_for(kind).list_records())

        return await self._handle(f"list {kind} records", call)
