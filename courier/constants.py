"""Shared defaults for courier."""

CONFIG_ENV_VAR = "COURIER_CONFIG"
DEFAULT_CONFIG_PATH = "courier.yaml"

DEFAULT_QUEUE = "courier-events"
DEFAULT_CALL_TIMEOUT = 10.0

ORDERS_TABLE = "orders"
TRANSPORTS_TABLE = "transports"

ORDER_ARCHIVE_PREFIX = "orders"
TRANSPORT_ARCHIVE_PREFIX = "transports"

EVENT_SCHEMA_VERSION = "1.0"
ORDER_CREATED = "order.created"
TRANSPORT_CREATED = "transport.created"

_BASE_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
    "Content-Type": "application/json",
}

# Workflow endpoints only accept POST; record endpoints cover the full CRUD set.
WORKFLOW_HEADERS = {**_BASE_HEADERS, "Access-Control-Allow-Methods": "OPTIONS, POST"}
RECORD_HEADERS = {
    **_BASE_HEADERS,
    "Access-Control-Allow-Methods": "OPTIONS, GET, POST, PUT, DELETE",
}
