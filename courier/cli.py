"""Command line interface for running courier workflows."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional

import typer

from courier.app import CourierApp
from courier.config import CourierConfig, load_config
from courier.handlers import HandlerResponse, Handlers

app = typer.Typer(help="CLI for courier order and transport workflows")

# Command groups
order_app = typer.Typer(help="Order workflows")
transport_app = typer.Typer(help="Transport workflows")
record_app = typer.Typer(help="Read and manage stored records")
archive_app = typer.Typer(help="Inspect archived snapshots")
events_app = typer.Typer(help="Consume published events")

app.add_typer(order_app, name="order")
app.add_typer(transport_app, name="transport")
app.add_typer(record_app, name="record")
app.add_typer(archive_app, name="archive")
app.add_typer(events_app, name="events")


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to a YAML configuration file"
    ),
) -> None:
    """Courier CLI entry point."""
    settings = load_config(str(config) if config else None)
    logging.basicConfig(level=settings.log_level)
    ctx.obj = settings


def _invoke(
    ctx: typer.Context, call: Callable[[Handlers], Awaitable[HandlerResponse]]
) -> None:
    config: CourierConfig = ctx.obj

    async def run() -> HandlerResponse:
        async with CourierApp.from_config(config) as courier:
            return await call(Handlers(courier))

    response = asyncio.run(run())
    typer.echo(json.dumps(response.payload(), indent=2))
    if not response.ok:
        raise typer.Exit(code=1)


def _read_payload(path: Path) -> str:
    if not path.is_file():
        typer.secho(f"Payload file not found: {path}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    return path.read_text()


@order_app.command("create")
def order_create(ctx: typer.Context, payload: Path) -> None:
    """
    Create an order from a JSON payload file.

    Resolves product names, stores the order, publishes ``order.created``
    and archives a snapshot. Exits with code 1 when any step fails.

    Example:
        courier order create ./order.json
        courier --config prod.yaml order create ./order.json
    """
    body = _read_payload(payload)
    _invoke(ctx, lambda handlers: handlers.create_order(body))


@transport_app.command("create")
def transport_create(ctx: typer.Context, payload: Path) -> None:
    """Store a transport and publish ``transport.created``."""
    body = _read_payload(payload)
    _invoke(ctx, lambda handlers: handlers.create_transport(body))


@transport_app.command("finalize")
def transport_finalize(ctx: typer.Context, payload: Path) -> None:
    """
    Decrement stock for every line item, then archive the transport.

    Stock already decremented before a failing item stays decremented, and
    running the command twice decrements twice.
    """
    body = _read_payload(payload)
    _invoke(ctx, lambda handlers: handlers.finalize_transport(body))


@record_app.command("get")
def record_get(ctx: typer.Context, kind: str, key: str) -> None:
    """Show one stored record, e.g. ``courier record get orders <id>``."""
    _invoke(ctx, lambda handlers: handlers.get_record(kind, key))


@record_app.command("list")
def record_list(ctx: typer.Context, kind: str) -> None:
    """List stored records of one kind (orders, transports)."""
    _invoke(ctx, lambda handlers: handlers.list_records(kind))


@record_app.command("save")
def record_save(ctx: typer.Context, kind: str, payload: Path) -> None:
    """Create or overwrite a record without running a workflow."""
    body = _read_payload(payload)
    _invoke(ctx, lambda handlers: handlers.save_record(kind, body))


@record_app.command("delete")
def record_delete(ctx: typer.Context, kind: str, key: str) -> None:
    """Delete one stored record."""
    _invoke(ctx, lambda handlers: handlers.delete_record(kind, key))


@archive_app.command("list")
def archive_list(ctx: typer.Context, prefix: str = "") -> None:
    """List archived snapshot keys, optionally under ``--prefix``."""
    config: CourierConfig = ctx.obj

    async def run() -> list[str]:
        async with CourierApp.from_config(config) as courier:
            return await courier.archive.list_keys(prefix)

    keys = asyncio.run(run())
    if not keys:
        typer.echo("No archived snapshots found")
        return
    for key in keys:
        typer.echo(key)


@archive_app.command("show")
def archive_show(ctx: typer.Context, key: str) -> None:
    """Print one archived snapshot."""
    config: CourierConfig = ctx.obj

    async def run() -> Optional[str]:
        async with CourierApp.from_config(config) as courier:
            return await courier.archive.read(key)

    body = asyncio.run(run())
    if body is None:
        typer.echo("Snapshot not found")
        raise typer.Exit(code=1)
    typer.echo(json.dumps(json.loads(body), indent=2))


@events_app.command("tail")
def events_tail(
    ctx: typer.Context,
    lifespan: Optional[float] = typer.Option(
        None, help="Stop after this many seconds (default: run until interrupted)"
    ),
) -> None:
    """
    Print events from the configured queue as they arrive.

    Events are acknowledged after printing. Delivery is at-least-once, so the
    same ``eventId`` may appear more than once.

    Example:
        courier events tail --lifespan 30
    """
    config: CourierConfig = ctx.obj
    queue = config.transport.queue
    typer.echo(f"Listening on queue: {queue}")

    async def run() -> None:
        async with CourierApp.from_config(config) as courier:
            async for raw, event in courier.transport.subscribe(queue, lifespan=lifespan):
                typer.echo(
                    f"{event.occurred_at.isoformat()} {event.event_type} "
                    f"{event.event_id} correlation_id={event.correlation_id}"
                )
                await courier.transport.ack(raw)

    asyncio.run(run())


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
