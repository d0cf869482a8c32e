from __future__ import annotations

import asyncio
import sys
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

import typer
from rich.console import Console

from artisan_store.config import get_settings
from artisan_store.domain.models import ORDER_STATUSES, ORDER_TYPES
from artisan_store.errors import StoreError
from artisan_store.exporter import TabularExporter, export_filename
from artisan_store.infrastructure.db_factory import build_store, sqlite_path
from artisan_store.reporter import (
    AdminSummaryRow,
    ArtisanReportRow,
    LeaderReportRow,
    OrderReportRow,
    admin_summary,
    artisan_rows,
    leader_rows,
    order_rows,
    print_records,
    star_performer,
)
from artisan_store.seed import seed_store
from artisan_store.services import (
    create_order,
    dispatch_order,
    filter_leaders,
    filter_orders,
    parse_skills,
    record_performance,
    register_artisan,
)
from artisan_store.store import RecordStore
from artisan_store.utils.logging import configure_logging

T = TypeVar("T")

app = typer.Typer(help="Artisan Network Store CLI.")
console = Console()


class Collection(str, Enum):
    artisans = "artisans"
    orders = "orders"
    leaders = "leaders"


class Report(str, Enum):
    artisans = "artisans"
    orders = "orders"
    leaders = "leaders"
    summary = "summary"


def _run(action: Callable[[RecordStore], Awaitable[T]]) -> T:
    """
    Open the configured store, run `action`, close the store.

    Configuration, store and export failures become a one-line error and
    exit code 1.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    try:
        store = build_store(settings)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    async def _session() -> T:
        async with store:
            return await action(store)

    try:
        return asyncio.run(_session())
    except StoreError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _check_choice(value: Optional[str], choices: Sequence[str], option: str) -> None:
    if value and value not in choices:
        raise typer.BadParameter(f"expected one of: {', '.join(choices)}", param_hint=option)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    if settings.store_backend == "sqlite":
        location = str(sqlite_path(settings))
    else:
        location = f"{settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    typer.echo(
        f"backend={settings.store_backend} store={settings.store_name} at {location} | "
        f"timeout={settings.store_timeout_seconds}s export_dir={settings.export_dir} "
        f"pay_rate={settings.pay_rate_per_product}"
    )


@app.command()
def seed() -> None:
    """
    Load the sample leaders, orders and artisans (upsert).
    """
    counts = _run(seed_store)
    typer.echo(", ".join(f"{name}={count}" for name, count in counts.items()))


@app.command()
def show(
    collection: Collection = typer.Argument(..., help="Collection to list."),
    leader: Optional[str] = typer.Option(
        None, "--leader", "-l", help="Only records of this leader."
    ),
    status: Optional[str] = typer.Option(None, "--status", help="Orders: filter by status."),
    order_type: Optional[str] = typer.Option(
        None, "--type", "-t", help="Orders/leaders: filter by type."
    ),
    search: Optional[str] = typer.Option(
        None, "--search", "-q", help="Leaders: name/location search."
    ),
) -> None:
    """
    Print a collection as a table.
    """
    _check_choice(status, ORDER_STATUSES, "--status")
    _check_choice(order_type, ORDER_TYPES, "--type")

    async def _show(store: RecordStore) -> None:
        if collection is Collection.artisans:
            if leader:
                artisans = await store.artisans.get_all_by_field("leaderId", leader)
            else:
                artisans = await store.artisans.get_all()
            print_records(artisans, "Artisans", console=console)
            best = star_performer(artisans)
            if best is not None:
                console.print(
                    f"Star performer: [bold]{best.name}[/bold] ({best.performance_metric})"
                )
        elif collection is Collection.orders:
            if leader:
                orders = await store.orders.get_all_by_field("leaderId", leader)
            else:
                orders = await store.orders.get_all()
            selected = filter_orders(orders, status=status, order_type=order_type)
            print_records(selected, "Orders", console=console)
        else:
            leaders = await store.leaders.get_all()
            selected = filter_leaders(leaders, order_type=order_type, search=search)
            print_records(selected, "Leaders", console=console)

    _run(_show)


@app.command()
def export(
    report: Report = typer.Argument(..., help="Report to export."),
    leader: Optional[str] = typer.Option(
        None, "--leader", "-l", help="Artisans/orders of this leader only."
    ),
) -> None:
    """
    Export a report as CSV into the export directory.
    """
    settings = get_settings()
    exporter = TabularExporter(settings.export_dir)

    async def _export(store: RecordStore):
        if report is Report.artisans:
            if leader:
                artisans = await store.artisans.get_all_by_field("leaderId", leader)
            else:
                artisans = await store.artisans.get_all()
            return exporter.export_models(
                artisan_rows(artisans), export_filename("artisan-records"), ArtisanReportRow
            )
        if report is Report.orders:
            if leader:
                orders = await store.orders.get_all_by_field("leaderId", leader)
            else:
                orders = await store.orders.get_all()
            return exporter.export_models(
                order_rows(orders), export_filename("orders"), OrderReportRow
            )
        if report is Report.leaders:
            leaders = await store.leaders.get_all()
            return exporter.export_models(
                leader_rows(leaders), export_filename("leaders"), LeaderReportRow
            )

        leaders = await store.leaders.get_all()
        orders = await store.orders.get_all()
        artisans = await store.artisans.get_all()
        return exporter.export_models(
            [admin_summary(leaders, orders, artisans)],
            export_filename("admin-dashboard-summary"),
            AdminSummaryRow,
        )

    path = _run(_export)
    if path is None:
        typer.echo("Nothing to export.")
    else:
        typer.echo(f"Saved {path}")


@app.command("add-order")
def add_order(
    order_type: str = typer.Option(..., "--type", "-t", help="toys, embroidery or bags."),
    products: int = typer.Option(..., "--products", "-n", help="Number of products."),
    deadline: datetime = typer.Option(
        ..., "--deadline", "-d", formats=["%Y-%m-%d"], help="YYYY-MM-DD."
    ),
    leader: str = typer.Option(..., "--leader", "-l", help="Leader id."),
) -> None:
    """
    Register a new pending order.
    """
    order = _run(lambda store: create_order(store, order_type, products, deadline.date(), leader))
    typer.echo(
        f"Created {order.id} ({order.type}, {order.number_of_products} products, "
        f"due {order.deadline})"
    )


@app.command()
def dispatch(order_id: str = typer.Argument(..., help="Order id to dispatch.")) -> None:
    """
    Mark an order as dispatched.
    """
    order = _run(lambda store: dispatch_order(store, order_id))
    typer.echo(f"{order.id} is now {order.status}")


@app.command("add-artisan")
def add_artisan(
    name: str = typer.Option(..., "--name", help="Artisan name."),
    leader: str = typer.Option(..., "--leader", "-l", help="Leader id."),
    skills: Optional[str] = typer.Option(None, "--skills", help="Comma-separated skills."),
) -> None:
    """
    Register an artisan under a leader.
    """
    artisan = _run(lambda store: register_artisan(store, name, leader, parse_skills(skills)))
    typer.echo(f"Registered {artisan.id} ({artisan.name})")


@app.command("record-performance")
def record(
    artisan_id: str = typer.Argument(..., help="Artisan id."),
    performance: str = typer.Option(..., "--performance", "-p", help="worst, okay or great."),
    products: int = typer.Option(..., "--products", "-n", help="Products created."),
    quality_check: Optional[int] = typer.Option(
        None, "--quality-check", help="Inspections done."
    ),
    skills: Optional[str] = typer.Option(
        None, "--skills", help="Comma-separated skills (replaces)."
    ),
) -> None:
    """
    Record an artisan's performance; amount to pay is recomputed.
    """
    rate = get_settings().pay_rate_per_product
    artisan = _run(
        lambda store: record_performance(
            store,
            artisan_id,
            performance_metric=performance,
            products_created=products,
            quality_check=quality_check,
            skills=parse_skills(skills) if skills is not None else None,
            rate_per_product=rate,
        )
    )
    typer.echo(
        f"{artisan.name}: {artisan.performance_metric}, amount to pay {artisan.amount_to_pay}"
    )


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
