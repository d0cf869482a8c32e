"""
Report projections and console rendering for the Artisan Network Store.

Each report is a typed row model whose field aliases are the CSV column
titles, so `TabularExporter.export_models` always emits the same header for a
given report. Projections are pure functions over records already read from
the store.
"""

from __future__ import annotations

from datetime import date
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field
from rich import box
from rich.console import Console
from rich.table import Table

from artisan_store.domain.models import PERFORMANCE_RANK, Artisan, Leader, Order


class _ReportRow(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ArtisanReportRow(_ReportRow):
    name: str = Field(alias="Name")
    performance: str = Field(alias="Performance")
    products_created: int = Field(alias="Products Created")
    quality_check: int = Field(alias="Quality Check")
    amount_to_pay: str = Field(alias="Amount to Pay")
    skills: str = Field(alias="Skills")


class OrderReportRow(_ReportRow):
    order_id: str = Field(alias="Order ID")
    type: str = Field(alias="Type")
    products: int = Field(alias="Products")
    deadline: date = Field(alias="Deadline")
    status: str = Field(alias="Status")


class LeaderReportRow(_ReportRow):
    name: str = Field(alias="Name")
    phone: str = Field(alias="Phone")
    location: str = Field(alias="Location")
    order_type: str = Field(alias="Order Type")
    artisans: int = Field(alias="Artisans")
    orders_received: int = Field(alias="Orders Received")
    current_order: str = Field(alias="Current Order")
    performance_score: int = Field(alias="Performance Score")


class AdminSummaryRow(_ReportRow):
    total_leaders: int = Field(alias="Total Leaders")
    total_orders: int = Field(alias="Total Orders")
    active_orders: int = Field(alias="Active Orders")
    total_artisans: int = Field(alias="Total Artisans")
    report_date: date = Field(alias="Report Date")


def artisan_rows(artisans: Sequence[Artisan], currency: str = "₹") -> List[ArtisanReportRow]:
    """Artisan records report: one row per artisan, skills joined with '; '."""
    return [
        ArtisanReportRow(
            name=a.name,
            performance=a.performance_metric,
            products_created=a.products_created,
            quality_check=a.quality_check,
            amount_to_pay=f"{currency}{a.amount_to_pay}",
            skills="; ".join(a.skills_added),
        )
        for a in artisans
    ]


def order_rows(orders: Sequence[Order]) -> List[OrderReportRow]:
    return [
        OrderReportRow(
            order_id=o.id,
            type=o.type,
            products=o.number_of_products,
            deadline=o.deadline,
            status=o.status,
        )
        for o in orders
    ]


def leader_rows(leaders: Sequence[Leader]) -> List[LeaderReportRow]:
    return [
        LeaderReportRow(
            name=leader.name,
            phone=leader.phone,
            location=leader.location,
            order_type=leader.order_type,
            artisans=leader.number_of_artisans,
            orders_received=leader.orders_received,
            current_order=leader.current_order_id,
            performance_score=leader.performance_score,
        )
        for leader in leaders
    ]


def admin_summary(
    leaders: Sequence[Leader],
    orders: Sequence[Order],
    artisans: Sequence[Artisan],
    report_date: Optional[date] = None,
) -> AdminSummaryRow:
    """Network-wide counts for the admin dashboard report."""
    return AdminSummaryRow(
        total_leaders=len(leaders),
        total_orders=len(orders),
        active_orders=sum(1 for o in orders if o.status == "active"),
        total_artisans=len(artisans),
        report_date=report_date or date.today(),
    )


def star_performer(artisans: Sequence[Artisan]) -> Optional[Artisan]:
    """
    Highest-rated artisan on the performance scale; the earliest wins ties.
    """
    if not artisans:
        return None
    return max(artisans, key=lambda a: PERFORMANCE_RANK[a.performance_metric])


def build_table(rows: Sequence[BaseModel], title: str) -> Table:
    """
    Render models as a rich table, one column per declared field (by alias).
    """
    table = Table(title=title, box=box.ROUNDED, caption=f"{len(rows)} record(s)")
    if not rows:
        return table

    fields = type(rows[0]).model_fields
    for name, info in fields.items():
        table.add_column(info.alias or name, overflow="fold")
    for row in rows:
        table.add_row(*(_cell(getattr(row, name)) for name in fields))
    return table


def _cell(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return "" if value is None else str(value)


def print_records(rows: Sequence[BaseModel], title: str, console: Optional[Console] = None) -> None:
    """Print models as a table, or a notice when there is nothing to show."""
    console = console or Console()
    if not rows:
        console.print(f"[yellow]No {title.lower()} to display.[/yellow]")
        return
    console.print(build_table(rows, title))


__all__ = [
    "AdminSummaryRow",
    "ArtisanReportRow",
    "LeaderReportRow",
    "OrderReportRow",
    "admin_summary",
    "artisan_rows",
    "build_table",
    "leader_rows",
    "order_rows",
    "print_records",
    "star_performer",
]
