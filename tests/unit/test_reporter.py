from __future__ import annotations

from datetime import date

from rich.console import Console

from artisan_store.reporter import (
    admin_summary,
    artisan_rows,
    build_table,
    leader_rows,
    order_rows,
    print_records,
    star_performer,
)

REPORT_DATE = date(2024, 6, 1)


def test_artisan_rows_format_amount_and_skills(make_artisan) -> None:
    (row,) = artisan_rows([make_artisan()])

    dumped = row.model_dump(by_alias=True)
    assert dumped["Name"] == "Rahul Sharma"
    assert dumped["Amount to Pay"] == "₹2250"
    assert dumped["Skills"] == "Toy Painting; Quality Control"


def test_order_rows_follow_order_fields(make_order) -> None:
    (row,) = order_rows([make_order()])

    assert row.order_id == "ORD-2024-001"
    assert row.products == 50
    assert row.deadline == date(2024, 12, 31)


def test_leader_rows_follow_leader_fields(make_leader) -> None:
    (row,) = leader_rows([make_leader()])

    assert row.current_order == "ORD-2024-001"
    assert row.artisans == 15
    assert row.order_type == "toys"


def test_admin_summary_counts(make_leader, make_order, make_artisan) -> None:
    leaders = [make_leader(id="1"), make_leader(id="2")]
    orders = [
        make_order(id="o1", status="active"),
        make_order(id="o2", status="pending"),
        make_order(id="o3", status="active"),
    ]
    artisans = [make_artisan(id="a1")]

    summary = admin_summary(leaders, orders, artisans, report_date=REPORT_DATE)

    assert summary.total_leaders == 2
    assert summary.total_orders == 3
    assert summary.active_orders == 2
    assert summary.total_artisans == 1
    assert summary.report_date == REPORT_DATE


def test_star_performer_prefers_highest_rank_then_earliest(make_artisan) -> None:
    artisans = [
        make_artisan(id="1", performance_metric="okay"),
        make_artisan(id="2", performance_metric="great"),
        make_artisan(id="3", performance_metric="great"),
    ]

    assert star_performer(artisans).id == "2"
    assert star_performer([]) is None


def test_build_table_has_one_column_per_field(make_order) -> None:
    table = build_table(order_rows([make_order(), make_order(id="o2")]), "Orders")

    assert [column.header for column in table.columns] == [
        "Order ID",
        "Type",
        "Products",
        "Deadline",
        "Status",
    ]
    assert table.row_count == 2


def test_print_records_reports_empty_collection() -> None:
    console = Console(record=True, width=120)

    print_records([], "Orders", console=console)

    assert "No orders to display." in console.export_text()


def test_print_records_renders_rows(make_leader) -> None:
    console = Console(record=True, width=200)

    print_records(leader_rows([make_leader()]), "Leaders", console=console)

    output = console.export_text()
    assert "Priya Sharma" in output
    assert "1 record(s)" in output
