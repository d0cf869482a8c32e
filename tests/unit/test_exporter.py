from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from artisan_store.errors import DownloadUnsupported
from artisan_store.exporter import TabularExporter, export_filename, render_csv
from artisan_store.reporter import OrderReportRow

FIXED_MOMENT = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
FIXED_MILLIS = 1705314600000


def _parse(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def test_render_csv_header_from_first_row() -> None:
    text = render_csv([{"Name": "Priya", "Orders": 8}, {"Name": "Rahul", "Orders": 6}])

    assert text == "Name,Orders\nPriya,8\nRahul,6"


def test_render_csv_quotes_embedded_delimiters_and_quotes() -> None:
    rows = [{"Name": "Sharma, Priya", "Note": 'said "hi"', "Plain": "ok"}]

    text = render_csv(rows)

    assert text.splitlines()[1] == '"Sharma, Priya","said ""hi""",ok'
    assert _parse(text)[1] == ["Sharma, Priya", 'said "hi"', "ok"]


def test_render_csv_quotes_line_breaks() -> None:
    text = render_csv([{"Skills": "Embroidery\nPattern Design", "Other": "a\rb"}])

    assert _parse(text)[1] == ["Embroidery\nPattern Design", "a\rb"]


def test_render_csv_uses_first_row_keys_only() -> None:
    rows = [{"a": 1, "b": 2}, {"a": 3, "c": 9}]

    parsed = _parse(render_csv(rows))

    assert parsed == [["a", "b"], ["1", "2"], ["3", ""]]


def test_render_csv_renders_none_as_empty_cell() -> None:
    assert render_csv([{"a": None, "b": 0}]) == "a,b\n,0"


def test_export_filename_uses_unix_millis() -> None:
    assert export_filename("orders", now=FIXED_MOMENT) == f"orders-{FIXED_MILLIS}.csv"


def test_export_writes_file_and_returns_path(tmp_path: Path) -> None:
    exporter = TabularExporter(tmp_path / "out")

    path = exporter.export([{"Name": "Priya", "Score": 95}], "leaders-1.csv")

    assert path == tmp_path / "out" / "leaders-1.csv"
    assert path.read_text(encoding="utf-8") == "Name,Score\nPriya,95"
    assert exporter.media_type == "text/csv"


def test_export_of_empty_rows_is_a_no_op(tmp_path: Path) -> None:
    target = tmp_path / "out"
    exporter = TabularExporter(target)

    assert exporter.export([], "nothing.csv") is None
    assert not target.exists()


def test_empty_export_without_directory_does_not_raise() -> None:
    assert TabularExporter(None).export([], "nothing.csv") is None


def test_export_without_directory_is_download_unsupported() -> None:
    with pytest.raises(DownloadUnsupported):
        TabularExporter(None).export([{"a": 1}], "a.csv")


def test_export_into_a_file_path_is_download_unsupported(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")

    with pytest.raises(DownloadUnsupported):
        TabularExporter(blocker / "exports").export([{"a": 1}], "a.csv")


def test_export_strips_directory_components_from_filename(tmp_path: Path) -> None:
    path = TabularExporter(tmp_path).export([{"a": 1}], "../../escape.csv")

    assert path == tmp_path / "escape.csv"


def test_export_models_uses_declared_column_titles(tmp_path: Path) -> None:
    rows = [
        OrderReportRow(
            order_id="ORD-2024-001",
            type="toys",
            products=50,
            deadline=date(2024, 12, 31),
            status="active",
        )
    ]

    path = TabularExporter(tmp_path).export_models(rows, "orders.csv", OrderReportRow)

    parsed = _parse(path.read_text(encoding="utf-8"))
    assert parsed == [
        ["Order ID", "Type", "Products", "Deadline", "Status"],
        ["ORD-2024-001", "toys", "50", "2024-12-31", "active"],
    ]


def test_export_models_of_empty_rows_is_a_no_op(tmp_path: Path) -> None:
    assert TabularExporter(tmp_path).export_models([], "orders.csv", OrderReportRow) is None


def test_exported_text_parses_back_with_csv_reader() -> None:
    text = render_csv([{"name": "X", "note": "a,b"}, {"name": "Y", "note": 'say "hi"'}])

    assert text == 'name,note\nX,"a,b"\nY,"say ""hi"""'
    assert _parse(text) == [["name", "note"], ["X", "a,b"], ["Y", 'say "hi"']]


def test_later_row_keys_never_extend_the_header() -> None:
    text = render_csv([{"a": 1}, {"a": 2, "b": 3}])

    assert text.splitlines()[0] == "a"
    assert text == "a\n1\n2"


def test_empty_exports_stay_silent_with_debug_logging(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.DEBUG)
    exporter = TabularExporter(tmp_path)

    assert exporter.export([], "nothing.csv") is None
    assert exporter.export_models([], "orders.csv", OrderReportRow) is None
    assert any(record.export_name == "orders.csv" for record in caplog.records)


def test_render_matches_saved_file(tmp_path: Path) -> None:
    rows = [{"Name": "Meera Singh", "Location": "Jaisalmer, Region"}]
    exporter = TabularExporter(tmp_path)

    path = exporter.export(rows, "leaders.csv")

    assert exporter.render(rows) == 'Name,Location\nMeera Singh,"Jaisalmer, Region"'
    assert path.read_text(encoding="utf-8") == exporter.render(rows)
