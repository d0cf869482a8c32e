"""
Tabular (CSV) export for the Artisan Network Store.

Turns an ordered sequence of flat rows into comma-delimited text and saves it
as a UTF-8 file in the export directory, the command-line counterpart of a
browser download. The exporter never reads from the record store; callers
assemble the rows.

Two entry points:

- `export(rows, filename)` takes plain mappings. The header is the key set of
  the FIRST row: extra keys in later rows are dropped and missing keys render
  empty.
- `export_models(rows, filename, row_type)` takes pydantic row models. The
  header is the declared field set of `row_type`, so every row has the same
  shape.
"""

from __future__ import annotations

import csv
import io
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from artisan_store.errors import DownloadUnsupported
from artisan_store.utils.logging import get_logger

log = get_logger(__name__)

RowT = TypeVar("RowT", bound=BaseModel)

CSV_MEDIA_TYPE = "text/csv"
# Both CR and LF in the writer's terminator, so QUOTE_MINIMAL quotes cells holding either.
_ROW_END = "\r\n"


def _csv_line(values: Iterable[Any]) -> str:
    """One CSV record without its terminator; None renders as an empty cell."""
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator=_ROW_END).writerow(
        "" if value is None else value for value in values
    )
    return buffer.getvalue()[: -len(_ROW_END)]


def render_csv(rows: Sequence[Mapping[str, Any]], header: Optional[Sequence[str]] = None) -> str:
    """
    Render rows as CSV text: one header line, then one line per row.

    Lines are joined with "\\n" and the text has no trailing newline. When
    `header` is omitted it is taken from the first row's keys.
    """
    if header is None:
        header = list(rows[0].keys()) if rows else []
    lines = [_csv_line(header)]
    lines.extend(_csv_line(row.get(name) for name in header) for row in rows)
    return "\n".join(lines)


def export_filename(context: str, now: Optional[datetime] = None) -> str:
    """
    Build the conventional export name `{context}-{unix-millis}.csv`.
    """
    moment = now or datetime.now(timezone.utc)
    return f"{context}-{int(moment.timestamp() * 1000)}.csv"


class TabularExporter:
    """
    Save CSV payloads into an export directory.

    Parameters
    ----------
    export_dir : Path | str | None
        Target directory, created on first export. None means the host has
        nowhere to save files; every non-empty export then raises
        DownloadUnsupported.
    """

    media_type: str = CSV_MEDIA_TYPE

    def __init__(self, export_dir: Path | str | None) -> None:
        self.export_dir = Path(export_dir) if export_dir is not None else None

    def render(self, rows: Sequence[Mapping[str, Any]]) -> str:
        return render_csv(rows)

    def export(self, rows: Sequence[Mapping[str, Any]], filename: str) -> Optional[Path]:
        """
        Write `rows` to `export_dir/filename`.

        Returns the written path, or None when `rows` is empty (no file is
        produced and no error is raised).

        Raises
        ------
        DownloadUnsupported
            If no export directory is configured or the file cannot be written.
        """
        if not rows:
            log.debug("[EXPORT SKIPPED] no rows", extra={"export_name": filename})
            return None
        return self._save(render_csv(rows), filename, len(rows))

    def export_models(
        self, rows: Sequence[RowT], filename: str, row_type: Type[RowT]
    ) -> Optional[Path]:
        """
        Typed export: columns are the declared fields of `row_type`, by alias.

        Empty `rows` is a no-op, as with `export`.
        """
        if not rows:
            log.debug("[EXPORT SKIPPED] no rows", extra={"export_name": filename})
            return None
        header = [info.alias or name for name, info in row_type.model_fields.items()]
        dumped: List[Mapping[str, Any]] = [row.model_dump(by_alias=True) for row in rows]
        return self._save(render_csv(dumped, header=header), filename, len(rows))

    def _save(self, text: str, filename: str, row_count: int) -> Path:
        if self.export_dir is None:
            raise DownloadUnsupported("no export directory configured")
        safe_name = Path(filename).name
        if not safe_name:
            raise DownloadUnsupported(f"unusable export filename: {filename!r}")
        target = self.export_dir / safe_name
        try:
            self.export_dir.mkdir(parents=True, exist_ok=True)
            with target.open("w", encoding="utf-8", newline="") as f:
                f.write(text)
        except OSError as exc:
            log.warning(
                "[EXPORT FAILED]", extra={"target": str(target), "error": str(exc)}
            )
            raise DownloadUnsupported(f"cannot write {target}: {exc}") from exc
        log.info("[EXPORT] csv saved", extra={"target": str(target), "rows": row_count})
        return target


__all__ = [
    "CSV_MEDIA_TYPE",
    "TabularExporter",
    "export_filename",
    "render_csv",
]
