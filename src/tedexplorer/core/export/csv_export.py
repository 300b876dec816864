"""
CSV export of search results.

Column order and labels are fixed so exported files stay compatible
across versions.
"""

from __future__ import annotations

import csv
import io
from datetime import date
from pathlib import Path
from typing import Iterable

from tedexplorer.core.logging import get_logger
from tedexplorer.core.query.models import TYPE_LABELS, SearchResult

logger = get_logger("export")

CSV_COLUMNS = [
    ("ID", "id"),
    ("Title", "title"),
    ("Date", "date"),
    ("CPV Code", "cpv_code"),
    ("CPV Description", "cpv_description"),
    ("Country Code", "country"),
    ("Country Name", "country_name"),
    ("Type", "type"),
    ("URI", "uri"),
]

CSV_HEADER = [label for label, _ in CSV_COLUMNS]

_LABEL_TO_TYPE = {label: tag for tag, label in TYPE_LABELS.items()}


class ExportError(Exception):
    """CSV could not be written or read back."""


def result_row(result: SearchResult) -> list[str]:
    """CSV cells for one result; the type tag becomes its label."""
    row = []
    for _, attr in CSV_COLUMNS:
        if attr == "type":
            row.append(result.type_label)
        else:
            row.append(getattr(result, attr))
    return row


def results_to_csv(results: Iterable[SearchResult]) -> str:
    buffer = io.StringIO()
    # CRLF terminator makes the writer quote cells holding a bare \r
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow(CSV_HEADER)
    for result in results:
        writer.writerow(result_row(result))
    return buffer.getvalue()


def export_to_csv(results: Iterable[SearchResult], path: Path | str) -> Path:
    """Write results to ``path`` as UTF-8 CSV.

    Returns:
        The written path

    Raises:
        ExportError: If the file cannot be written
    """
    path = Path(path)
    rows = list(results)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(results_to_csv(rows), encoding="utf-8", newline="")
    except OSError as e:
        raise ExportError(f"Cannot write {path}: {e}") from e

    logger.info("Exported %d result(s) to %s", len(rows), path)
    return path


def default_export_filename(scope: str = "page", day: date | None = None) -> str:
    """File name like ``ted_search_page_2024-05-01.csv``."""
    day = day or date.today()
    return f"ted_search_{scope}_{day.isoformat()}.csv"

def parse_csv(text: str) -> list[SearchResult]:
    """Read results back from exported CSV text.

    Type labels are mapped back to their tags.

    Raises:
        ExportError: If the text is not valid CSV or the header does not
            match the export format
    """
    reader = csv.reader(io.StringIO(text, newline=""))
    try:
        header = next(reader)
    except StopIteration as e:
        raise ExportError("CSV is empty") from e
    except csv.Error as e:
        raise ExportError(f"Line 1: {e}") from e

    if header != CSV_HEADER:
        raise ExportError(f"Unexpected CSV header: {header}")

    results = []
    try:
        for row in reader:
            if not row:
                continue
            if len(row) != len(CSV_COLUMNS):
                raise ExportError(
                    f"Line {reader.line_num}: expected {len(CSV_COLUMNS)} columns, got {len(row)}"
                )
            values = {attr: cell for (_, attr), cell in zip(CSV_COLUMNS, row)}
            values["type"] = _LABEL_TO_TYPE.get(values["type"], values["type"])
            results.append(SearchResult(**values))
    except csv.Error as e:
        raise ExportError(f"Line {reader.line_num}: {e}") from e
    return results
