"""Result export."""

from .csv_export import (
    CSV_HEADER,
    ExportError,
    default_export_filename,
    export_to_csv,
    parse_csv,
    results_to_csv,
)

__all__ = [
    "CSV_HEADER",
    "ExportError",
    "default_export_filename",
    "export_to_csv",
    "parse_csv",
    "results_to_csv",
]
