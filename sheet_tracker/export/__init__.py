"""Export package: CSV projection of a sheet."""

from sheet_tracker.export.csv_export import (
    CSV_HEADER,
    ExportError,
    ExportRow,
    export_filename,
    export_rows,
    render_csv,
    write_export,
)

__all__ = [
    "CSV_HEADER",
    "ExportError",
    "ExportRow",
    "export_filename",
    "export_rows",
    "render_csv",
    "write_export",
]
