"""CSV export package."""

from financeio.export.csv_exporter import (
    HEADER,
    CSVExporter,
    ExportError,
    ExportWriteError,
    FormatError,
    build_csv,
    export_filename,
    format_amount,
    quote_text,
)

__all__ = [
    "HEADER",
    "CSVExporter",
    "ExportError",
    "ExportWriteError",
    "FormatError",
    "build_csv",
    "export_filename",
    "format_amount",
    "quote_text",
]
