"""Utility functions for ledgerlink-ingest."""

from ledgerlink_ingest.utils.dates import normalize_date, normalize_provider_date
from ledgerlink_ingest.utils.parsing import (
    CsvPreview,
    parse_amount,
    parse_line,
    preview_file,
    preview_lines,
    read_file,
    split_lines,
)

__all__ = [
    "CsvPreview",
    "normalize_date",
    "normalize_provider_date",
    "parse_amount",
    "parse_line",
    "preview_file",
    "preview_lines",
    "read_file",
    "split_lines",
]
