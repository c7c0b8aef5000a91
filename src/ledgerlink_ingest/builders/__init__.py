"""Record builders package."""

from ledgerlink_ingest.builders.base import BuilderRegistry, RecordBuilder
from ledgerlink_ingest.builders.csv_upload import CsvRecordBuilder
from ledgerlink_ingest.builders.xero_invoices import XeroRecordBuilder

__all__ = [
    "BuilderRegistry",
    "RecordBuilder",
    "CsvRecordBuilder",
    "XeroRecordBuilder",
]
