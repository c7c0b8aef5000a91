"""LedgerLink Ingest - Normalize CSV uploads and Xero invoices for reconciliation."""

from ledgerlink_ingest.models import Batch, DateFormat, Ledger, Source, TransactionRecord
from ledgerlink_ingest.orchestrator import IngestionOrchestrator
from ledgerlink_ingest.xero import XeroClient

__version__ = "0.1.0"
__all__ = [
    "Batch",
    "DateFormat",
    "IngestionOrchestrator",
    "Ledger",
    "Source",
    "TransactionRecord",
    "XeroClient",
]
