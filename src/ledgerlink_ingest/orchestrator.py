"""Orchestrator that runs one source box's ingestion attempts."""

import csv
import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

from ledgerlink_ingest.builders import BuilderRegistry
from ledgerlink_ingest.errors import EmptyResultError, IngestionError
from ledgerlink_ingest.logging_setup import get_logger
from ledgerlink_ingest.models import Batch, DateFormat, Ledger, Source, TransactionRecord
from ledgerlink_ingest.utils import read_file, split_lines
from ledgerlink_ingest.xero import XeroClient

BatchSink = Callable[[Batch], None]

OUTPUT_FIELDS = [
    "id",
    "transaction_number",
    "amount",
    "date",
    "due_date",
    "status",
    "reference",
    "contact_name",
    "type",
    "source",
]


class IngestionState(str, Enum):
    """Where a source box is in its current attempt."""

    IDLE = "idle"
    VALIDATING = "validating"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class IngestionOrchestrator:
    """
    Loads one side of a reconciliation from a CSV upload or from Xero.

    Each source box owns its own orchestrator. A successful attempt hands
    the batch to ``sink`` and goes back to IDLE; a failed attempt stays
    REJECTED until the next attempt or ``reset()``.

    Usage:
        orchestrator = IngestionOrchestrator(Ledger.AR, DateFormat.DD_MM_YYYY, sink=engine.load)
        batch = orchestrator.ingest_file(Path("receivables.csv"))
    """

    def __init__(
        self,
        ledger: Ledger = Ledger.AR,
        date_format: DateFormat | str = DateFormat.MM_DD_YYYY,
        sink: BatchSink | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            ledger: Side of the reconciliation this box feeds
            date_format: Date format used by CSV uploads on this side
            sink: Receives each accepted batch (the matching engine)
            logger: Logger for diagnostics, defaults to the module logger
        """
        self.ledger = Ledger(ledger)
        self.date_format = DateFormat(date_format)
        self.sink = sink
        self.log = logger or get_logger(__name__)
        self._state = IngestionState.IDLE
        self._last_batch: Batch | None = None
        self._last_error: IngestionError | None = None

    @property
    def state(self) -> IngestionState:
        """Current state of this source box."""
        return self._state

    @property
    def last_batch(self) -> Batch | None:
        """Batch from the last successful attempt."""
        return self._last_batch

    @property
    def last_error(self) -> IngestionError | None:
        """Error from the last failed attempt."""
        return self._last_error

    def reset(self) -> None:
        """Clear the box and go back to IDLE."""
        self._state = IngestionState.IDLE
        self._last_batch = None
        self._last_error = None

    def ingest_file(self, filepath: Path) -> Batch:
        """
        Ingest an uploaded CSV file.

        Args:
            filepath: Path to the .csv file

        Returns:
            Accepted batch

        Raises:
            FileFormatError: If the file can't be used
            MissingColumnsError: If required columns are missing
            EmptyResultError: If no row could be used
        """
        return self._run(lambda: self._build_csv(read_file(filepath)), filepath.name)

    def ingest_text(self, text: str) -> Batch:
        """Ingest CSV content that is already in memory."""
        return self._run(lambda: self._build_csv(text), "CSV text")

    def ingest_provider_items(self, items: Any, contact_name: str | None = None) -> Batch:
        """
        Ingest an invoice list already fetched from Xero.

        Args:
            items: Raw invoice objects from the provider response
            contact_name: Selected contact, used where an item has none

        Returns:
            Accepted batch

        Raises:
            EmptyResultError: If there were no items or none could be used
        """
        return self._run(lambda: self._build_api(items, contact_name), "Xero response")

    def ingest_contact(
        self,
        client: XeroClient,
        contact_id: str,
        contact_name: str | None = None,
        **filters: Any,
    ) -> Batch:
        """
        Fetch a contact's invoices from Xero and ingest them.

        Args:
            client: Connected Xero client
            contact_id: Xero ContactID
            contact_name: Selected contact, used where an item has none
            **filters: ``date_from``, ``date_to`` or ``status`` for XeroClient.get_invoices

        Raises:
            NetworkError: If the provider call fails
            EmptyResultError: If there were no items or none could be used
        """

        def attempt() -> Batch:
            items = client.get_invoices(contact_id, self.ledger, **filters)
            return self._build_api(items, contact_name)

        return self._run(attempt, f"Xero contact {contact_name or contact_id}")

    def _run(self, attempt: Callable[[], Batch], label: str) -> Batch:
        """Run one attempt through VALIDATING to ACCEPTED or REJECTED."""
        self._state = IngestionState.VALIDATING
        self._last_error = None
        self.log.info("Validating %s for %s", label, self.ledger.value)

        try:
            batch = attempt()
        except IngestionError as e:
            self._state = IngestionState.REJECTED
            self._last_error = e
            self.log.warning("Rejected %s: %s", label, e.user_message)
            raise
        except Exception as e:
            error = IngestionError(f"Could not process {label}: {e}")
            self._state = IngestionState.REJECTED
            self._last_error = error
            self.log.exception("Unexpected failure while validating %s", label)
            raise error from e

        self._state = IngestionState.ACCEPTED
        self._last_batch = batch
        self.log.info(
            "Accepted %s: %d records, %d dropped",
            label,
            batch.accepted_count,
            batch.dropped_count,
        )
        try:
            if self.sink is not None:
                self.sink(batch)
        finally:
            self._state = IngestionState.IDLE
        return batch

    def _build_csv(self, text: str) -> Batch:
        builder = BuilderRegistry.get_builder(Source.CSV, ledger=self.ledger, logger=self.log)
        batch = builder.build(split_lines(text), self.date_format)
        if batch.is_empty:
            raise EmptyResultError(
                EmptyResultError.NO_USABLE_RECORDS,
                "No valid invoices found in this file. Each row needs a transaction "
                "number, an amount and a date.",
                batch.errors,
            )
        return batch

    def _build_api(self, items: Any, contact_name: str | None) -> Batch:
        if not isinstance(items, (list, tuple)) or not items:
            who = contact_name or "this contact"
            raise EmptyResultError(
                EmptyResultError.NO_ITEMS, f"Xero has no invoices for {who}."
            )

        builder = BuilderRegistry.get_builder(Source.API, ledger=self.ledger, logger=self.log)
        batch = builder.build(items, contact_name)
        if batch.is_empty:
            raise EmptyResultError(
                EmptyResultError.NO_USABLE_RECORDS,
                "None of the invoices from Xero could be used. The data format may be "
                "incompatible.",
                batch.errors,
            )
        return batch

    @staticmethod
    def write_csv(
        records: list[TransactionRecord],
        output_path: Path,
        delimiter: str = ",",
    ) -> None:
        """
        Write records to a CSV file.

        Args:
            records: Records to write
            output_path: Output file path
            delimiter: CSV delimiter (default comma)
        """
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=OUTPUT_FIELDS, delimiter=delimiter)
            writer.writeheader()
            for record in records:
                writer.writerow(record.to_dict())
