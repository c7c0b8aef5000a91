"""Record builder for free-form CSV uploads."""

from typing import ClassVar

from ledgerlink_ingest.builders.base import BuilderRegistry, RecordBuilder
from ledgerlink_ingest.columns import ColumnMap, infer_columns
from ledgerlink_ingest.errors import FileFormatError
from ledgerlink_ingest.models import (
    Accepted,
    Batch,
    DateFormat,
    Rejected,
    RejectionReason,
    RowOutcome,
    Source,
    TransactionRecord,
)
from ledgerlink_ingest.utils import normalize_date, parse_amount, parse_line
from ledgerlink_ingest.xero import TYPE_LABELS


@BuilderRegistry.register
class CsvRecordBuilder(RecordBuilder):
    """Builds records from CSV lines whose columns are found by header text.

    Line 0 is the header row. Each data line is either turned into a record
    with id ``csv-<line number>`` or rejected with a reason; rows are never
    skipped silently.
    """

    source: ClassVar[Source] = Source.CSV

    def build(self, data: list[str], option: DateFormat | str) -> Batch:
        """
        Build a batch from CSV lines.

        Args:
            data: Lines of the file, header first
            option: Date format of the date columns

        Returns:
            Batch of records from the data rows

        Raises:
            FileFormatError: If there is no data row after the header
            MissingColumnsError: If required columns can't be found
        """
        date_format = DateFormat(option)
        lines = [line for line in data if line.strip()]
        if len(lines) < 2:
            raise FileFormatError("CSV must have at least a header row and one data row.")

        columns = infer_columns(parse_line(lines[0]))
        self.log.debug("Resolved CSV columns: %s", columns)

        outcomes: list[RowOutcome] = []
        for row_index in range(1, len(lines)):
            outcome = self._build_row(row_index, parse_line(lines[row_index]), columns, date_format)
            if isinstance(outcome, Rejected):
                self.log.info("Dropped %s", outcome.reason)
            outcomes.append(outcome)

        batch = Batch.from_outcomes(Source.CSV, outcomes)
        self.log.info(
            "CSV rows: %d total, %d accepted, %d dropped",
            batch.total_input_rows,
            batch.accepted_count,
            batch.dropped_count,
        )
        return batch

    def _build_row(
        self,
        row_index: int,
        cells: list[str],
        columns: ColumnMap,
        date_format: DateFormat,
    ) -> RowOutcome:
        """Turn one row's cells into an Accepted record or a Rejected reason."""
        transaction_number = columns.cell(cells, columns.transaction_number)
        amount_str = columns.cell(cells, columns.amount)
        date_str = columns.cell(cells, columns.date)

        missing = [
            label
            for label, value in (
                ("transaction number", transaction_number),
                ("amount", amount_str),
                ("date", date_str),
            )
            if not value
        ]
        if missing:
            return self._reject(row_index, f"Row has no {' or '.join(missing)}.")

        amount = parse_amount(amount_str)
        if amount is None:
            return self._reject(row_index, f"Amount '{amount_str}' is not a number.")

        due_date = columns.cell(cells, columns.due_date)

        record = TransactionRecord(
            id=f"csv-{row_index}",
            transaction_number=transaction_number,
            amount=amount,
            date=normalize_date(date_str, date_format),
            due_date=normalize_date(due_date, date_format) if due_date else None,
            status=columns.cell(cells, columns.status) or "UNKNOWN",
            reference=columns.cell(cells, columns.reference) or None,
            contact_name=columns.cell(cells, columns.contact) or None,
            type=self._record_type(columns.cell(cells, columns.type)),
            source=Source.CSV,
            raw_data={"row": cells},
        )
        return Accepted(record)

    def _record_type(self, value: str) -> str:
        """Label from a type cell, falling back to the ledger side."""
        if value:
            return TYPE_LABELS.get(value.upper(), value)
        if self.ledger is not None:
            return self.ledger.invoice_label
        return "Invoice"

    @staticmethod
    def _reject(row_index: int, reason: str) -> Rejected:
        return Rejected(RejectionReason(index=row_index, reason=reason, stage="row"))
