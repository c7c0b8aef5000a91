"""Data models for normalized invoice records."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any


class Source(str, Enum):
    """Where a record came from."""

    CSV = "csv"
    API = "api"


class DateFormat(str, Enum):
    """Date layouts a user can pick for a CSV upload."""

    MM_DD_YYYY = "MM/DD/YYYY"
    DD_MM_YYYY = "DD/MM/YYYY"
    YYYY_MM_DD = "YYYY-MM-DD"
    DD_MM_YYYY_DASH = "DD-MM-YYYY"
    MM_DD_YYYY_DASH = "MM-DD-YYYY"

    @property
    def separator(self) -> str:
        """Character between the date components."""
        return "/" if "/" in self.value else "-"

    @property
    def order(self) -> tuple[str, str, str]:
        """Component names in textual order, e.g. ("month", "day", "year")."""
        names = {"DD": "day", "MM": "month", "YYYY": "year"}
        parts = self.value.split(self.separator)
        return (names[parts[0]], names[parts[1]], names[parts[2]])


class Ledger(str, Enum):
    """Which side of a reconciliation a source box feeds."""

    AR = "AR"  # receivables, customers
    AP = "AP"  # payables, suppliers

    @property
    def invoice_label(self) -> str:
        """Default record type for invoices on this side."""
        return "Receivable Invoice" if self is Ledger.AR else "Payable Invoice"

    @property
    def provider_type(self) -> str:
        """Xero invoice type code for this side."""
        return "ACCREC" if self is Ledger.AR else "ACCPAY"


@dataclass(frozen=True)
class TransactionRecord:
    """A canonical invoice record, identical in shape for CSV and API input.

    ``date`` and ``due_date`` hold ISO-8601 dates when normalization worked
    and the original text otherwise, so consumers must accept both.
    """

    id: str
    transaction_number: str
    amount: Decimal
    date: str
    type: str
    source: Source
    status: str = "UNKNOWN"
    due_date: str | None = None
    reference: str | None = None
    contact_name: str | None = None
    provider_id: str | None = None
    raw_data: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        """Validate record data."""
        if not self.id or not self.id.strip():
            raise ValueError("TransactionRecord.id must be non-empty")
        if not isinstance(self.amount, Decimal) or not self.amount.is_finite():
            raise ValueError(f"TransactionRecord.amount must be finite, got {self.amount!r}")

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for CSV output."""
        return {
            "id": self.id,
            "transaction_number": self.transaction_number,
            "amount": str(self.amount),
            "date": self.date,
            "due_date": self.due_date or "",
            "status": self.status,
            "reference": self.reference or "",
            "contact_name": self.contact_name or "",
            "type": self.type,
            "source": self.source.value,
        }


@dataclass(frozen=True)
class RejectionReason:
    """Why one row or item was left out of a batch.

    ``index`` is the CSV line number (header is line 0) or the position of
    the item in the provider response.
    """

    index: int
    reason: str
    stage: str = "row"

    def __str__(self) -> str:
        return f"{self.stage} {self.index}: {self.reason}"


@dataclass(frozen=True)
class Accepted:
    """A row that became a record."""

    record: TransactionRecord


@dataclass(frozen=True)
class Rejected:
    """A row that was dropped, with the reason."""

    reason: RejectionReason


RowOutcome = Accepted | Rejected


@dataclass
class Batch:
    """The result of one ingestion call, handed to the matching engine."""

    source: Source
    records: list[TransactionRecord] = field(default_factory=list)
    errors: list[RejectionReason] = field(default_factory=list)
    total_input_rows: int = 0

    @classmethod
    def from_outcomes(cls, source: Source, outcomes: list[RowOutcome]) -> "Batch":
        """Build a batch with exactly one outcome per input row."""
        batch = cls(source=source, total_input_rows=len(outcomes))
        for outcome in outcomes:
            if isinstance(outcome, Accepted):
                batch.records.append(outcome.record)
            else:
                batch.errors.append(outcome.reason)
        return batch

    @property
    def accepted_count(self) -> int:
        """Number of records that made it into the batch."""
        return len(self.records)

    @property
    def dropped_count(self) -> int:
        """Number of rows or items that were rejected."""
        return len(self.errors)

    @property
    def is_empty(self) -> bool:
        """Return True when nothing was accepted."""
        return not self.records
