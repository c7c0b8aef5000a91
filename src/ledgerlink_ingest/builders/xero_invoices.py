"""Record builder for invoice objects returned by the Xero API."""

import time
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, ClassVar

from ledgerlink_ingest.builders.base import BuilderRegistry, RecordBuilder
from ledgerlink_ingest.models import (
    Accepted,
    Batch,
    Rejected,
    RejectionReason,
    RowOutcome,
    Source,
    TransactionRecord,
)
from ledgerlink_ingest.utils import normalize_provider_date, parse_amount
from ledgerlink_ingest.xero import STATUS_LABELS, TYPE_LABELS

# Key spellings seen for each field; the first present key wins
ID_KEYS = ("InvoiceID", "invoiceID", "invoiceId", "invoice_id")
NUMBER_KEYS = ("InvoiceNumber", "invoiceNumber", "invoice_number")
TYPE_KEYS = ("Type", "type")
TOTAL_KEYS = ("Total", "total")
DATE_KEYS = ("DateString", "Date", "date", "IssueDate", "issue_date")
DUE_DATE_KEYS = ("DueDateString", "DueDate", "dueDate", "due_date")
STATUS_KEYS = ("Status", "status")
REFERENCE_KEYS = ("Reference", "reference")
CONTACT_KEYS = ("Contact", "contact")
CONTACT_NAME_KEYS = ("Name", "name")

# Identifier values that came from a serialized missing value upstream
DEGENERATE_IDS = frozenset({"", "undefined", "null", "none"})


def _pick(item: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    """Return the value of the first key present and not None."""
    for key in keys:
        value = item.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str:
    """Stringify a scalar payload value, "" for None."""
    if value is None:
        return ""
    return str(value).strip()


def _usable_id(value: str) -> bool:
    return value.lower() not in DEGENERATE_IDS


def _amount(value: Any) -> Decimal:
    """Convert a provider total to Decimal, 0 when absent.

    Raises:
        ValueError: If the value is present but not a finite number
    """
    if value is None:
        return Decimal(0)
    if isinstance(value, bool):
        raise ValueError(f"total {value!r} is not a number")
    if isinstance(value, (int, float)):
        amount = Decimal(str(value))
    else:
        parsed = parse_amount(str(value))
        if parsed is None:
            raise ValueError(f"total {value!r} is not a number")
        amount = parsed
    if not amount.is_finite():
        raise ValueError(f"total {value!r} is not a finite number")
    return amount


@BuilderRegistry.register
class XeroRecordBuilder(RecordBuilder):
    """Builds records from raw Xero invoice objects.

    The payload shape is not guaranteed, so every item goes through one
    stage that returns either a record or a rejection: structural check,
    transform, then a uniqueness check on the chosen id. One bad item never
    aborts the batch.
    """

    source: ClassVar[Source] = Source.API

    def build(self, data: Any, option: str | None) -> Batch:
        """
        Build a batch from a provider response.

        Args:
            data: List of raw invoice objects, as returned by the API
            option: Name of the selected contact, used when an item has none

        Returns:
            Batch with one outcome per item
        """
        if isinstance(data, (list, tuple)):
            items = list(data)
        else:
            if data is not None:
                self.log.warning("Expected a list of invoices, got %s", type(data).__name__)
            items = []

        contact_name = option or None
        stamp = int(time.time() * 1000)
        seen_ids: set[str] = set()

        outcomes: list[RowOutcome] = []
        for index, item in enumerate(items):
            outcome = self._build_item(index, item, contact_name, stamp, seen_ids)
            if isinstance(outcome, Rejected):
                self.log.warning("Dropped %s", outcome.reason)
            else:
                seen_ids.add(outcome.record.id)
            outcomes.append(outcome)

        batch = Batch.from_outcomes(Source.API, outcomes)
        self.log.info(
            "Provider items: %d total, %d accepted, %d dropped",
            batch.total_input_rows,
            batch.accepted_count,
            batch.dropped_count,
        )
        return batch

    def _build_item(
        self,
        index: int,
        item: Any,
        contact_name: str | None,
        stamp: int,
        seen_ids: set[str],
    ) -> RowOutcome:
        """Turn one raw item into an Accepted record or a Rejected reason."""
        if item is None:
            return self._reject(index, "Invoice entry is empty.", "structure")
        if not isinstance(item, Mapping):
            return self._reject(
                index, f"Invoice entry is a {type(item).__name__}, not an invoice.", "structure"
            )

        native_id = _text(_pick(item, ID_KEYS))
        number = _text(_pick(item, NUMBER_KEYS))
        if not native_id and not number:
            return self._reject(index, "Invoice has no ID and no invoice number.", "structure")

        try:
            record = self._transform(index, item, native_id, number, contact_name, stamp)
        except (ValueError, TypeError, ArithmeticError) as e:
            label = number or native_id
            return self._reject(index, f"Invoice {label} could not be read: {e}.", "transform")

        if record.id in seen_ids:
            return self._reject(index, f"Invoice {record.id} appears more than once.", "validate")

        return Accepted(record)

    def _transform(
        self,
        index: int,
        item: Mapping[str, Any],
        native_id: str,
        number: str,
        contact_name: str | None,
        stamp: int,
    ) -> TransactionRecord:
        type_code = _text(_pick(item, TYPE_KEYS)).upper()

        if _usable_id(native_id):
            record_id = native_id
        elif _usable_id(number):
            record_id = number
        else:
            record_id = f"{type_code or 'INV'}-{stamp}-{index}"

        contact = _pick(item, CONTACT_KEYS)
        name = _text(_pick(contact, CONTACT_NAME_KEYS)) if isinstance(contact, Mapping) else ""

        due_date = normalize_provider_date(_pick(item, DUE_DATE_KEYS))
        status_code = _text(_pick(item, STATUS_KEYS)).upper()

        return TransactionRecord(
            id=record_id,
            transaction_number=number,
            amount=_amount(_pick(item, TOTAL_KEYS)),
            date=normalize_provider_date(_pick(item, DATE_KEYS)),
            due_date=due_date or None,
            status=STATUS_LABELS.get(status_code, "open"),
            reference=_text(_pick(item, REFERENCE_KEYS)) or None,
            contact_name=name or contact_name,
            type=TYPE_LABELS.get(type_code, self._default_type()),
            source=Source.API,
            provider_id=native_id if _usable_id(native_id) else None,
            raw_data=dict(item),
        )

    def _default_type(self) -> str:
        if self.ledger is not None:
            return self.ledger.invoice_label
        return "Invoice"

    @staticmethod
    def _reject(index: int, reason: str, stage: str) -> Rejected:
        return Rejected(RejectionReason(index=index, reason=reason, stage=stage))
