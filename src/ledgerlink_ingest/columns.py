"""Header-driven column detection for free-form CSV uploads."""

from dataclasses import dataclass

from ledgerlink_ingest.errors import MissingColumnsError


@dataclass(frozen=True)
class FieldRule:
    """How to find one field's column from the header text.

    Keywords are tried in order; the first keyword that appears in any
    header wins. Headers containing an excluded word are never used.
    """

    label: str
    keywords: tuple[str, ...]
    excludes: tuple[str, ...] = ()
    required: bool = False

    def find(self, headers: list[str]) -> int | None:
        """Return the index of the matching header, or None."""
        for keyword in self.keywords:
            for idx, header in enumerate(headers):
                if keyword in header and not any(word in header for word in self.excludes):
                    return idx
        return None


RULES: dict[str, FieldRule] = {
    "transaction_number": FieldRule(
        label="transaction number",
        keywords=("transaction", "invoice", "number", "id"),
        excludes=("date", "due", "amount", "total", "type", "status"),
        required=True,
    ),
    "amount": FieldRule(
        label="amount",
        keywords=("amount", "total", "value"),
        required=True,
    ),
    "date": FieldRule(
        label="date",
        keywords=("date",),
        excludes=("due",),
        required=True,
    ),
    "status": FieldRule(label="status", keywords=("status",)),
    "due_date": FieldRule(label="due date", keywords=("due",), excludes=("amount",)),
    "reference": FieldRule(label="reference", keywords=("reference", "ref")),
    "contact": FieldRule(
        label="contact",
        keywords=("vendor", "customer", "supplier", "contact"),
    ),
    "type": FieldRule(label="type", keywords=("type",)),
}


@dataclass(frozen=True)
class ColumnMap:
    """Column positions resolved from a header row."""

    transaction_number: int
    amount: int
    date: int
    status: int | None = None
    due_date: int | None = None
    reference: int | None = None
    contact: int | None = None
    type: int | None = None

    @staticmethod
    def cell(cells: list[str], idx: int | None) -> str:
        """Get a cell by optional index, "" when absent or out of range."""
        if idx is None or idx >= len(cells):
            return ""
        return cells[idx]


def infer_columns(headers: list[str]) -> ColumnMap:
    """
    Work out which column holds which field.

    Args:
        headers: Header cells from the first line of the file

    Returns:
        ColumnMap with required and optional column indices

    Raises:
        MissingColumnsError: If transaction number, amount or date can't be found
    """
    normalized = [h.strip().lower() for h in headers]

    found = {name: rule.find(normalized) for name, rule in RULES.items()}

    missing = [
        rule.label for name, rule in RULES.items() if rule.required and found[name] is None
    ]
    if missing:
        raise MissingColumnsError(missing)

    return ColumnMap(**found)  # type: ignore[arg-type]
