"""Tests for CSV column detection."""

import pytest

from ledgerlink_ingest.columns import ColumnMap, infer_columns
from ledgerlink_ingest.errors import MissingColumnsError


class TestInferColumns:
    """Tests for infer_columns function."""

    def test_typical_export(self) -> None:
        """Test a typical invoice export header."""
        columns = infer_columns(
            ["Invoice Number", "Customer", "Invoice Date", "Due Date", "Amount", "Status",
             "Reference"]
        )

        assert columns.transaction_number == 0
        assert columns.contact == 1
        assert columns.date == 2
        assert columns.due_date == 3
        assert columns.amount == 4
        assert columns.status == 5
        assert columns.reference == 6
        assert columns.type is None

    def test_case_insensitive(self) -> None:
        """Test header matching ignores case and padding."""
        columns = infer_columns(["  TRANSACTION NO ", "DATE", "TOTAL"])

        assert columns == ColumnMap(transaction_number=0, amount=2, date=1)

    def test_due_date_not_used_as_date(self) -> None:
        """Test a due date column listed first is not taken as the main date."""
        columns = infer_columns(["Due Date", "Number", "Date", "Value"])

        assert columns.date == 2
        assert columns.due_date == 0

    def test_amount_due_not_used_as_due_date(self) -> None:
        """Test an "Amount Due" header is not taken as the due date."""
        columns = infer_columns(["Invoice", "Date", "Amount Due", "Due Date"])

        assert columns.amount == 2
        assert columns.due_date == 3

    def test_keyword_priority(self) -> None:
        """Test earlier keywords win over earlier columns."""
        columns = infer_columns(["ID", "Invoice #", "Transaction Ref", "Date", "Amount"])

        # "transaction" beats "invoice", which beats "id"
        assert columns.transaction_number == 2

    def test_transaction_date_not_used_as_number(self) -> None:
        """Test headers naming a date or amount are skipped for the number."""
        columns = infer_columns(["Transaction Date", "Invoice Total", "Invoice No"])

        assert columns.transaction_number == 2
        assert columns.date == 0
        assert columns.amount == 1

    def test_amount_priority(self) -> None:
        """Test "amount" is preferred to "total"."""
        columns = infer_columns(["Number", "Date", "Total", "Amount"])

        assert columns.amount == 3

    def test_vendor_and_type_columns(self) -> None:
        """Test optional vendor and type columns."""
        columns = infer_columns(["Type", "Vendor Name", "Bill Number", "Date", "Amount"])

        assert columns.type == 0
        assert columns.contact == 1
        assert columns.transaction_number == 2

    def test_missing_all_required(self) -> None:
        """Test headers with none of the required fields."""
        with pytest.raises(MissingColumnsError) as exc_info:
            infer_columns(["foo", "bar"])

        assert exc_info.value.missing == ["transaction number", "amount", "date"]
        assert "transaction number, amount and date" in exc_info.value.user_message

    def test_missing_one_required(self) -> None:
        """Test the message names the single missing column."""
        with pytest.raises(MissingColumnsError) as exc_info:
            infer_columns(["Invoice", "Date"])

        assert exc_info.value.missing == ["amount"]
        assert exc_info.value.user_message == "This file is missing an amount column."

    def test_idempotent(self) -> None:
        """Test repeated calls give the same mapping."""
        headers = ["Invoice Number", "Date", "Due", "Amount", "Reference"]

        assert infer_columns(headers) == infer_columns(headers)
        assert infer_columns(list(headers)) == infer_columns(headers)


class TestColumnMapCell:
    """Tests for ColumnMap.cell helper."""

    def test_present(self) -> None:
        """Test reading an existing cell."""
        assert ColumnMap.cell(["a", "b"], 1) == "b"

    def test_absent_column(self) -> None:
        """Test None index gives empty string."""
        assert ColumnMap.cell(["a", "b"], None) == ""

    def test_short_row(self) -> None:
        """Test index past the end of a short row gives empty string."""
        assert ColumnMap.cell(["a"], 3) == ""
