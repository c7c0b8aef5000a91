"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Any

import pytest

# A receivables export with the usual mix of layouts and problems:
# quoted amounts with thousands separators, a due date column, a blank
# line, a row without an amount and a row with an unusable amount.
RECEIVABLES_CSV = """Invoice Number,Customer,Invoice Date,Due Date,Amount,Status,Reference
INV-001,Acme Ltd,15/01/2024,14/02/2024,"1,250.00",PAID,PO-77
INV-002,"Widgets, Inc",20/01/2024,19/02/2024,$300.50,AUTHORISED,

INV-003,Acme Ltd,31/01/2024,01/03/2024,,DRAFT,
INV-004,Acme Ltd,01/02/2024,02/03/2024,n/a,DRAFT,
INV-005,Acme Ltd,2024/02/10,,-75.25,PAID,CN-1
"""


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests away from real config files and Xero credentials."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("XERO_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("XERO_TENANT_ID", raising=False)
    monkeypatch.delenv("LEDGERLINK_LOG_LEVEL", raising=False)


@pytest.fixture
def receivables_text() -> str:
    """Return CSV text for a receivables upload."""
    return RECEIVABLES_CSV


@pytest.fixture
def receivables_file(tmp_path: Path) -> Path:
    """Return path to a receivables CSV upload."""
    path = tmp_path / "receivables.csv"
    path.write_text(RECEIVABLES_CSV, encoding="utf-8")
    return path


@pytest.fixture
def xero_invoices() -> list[Any]:
    """Return a Xero invoices payload with malformed entries mixed in."""
    return [
        {
            "InvoiceID": "a1b2c3",
            "InvoiceNumber": "INV-100",
            "Type": "ACCREC",
            "Contact": {"ContactID": "c-1", "Name": "Acme Ltd"},
            "Date": "/Date(1705276800000+0000)/",
            "DueDateString": "2024-02-14T00:00:00",
            "Status": "AUTHORISED",
            "Total": 1250.0,
            "Reference": "PO-77",
        },
        None,
        "not an invoice",
        {},
        {
            "InvoiceID": "d4e5f6",
            "InvoiceNumber": "CN-7",
            "Type": "ACCRECCREDIT",
            "DateString": "2024-01-20T00:00:00",
            "Status": "PAID",
            "Total": "-75.25",
        },
    ]
