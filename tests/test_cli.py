"""Tests for the command-line interface."""

import csv
import json
from datetime import date
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from ledgerlink_ingest import cli
from ledgerlink_ingest.models import Ledger


@pytest.fixture(autouse=True)
def quiet_cli(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run from an empty directory and leave global logging alone."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "configure_logging", lambda level=None: None)


def run_cli(monkeypatch: pytest.MonkeyPatch, *args: str) -> int:
    monkeypatch.setattr("sys.argv", ["ledgerlink-ingest", *args])
    return cli.main()


def read_output(path: Path) -> list[dict[str, str]]:
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


class TestCsvInput:
    """Tests for CSV uploads from the command line."""

    def test_ingest_csv(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        receivables_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test a CSV is ingested and written out."""
        output = tmp_path / "out.csv"

        code = run_cli(
            monkeypatch, str(receivables_file), "--date-format", "DD/MM/YYYY", "-o", str(output)
        )

        assert code == 0
        rows = read_output(output)
        assert [r["id"] for r in rows] == ["csv-1", "csv-2", "csv-5"]
        assert rows[0]["date"] == "2024-01-15"
        err = capsys.readouterr().err
        assert "Accepted: 3" in err
        assert "Dropped: 2" in err

    def test_date_format_from_config(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, receivables_file: Path
    ) -> None:
        """Test the side's configured date format is used."""
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"sources": {"AP": {"date_format": "DD/MM/YYYY"}}}))
        output = tmp_path / "out.csv"

        code = run_cli(
            monkeypatch, str(receivables_file), "--side", "AP", "--config", str(config),
            "-o", str(output),
        )

        assert code == 0
        rows = read_output(output)
        assert rows[0]["date"] == "2024-01-15"
        assert rows[0]["type"] == "Payable Invoice"

    def test_missing_columns(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test the user message is printed and nothing is written."""
        bad = tmp_path / "bad.csv"
        bad.write_text("foo,bar\n1,2\n")
        output = tmp_path / "out.csv"

        code = run_cli(monkeypatch, str(bad), "-o", str(output))

        assert code == 1
        assert not output.exists()
        assert "missing the transaction number, amount and date columns" in (
            capsys.readouterr().err
        )

    def test_all_rows_dropped_shows_reasons(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test every rejection reason is shown when nothing is usable."""
        bad = tmp_path / "bad.csv"
        bad.write_text("Invoice,Date,Amount\nA-1,2024-01-01,n/a\nA-2,,5\n")

        code = run_cli(monkeypatch, str(bad))

        assert code == 1
        err = capsys.readouterr().err
        assert "No valid invoices found in this file." in err
        assert "Dropped: 2" in err
        assert "row 1: Amount 'n/a' is not a number." in err
        assert "row 2: Row has no date." in err

    def test_preview(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        receivables_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test --preview shows the first rows and writes nothing."""
        code = run_cli(monkeypatch, str(receivables_file), "--preview")

        assert code == 0
        out = capsys.readouterr().out
        assert out.splitlines()[0].startswith("Invoice Number | Customer")
        assert "INV-002 | Widgets, Inc" in out
        assert "(5 data rows)" in out
        assert not (tmp_path / "records.csv").exists()

    def test_preview_bad_file(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test --preview reports an unusable upload."""
        path = tmp_path / "only_header.csv"
        path.write_text("Invoice,Date,Amount\n")

        assert run_cli(monkeypatch, str(path), "--preview") == 1
        assert "at least a header row" in capsys.readouterr().err

    def test_tsv_output(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, receivables_file: Path
    ) -> None:
        """Test tab-separated output."""
        output = tmp_path / "out.tsv"

        code = run_cli(monkeypatch, str(receivables_file), "--format", "tsv", "-o", str(output))

        assert code == 0
        assert "\t" in output.read_text(encoding="utf-8").splitlines()[0]


class TestSourceSelection:
    """Tests for choosing exactly one source."""

    def test_no_source(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test running without any source fails."""
        assert run_cli(monkeypatch) == 1

    def test_two_sources(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, receivables_file: Path
    ) -> None:
        """Test giving both a CSV and Xero data fails."""
        saved = tmp_path / "invoices.json"
        saved.write_text("[]")

        assert run_cli(monkeypatch, str(receivables_file), "--xero-json", str(saved)) == 1


class TestXeroInput:
    """Tests for Xero sources from the command line."""

    def test_saved_response(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, xero_invoices: list[Any]
    ) -> None:
        """Test a saved Xero response wrapped in an Invoices object."""
        saved = tmp_path / "invoices.json"
        saved.write_text(json.dumps({"Invoices": xero_invoices}))
        output = tmp_path / "out.csv"

        code = run_cli(
            monkeypatch, "--xero-json", str(saved), "--contact-name", "Acme Ltd",
            "-o", str(output),
        )

        assert code == 0
        rows = read_output(output)
        assert [r["id"] for r in rows] == ["a1b2c3", "d4e5f6"]
        assert rows[1]["contact_name"] == "Acme Ltd"

    def test_saved_response_empty(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test an empty saved response reports no invoices."""
        saved = tmp_path / "invoices.json"
        saved.write_text("[]")

        code = run_cli(monkeypatch, "--xero-json", str(saved), "--contact-name", "Acme Ltd")

        assert code == 1
        assert "Xero has no invoices for Acme Ltd." in capsys.readouterr().err

    def test_unreadable_saved_response(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a file that isn't JSON."""
        saved = tmp_path / "invoices.json"
        saved.write_text("not json")

        assert run_cli(monkeypatch, "--xero-json", str(saved)) == 1

    def test_contact_requires_credentials(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test fetching without a token fails before any request."""
        assert run_cli(monkeypatch, "--xero-contact", "c-1") == 1

    @patch("ledgerlink_ingest.cli.XeroClient")
    def test_fetch_contact(
        self,
        mock_client_class: MagicMock,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        xero_invoices: list[Any],
    ) -> None:
        """Test fetching a contact's invoices with credentials from the environment."""
        monkeypatch.setenv("XERO_ACCESS_TOKEN", "env-token")
        monkeypatch.setenv("XERO_TENANT_ID", "env-tenant")
        mock_client = MagicMock()
        mock_client.get_invoices.return_value = xero_invoices
        mock_client_class.return_value = mock_client
        output = tmp_path / "out.csv"

        code = run_cli(
            monkeypatch, "--xero-contact", "c-1", "--side", "AP", "-o", str(output)
        )

        assert code == 0
        mock_client_class.assert_called_once_with("env-token", "env-tenant", timeout=30.0)
        mock_client.get_invoices.assert_called_once_with("c-1", Ledger.AP)
        assert len(read_output(output)) == 2

    @patch("ledgerlink_ingest.cli.XeroClient")
    def test_fetch_contact_with_filters(
        self,
        mock_client_class: MagicMock,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        xero_invoices: list[Any],
    ) -> None:
        """Test --from, --to and --status are passed through."""
        monkeypatch.setenv("XERO_ACCESS_TOKEN", "env-token")
        monkeypatch.setenv("XERO_TENANT_ID", "env-tenant")
        mock_client = MagicMock()
        mock_client.get_invoices.return_value = xero_invoices
        mock_client_class.return_value = mock_client

        code = run_cli(
            monkeypatch, "--xero-contact", "c-1", "--from", "2024-01-01",
            "--to", "2024-03-31", "--status", "PAID", "-o", str(tmp_path / "out.csv"),
        )

        assert code == 0
        mock_client.get_invoices.assert_called_once_with(
            "c-1",
            Ledger.AR,
            date_from=date(2024, 1, 1),
            date_to=date(2024, 3, 31),
            status="PAID",
        )


class TestInitConfig:
    """Tests for --init-config."""

    def test_writes_default_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a default config is written to the given path."""
        path = tmp_path / "conf" / "config.json"

        code = run_cli(monkeypatch, "--init-config", "--config", str(path))

        assert code == 0
        assert json.loads(path.read_text())["sources"]["AR"]["date_format"] == "MM/DD/YYYY"
