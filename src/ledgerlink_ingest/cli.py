#!/usr/bin/env python3
"""Command-line interface for ledgerlink-ingest."""

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any

from ledgerlink_ingest.config import (
    create_default_config,
    get_date_format,
    get_log_level,
    get_request_timeout,
    get_xero_credentials,
    load_config,
    save_json_config,
)
from ledgerlink_ingest.errors import EmptyResultError, IngestionError
from ledgerlink_ingest.logging_setup import configure_logging
from ledgerlink_ingest.models import Batch, DateFormat, Ledger, RejectionReason
from ledgerlink_ingest.orchestrator import IngestionOrchestrator
from ledgerlink_ingest.utils import CsvPreview, preview_file
from ledgerlink_ingest.xero import XeroClient


def load_provider_response(path: Path) -> Any:
    """Load a saved Xero response: a bare list or an object with "Invoices"."""
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)
    if isinstance(payload, dict) and "Invoices" in payload:
        return payload["Invoices"]
    return payload


def print_rejections(errors: list[RejectionReason], verbose: bool) -> None:
    """Print rejection reasons to stderr, the first ten unless verbose."""
    shown = errors if verbose else errors[:10]
    for reason in shown:
        print(f"  - {reason}", file=sys.stderr)
    if len(shown) < len(errors):
        print(f"  ... and {len(errors) - len(shown)} more (use -v)", file=sys.stderr)


def print_summary(batch: Batch, verbose: bool) -> None:
    """Print batch counts and rejections to stderr."""
    print(f"Rows read: {batch.total_input_rows}", file=sys.stderr)
    print(f"Accepted: {batch.accepted_count}", file=sys.stderr)
    if batch.dropped_count:
        print(f"Dropped: {batch.dropped_count}", file=sys.stderr)
        print_rejections(batch.errors, verbose)


def print_preview(preview: CsvPreview) -> None:
    """Print the header and first rows of an upload to stdout."""
    print(" | ".join(preview.headers))
    for row in preview.rows:
        print(" | ".join(row))
    print(f"({preview.total_rows} data rows)")


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Normalize invoice data from a CSV upload or Xero for reconciliation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ledgerlink-ingest receivables.csv --side AR --date-format DD/MM/YYYY
  ledgerlink-ingest bills.csv --side AP -o ap_records.csv
  ledgerlink-ingest --xero-json invoices.json --contact-name "Acme Ltd"
  ledgerlink-ingest --xero-contact 0f1e... --contact-name "Acme Ltd" --side AP
  ledgerlink-ingest --xero-contact 0f1e... --from 2024-01-01 --status AUTHORISED
  ledgerlink-ingest receivables.csv --preview
        """,
    )

    parser.add_argument(
        "input",
        nargs="?",
        help="CSV file to ingest",
    )
    parser.add_argument(
        "--side",
        choices=[ledger.value for ledger in Ledger],
        default=Ledger.AR.value,
        help="Ledger side: AR (receivables) or AP (payables) (default: AR)",
    )
    parser.add_argument(
        "--date-format",
        choices=[fmt.value for fmt in DateFormat],
        help="Date format used in the CSV (default: from config, else MM/DD/YYYY)",
    )
    parser.add_argument(
        "-o",
        "--output",
        default="records.csv",
        help="Output CSV file (default: records.csv)",
    )
    parser.add_argument(
        "--format",
        choices=["csv", "tsv"],
        default="csv",
        help="Output format (default: csv)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config.json file",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write a default config file and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Check the CSV and show its first rows without ingesting it",
    )

    # Xero
    parser.add_argument(
        "--xero-json",
        type=Path,
        help="Ingest a saved Xero invoices response instead of a CSV",
    )
    parser.add_argument(
        "--xero-contact",
        help="Fetch invoices for this Xero ContactID",
    )
    parser.add_argument(
        "--contact-name",
        help="Name of the Xero contact, used where invoices have none",
    )
    parser.add_argument(
        "--xero-token",
        help="Xero access token (or XERO_ACCESS_TOKEN, or config.json)",
    )
    parser.add_argument(
        "--xero-tenant",
        help="Xero tenant id (or XERO_TENANT_ID, or config.json)",
    )
    parser.add_argument(
        "--from",
        dest="date_from",
        type=date.fromisoformat,
        help="Only fetch invoices dated on or after YYYY-MM-DD",
    )
    parser.add_argument(
        "--to",
        dest="date_to",
        type=date.fromisoformat,
        help="Only fetch invoices dated on or before YYYY-MM-DD",
    )
    parser.add_argument(
        "--status",
        help="Only fetch invoices with this Xero status (e.g. AUTHORISED)",
    )

    args = parser.parse_args()

    if args.init_config:
        path = save_json_config(create_default_config(), args.config)
        print(f"Configuration saved to {path}", file=sys.stderr)
        return 0

    config: dict[str, Any] | None = load_config(args.config)
    configure_logging("DEBUG" if args.verbose else get_log_level(config))

    sources = [bool(args.input), bool(args.xero_json), bool(args.xero_contact)]
    if sum(sources) != 1:
        parser.print_help()
        print("\nError: give exactly one of INPUT, --xero-json or --xero-contact",
              file=sys.stderr)
        return 1

    if args.preview:
        if not args.input:
            print("Error: --preview needs a CSV file", file=sys.stderr)
            return 1
        try:
            print_preview(preview_file(Path(args.input)))
        except IngestionError as e:
            print(f"Error: {e.user_message}", file=sys.stderr)
            return 1
        return 0

    ledger = Ledger(args.side)
    try:
        date_format = get_date_format(ledger, config, args.date_format)
    except ValueError as e:
        print(f"Error: invalid date format in config: {e}", file=sys.stderr)
        return 1

    orchestrator = IngestionOrchestrator(ledger=ledger, date_format=date_format)

    try:
        if args.input:
            batch = orchestrator.ingest_file(Path(args.input))
        elif args.xero_json:
            try:
                items = load_provider_response(args.xero_json)
            except (OSError, ValueError) as e:
                print(f"Error: could not read {args.xero_json}: {e}", file=sys.stderr)
                return 1
            batch = orchestrator.ingest_provider_items(items, args.contact_name)
        else:
            token, tenant = get_xero_credentials(config, args.xero_token, args.xero_tenant)
            if not token or not tenant:
                print("Error: Xero token and tenant id required. Use --xero-token/--xero-tenant "
                      "or configure in config.json", file=sys.stderr)
                return 1
            client = XeroClient(token, tenant, timeout=get_request_timeout(config))
            filters = {
                key: value
                for key, value in (
                    ("date_from", args.date_from),
                    ("date_to", args.date_to),
                    ("status", args.status),
                )
                if value
            }
            batch = orchestrator.ingest_contact(
                client, args.xero_contact, args.contact_name, **filters
            )
    except IngestionError as e:
        print(f"Error: {e.user_message}", file=sys.stderr)
        if isinstance(e, EmptyResultError) and e.errors:
            print(f"Dropped: {len(e.errors)}", file=sys.stderr)
            print_rejections(e.errors, args.verbose)
        return 1

    print_summary(batch, args.verbose)

    output_path = Path(args.output)
    delimiter = "\t" if args.format == "tsv" else ","
    orchestrator.write_csv(batch.records, output_path, delimiter)

    print(f"Wrote {batch.accepted_count} records to {output_path}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
