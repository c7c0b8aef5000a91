"""Xero API client for fetching contacts and invoices."""

import re
from datetime import date
from typing import Any

import requests

from ledgerlink_ingest.errors import NetworkError, NetworkErrorCause
from ledgerlink_ingest.logging_setup import get_logger
from ledgerlink_ingest.models import Ledger

logger = get_logger(__name__)

GUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)

# Xero invoice type codes to record type labels
TYPE_LABELS = {
    "ACCREC": "Receivable Invoice",
    "ACCPAY": "Payable Invoice",
    "ACCRECCREDIT": "Receivable Credit Note",
    "ACCPAYCREDIT": "Payable Credit Note",
}

# Xero invoice status codes to record status labels
STATUS_LABELS = {
    "DRAFT": "open",
    "SUBMITTED": "open",
    "AUTHORISED": "open",
    "PAID": "paid",
    "VOIDED": "void",
    "DELETED": "void",
}


def classify_failure(error: requests.RequestException) -> NetworkErrorCause:
    """Work out which kind of network failure a requests exception is."""
    if isinstance(error, requests.Timeout):
        return NetworkErrorCause.TIMEOUT
    if isinstance(error, requests.ConnectionError):
        return NetworkErrorCause.CONNECTION

    response = getattr(error, "response", None)
    status = response.status_code if response is not None else None
    if status in (401, 403):
        return NetworkErrorCause.AUTH_EXPIRED
    if status == 429:
        return NetworkErrorCause.RATE_LIMITED
    if status is not None and status >= 500:
        return NetworkErrorCause.SERVER_ERROR
    return NetworkErrorCause.BAD_RESPONSE


class XeroClient:
    """Client for reading accounting data from the Xero API.

    Tokens come from an OAuth connection managed elsewhere. Requests use a
    fixed timeout and are never retried here.
    """

    BASE_URL = "https://api.xero.com/api.xro/2.0"
    DEFAULT_TIMEOUT = 30.0
    PAGE_SIZE = 100

    def __init__(
        self,
        access_token: str,
        tenant_id: str,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize client with an access token and tenant id."""
        self.access_token = access_token
        self.tenant_id = tenant_id
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {access_token}",
            "Xero-tenant-id": tenant_id,
            "Accept": "application/json",
        })

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an API request, converting failures to NetworkError."""
        url = f"{self.BASE_URL}/{endpoint}"
        try:
            response = self._session.request(method, url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            cause = classify_failure(e)
            logger.warning("Xero %s %s failed (%s): %s", method, endpoint, cause.value, e)
            raise NetworkError(cause, str(e)) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise NetworkError(NetworkErrorCause.BAD_RESPONSE, "response is not JSON") from e

        if not isinstance(payload, dict):
            raise NetworkError(NetworkErrorCause.BAD_RESPONSE, "response is not an object")
        return payload

    def get_contacts(self, ledger: Ledger) -> list[Any]:
        """Get customers (AR) or suppliers (AP)."""
        flag = "IsCustomer" if ledger is Ledger.AR else "IsSupplier"
        result = self._request("GET", "Contacts", params={"where": f"{flag}==true"})
        contacts = result.get("Contacts") or []
        return contacts if isinstance(contacts, list) else []

    def get_invoices(
        self,
        contact_id: str,
        ledger: Ledger,
        date_from: date | None = None,
        date_to: date | None = None,
        status: str | None = None,
    ) -> list[Any]:
        """Get all invoices of one contact for a ledger side.

        Items are returned exactly as Xero sent them; nothing is validated here.

        Args:
            contact_id: Xero ContactID (a GUID)
            ledger: AR for sales invoices, AP for bills
            date_from: Only invoices dated on or after this day
            date_to: Only invoices dated on or before this day
            status: Only invoices with this Xero status code, e.g. "AUTHORISED"

        Returns:
            Raw invoice objects across all pages

        Raises:
            ValueError: If the contact id is not a GUID or the status is unknown
        """
        where = " AND ".join(invoice_filters(contact_id, ledger, date_from, date_to, status))

        items: list[Any] = []
        page = 1
        while True:
            result = self._request("GET", "Invoices", params={"where": where, "page": page})
            invoices = result.get("Invoices")
            if not isinstance(invoices, list):
                break
            items.extend(invoices)
            if len(invoices) < self.PAGE_SIZE:
                break
            page += 1

        logger.info("Fetched %d invoices for contact %s", len(items), contact_id)
        return items


def _datetime_literal(day: date) -> str:
    return f"DateTime({day.year},{day.month:02d},{day.day:02d})"


def invoice_filters(
    contact_id: str,
    ledger: Ledger,
    date_from: date | None = None,
    date_to: date | None = None,
    status: str | None = None,
) -> list[str]:
    """Build the conditions of an Invoices ``where`` clause.

    Raises:
        ValueError: If the contact id is not a GUID or the status is unknown
    """
    if not GUID_PATTERN.fullmatch(contact_id):
        raise ValueError(f"Xero contact id must be a GUID, got {contact_id!r}")

    conditions = [
        f'Contact.ContactID==guid("{contact_id}")',
        f'Type=="{ledger.provider_type}"',
    ]
    if date_from is not None:
        conditions.append(f"Date>={_datetime_literal(date_from)}")
    if date_to is not None:
        conditions.append(f"Date<={_datetime_literal(date_to)}")
    if status:
        code = status.strip().upper()
        if code not in STATUS_LABELS:
            raise ValueError(f"Unknown Xero invoice status {status!r}")
        conditions.append(f'Status=="{code}"')
    return conditions
