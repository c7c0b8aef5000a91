"""Date normalization for user-selected and provider date formats."""

import re
from datetime import date, datetime, timezone

from ledgerlink_ingest.models import DateFormat

# Xero's JSON dates, e.g. /Date(1518685950940+0000)/
_PROVIDER_DATE = re.compile(r"^/Date\((-?\d+)([+-]\d{4})?\)/$")
_ISO_DATETIME = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[T ][\d:.]+(?:Z|[+-]\d{2}:?\d{2})?)?$")


def normalize_date(raw: str, fmt: DateFormat | str) -> str:
    """
    Normalize a date string to ISO-8601 using an explicit format.

    The same digits mean different dates under different formats, so the
    caller must say which layout the text uses. Any failure returns the
    input unchanged instead of raising.

    Args:
        raw: Date text, e.g. "01/02/2024"
        fmt: One of the DateFormat tags

    Returns:
        "YYYY-MM-DD" if the text matches the format, otherwise ``raw``
    """
    text = raw.strip() if isinstance(raw, str) else ""
    if not text:
        return raw

    try:
        fmt = DateFormat(fmt)
    except ValueError:
        return raw

    parts = [p.strip() for p in text.split(fmt.separator)]
    if len(parts) != 3:
        return raw

    # No calendar component needs more than four digits
    if not all(p.isascii() and p.isdigit() and len(p) <= 4 for p in parts):
        return raw

    values = dict(zip(fmt.order, (int(p) for p in parts)))
    day, month, year = values["day"], values["month"], values["year"]

    # Range check only; calendar validity is left to date()
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        return raw

    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return raw


def normalize_provider_date(raw: object) -> str:
    """
    Normalize a date value from the accounting provider.

    Handles the Microsoft JSON form ``/Date(ms+zone)/`` and ISO date-times.
    Anything else is passed through as text.

    Args:
        raw: Date value from the provider payload

    Returns:
        "YYYY-MM-DD" when recognized, "" for None, otherwise ``str(raw)``
    """
    if raw is None:
        return ""
    text = str(raw).strip()

    match = _PROVIDER_DATE.match(text)
    if match:
        try:
            stamp = datetime.fromtimestamp(int(match.group(1)) / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return str(raw)
        return stamp.date().isoformat()

    match = _ISO_DATETIME.match(text)
    if match:
        try:
            return date.fromisoformat(match.group(1)).isoformat()
        except ValueError:
            return str(raw)

    return str(raw)
