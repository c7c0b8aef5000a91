"""Parsing utilities for uploaded CSV files."""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from ledgerlink_ingest.errors import FileFormatError

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
ALLOWED_EXTENSIONS = (".csv",)
PREVIEW_ROWS = 5


def parse_line(line: str) -> list[str]:
    """
    Split one CSV line into cells.

    Handles:
    - Commas inside double quotes ("B, C")
    - A doubled quote inside a quoted cell becomes one literal quote
    - Whitespace around cells

    Args:
        line: A single line of CSV text

    Returns:
        List of cell values with quotes and surrounding whitespace removed
    """
    cells: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0

    while i < len(line):
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            cells.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    cells.append("".join(current).strip())
    return cells


def split_lines(content: str) -> list[str]:
    """Split file content on newlines, dropping blank lines and a leading BOM.

    Only ``\\n`` ends a line (a trailing ``\\r`` is removed), so control
    characters inside a cell never split a row.
    """
    content = content.lstrip("\ufeff")
    lines = (line.rstrip("\r") for line in content.split("\n"))
    return [line for line in lines if line.strip()]


def parse_amount(amount_str: str | None) -> Decimal | None:
    """
    Parse amount string to Decimal.

    Handles:
    - Currency symbols and codes ($, USD, £, etc.)
    - Thousands separators (commas)
    - Negative values (both -123 and (123))

    Args:
        amount_str: Amount string to parse

    Returns:
        Decimal if successful and finite, None otherwise
    """
    if amount_str is None:
        return None

    amount_str = str(amount_str).strip()
    if not amount_str:
        return None

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Keep digits, decimal point and minus sign only
    amount_str = re.sub(r"[^0-9.\-]", "", amount_str)
    if not amount_str:
        return None

    try:
        value = Decimal(amount_str)
    except InvalidOperation:
        return None

    if not value.is_finite():
        return None
    return -value if is_negative else value


def read_file(filepath: Path) -> str:
    """
    Read an uploaded CSV file into memory.

    Args:
        filepath: Path to the file

    Returns:
        File content as string

    Raises:
        FileFormatError: If the file is missing, not a CSV, too large or unreadable
    """
    if filepath.suffix.lower() not in ALLOWED_EXTENSIONS:
        raise FileFormatError("Please select a CSV file (.csv extension required).")

    if not filepath.exists():
        raise FileFormatError(f"File not found: {filepath.name}")

    try:
        too_large = filepath.stat().st_size > MAX_FILE_SIZE
    except OSError as e:
        raise FileFormatError(f"Could not read {filepath.name}: {e}") from e
    if too_large:
        raise FileFormatError("File too large. Maximum size is 10MB.")

    encodings = ["utf-8-sig", "latin-1"]

    for encoding in encodings:
        try:
            with open(filepath, encoding=encoding) as f:
                return f.read()
        except UnicodeDecodeError:
            continue
        except OSError as e:
            raise FileFormatError(f"Could not read {filepath.name}: {e}") from e

    raise FileFormatError(f"Could not decode {filepath.name} as text.")


@dataclass(frozen=True)
class CsvPreview:
    """First rows of an upload, shown before the user confirms it."""

    headers: list[str]
    rows: list[list[str]]
    total_rows: int


def preview_lines(lines: list[str], limit: int = PREVIEW_ROWS) -> CsvPreview:
    """
    Build a preview from the non-blank lines of a CSV upload.

    Args:
        lines: Lines of the file, header first
        limit: Maximum number of data rows to include

    Returns:
        CsvPreview with the header cells, up to ``limit`` rows and the data row count

    Raises:
        FileFormatError: If there is no data row after the header
    """
    lines = [line for line in lines if line.strip()]
    if len(lines) < 2:
        raise FileFormatError("CSV must have at least a header row and one data row.")

    return CsvPreview(
        headers=parse_line(lines[0]),
        rows=[parse_line(line) for line in lines[1 : limit + 1]],
        total_rows=len(lines) - 1,
    )


def preview_file(filepath: Path, limit: int = PREVIEW_ROWS) -> CsvPreview:
    """Check an upload and return a preview of its first rows."""
    return preview_lines(split_lines(read_file(filepath)), limit)
