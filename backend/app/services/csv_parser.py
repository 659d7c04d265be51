"""Delimiter and quote aware CSV parsing with per-row validation."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

DATE_KEY = "date"

_DDMMYYYY_PATTERN = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")
_ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SURROUNDING_QUOTES_PATTERN = re.compile(r'^"(.*)"$', re.DOTALL)


class DateFormatError(ValueError):
    """Raised when a date cell is neither DD/MM/YYYY nor YYYY-MM-DD."""


@dataclass(frozen=True)
class CSVField:
    """Describes how one column of an import file maps onto a record key."""

    header: str
    key: str
    required: bool = False
    validate: Optional[Callable[[str], bool]] = None
    transform: Optional[Callable[[str], Any]] = None


@dataclass
class ParseResult:
    """Rows that passed validation plus the ordered list of errors.

    ``row_numbers[i]`` is the source row number of ``rows[i]``.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    row_numbers: list[int] = field(default_factory=list)


def parse_date(value: str) -> str:
    """Normalise ``DD/MM/YYYY`` to ``YYYY-MM-DD``; ISO dates pass through."""

    match = _DDMMYYYY_PATTERN.match(value)
    if match:
        day, month, year = match.groups()
        return f"{year}-{month}-{day}"
    if _ISO_DATE_PATTERN.match(value):
        return value
    raise DateFormatError("invalid date format, use DD/MM/YYYY or YYYY-MM-DD")


def detect_separator(first_line: str) -> str:
    return ";" if ";" in first_line else ","


def split_line(line: str, separator: str) -> list[str]:
    """Split a data line on ``separator``, ignoring separators inside quotes."""

    values: list[str] = []
    current: list[str] = []
    inside_quotes = False

    for char in line:
        if char == '"':
            inside_quotes = not inside_quotes
        elif char == separator and not inside_quotes:
            values.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    values.append("".join(current).strip())

    return [_clean_value(value) for value in values]


def _clean_value(value: str) -> str:
    cleaned = _SURROUNDING_QUOTES_PATTERN.sub(r"\1", value).strip()
    return cleaned.replace('""', '"')


def parse_csv(content: str, fields: list[CSVField]) -> ParseResult:
    """Parse ``content`` against ``fields`` without stopping on bad rows."""

    lines = content.split("\n")
    if len(lines) < 2:
        return ParseResult(errors=["The file is empty or only contains the header row"])

    separator = detect_separator(lines[0])
    headers = [header.strip().lower() for header in lines[0].split(separator)]

    missing_headers = [
        csv_field.header
        for csv_field in fields
        if csv_field.required and csv_field.header.lower() not in headers
    ]
    if missing_headers:
        return ParseResult(
            errors=[f"Missing required columns: {', '.join(missing_headers)}"]
        )

    result = ParseResult()

    for index, raw_line in enumerate(lines[1:], start=1):
        line = raw_line.strip()
        if not line:
            continue

        row_number = index + 1
        values = split_line(line, separator)
        row, row_errors = _build_row(row_number, values, headers, fields)

        if row_errors:
            result.errors.extend(row_errors)
            continue
        result.rows.append(row)
        result.row_numbers.append(row_number)

    return result


def _build_row(
    row_number: int,
    values: list[str],
    headers: list[str],
    fields: list[CSVField],
) -> tuple[dict[str, Any], list[str]]:
    row: dict[str, Any] = {}
    errors: list[str] = []

    for csv_field in fields:
        header = csv_field.header.lower()
        if header not in headers:
            if csv_field.required:
                errors.append(f"Row {row_number}: column {csv_field.header} missing")
            continue

        column = headers.index(header)
        value = values[column] if column < len(values) else ""

        if csv_field.required and not value:
            errors.append(f"Row {row_number}: missing value for {csv_field.header}")
            continue

        if value and csv_field.validate is not None and not csv_field.validate(value):
            errors.append(f"Row {row_number}: invalid value for {csv_field.header}")
            continue

        try:
            if csv_field.key == DATE_KEY:
                row[csv_field.key] = parse_date(value)
            elif csv_field.transform is not None:
                row[csv_field.key] = csv_field.transform(value)
            else:
                row[csv_field.key] = value
        except ValueError as exc:
            message = str(exc) or "conversion error"
            errors.append(f"Row {row_number}: {message} for {csv_field.header}")

    return row, errors
