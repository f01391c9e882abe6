"""
Parser for product import CSV files.

The first non-blank line is the header; column names are trimmed and
lower-cased. Rows are forgiving: a row with the wrong number of columns or
without ``id``/``title`` is skipped with a warning, and ``price``/``count``
fall back to 0 when they are not numbers. Only a file without a header and
at least one data row, or with an unreadable header, fails as a whole.
"""

import csv
import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from pydantic import ValidationError as SchemaValidationError

from product_service.exceptions import ParseError
from product_service.models import ImportRecord

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = ("price", "count")
REQUIRED_FIELDS = ("id", "title")


@dataclass
class SkippedRow:
    line_number: int
    reason: str


@dataclass
class CsvParseResult:
    """Accepted records and skipped rows of one file."""
    records: list[ImportRecord] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)

    @property
    def record_count(self) -> int:
        return len(self.records)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def parse_number(value: str) -> float:
    """Float value of ``value``, or 0 when it is not a finite number."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _split_line(line: str) -> list[str]:
    # One physical line at a time: quoted commas work, quoted newlines do not.
    return [value.strip() for value in next(csv.reader([line]), [])]


def parse_products_csv(content: str, source: Optional[str] = None) -> CsvParseResult:
    """
    Parse CSV text into import records.

    Args:
        content: Whole file content
        source: Object key, used only for log and error context

    Raises:
        ParseError: The file has no readable header or no data rows
    """
    lines = [
        (number, line)
        for number, line in enumerate(content.splitlines(), start=1)
        if line.strip()
    ]
    if len(lines) < 2:
        raise ParseError("CSV file is empty or has no data rows", s3_key=source)

    try:
        headers = [name.lower() for name in _split_line(lines[0][1])]
    except csv.Error as e:
        raise ParseError(f"CSV header could not be read: {e}", s3_key=source)
    result = CsvParseResult()

    for line_number, line in lines[1:]:
        try:
            values = _split_line(line)
        except csv.Error as e:
            reason = f"malformed row: {e}"
            logger.warning(f"Skipping line {line_number}: {reason}")
            result.skipped.append(SkippedRow(line_number, reason))
            continue

        if len(values) != len(headers):
            reason = (
                f"column count mismatch (expected {len(headers)}, got {len(values)})"
            )
            logger.warning(f"Skipping line {line_number}: {reason}")
            result.skipped.append(SkippedRow(line_number, reason))
            continue

        row = dict(zip(headers, values))
        for name in NUMERIC_FIELDS:
            if name in row:
                row[name] = parse_number(row[name])

        missing = [name for name in REQUIRED_FIELDS if not row.get(name)]
        if missing:
            reason = f"missing required fields ({', '.join(missing)})"
            logger.warning(f"Skipping line {line_number}: {reason}")
            result.skipped.append(SkippedRow(line_number, reason))
            continue

        try:
            result.records.append(ImportRecord.model_validate(row))
        except SchemaValidationError as e:
            reason = f"invalid row: {e.errors()[0]['msg']}"
            logger.warning(f"Skipping line {line_number}: {reason}")
            result.skipped.append(SkippedRow(line_number, reason))

    return result
