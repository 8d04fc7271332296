"""
Tabular analytics export -> typed records.

Responsibilities:
- encoding detection + decoding
- newline normalization
- dialect (delimiter) detection
- optional "Experience ID" preamble
- header matching against the supported KPIs
- date and numeric cell parsing
"""

from __future__ import annotations

import csv
import datetime as dt
import io
import logging
import math
import re
from typing import List, Optional, Tuple

from charset_normalizer import from_bytes

from .errors import EmptyInput, MalformedRow, UnrecognizedHeader
from .models import Column, Kpi, Record, Table
from .rules import (
    DATE_FORMATS,
    DECIMAL_COMMA_DELIMITERS,
    DEFAULT_DELIMITER,
    DELIMITERS,
    PREAMBLE_MARKER,
)

logger = logging.getLogger(__name__)

THOUSANDS_GROUPED = re.compile(r"^-?\d{1,3}(,\d{3})+(\.\d+)?$")
DECIMAL_COMMA = re.compile(r"^-?\d+,\d+$")


def decode_text(raw: bytes) -> Tuple[str, str]:
    """
    Decode input bytes to text with LF newlines.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - A UTF-8 BOM is consumed rather than kept as a character.
    - If decode fails, fall back to UTF-8, then to the guess with replacement characters.
    """
    match = from_bytes(raw).best()
    decode_used = match.encoding if match is not None else "utf-8"

    if raw.startswith(b"\xef\xbb\xbf") and decode_used.lower().replace("-", "_") in ("utf_8", "utf8"):
        decode_used = "utf-8-sig"

    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        try:
            text = raw.decode("utf-8")
            decode_used = "utf-8"
        except UnicodeDecodeError:
            # Last resort: keep going deterministically with replacement characters
            text = raw.decode("utf-8", errors="replace")
            decode_used = "utf-8"

    logger.debug("decoded input as %s", decode_used)
    return text.replace("\r\n", "\n").replace("\r", "\n"), decode_used


def sniff_delimiter(text: str) -> str:
    # The preamble has fewer cells than the table and would throw off the sniffer
    lines = [line for line in text.split("\n") if line.strip()]
    if lines and lines[0].strip().lower().startswith(PREAMBLE_MARKER):
        lines = lines[1:]
    try:
        return csv.Sniffer().sniff("\n".join(lines)[:4096], delimiters=DELIMITERS).delimiter
    except csv.Error:
        return DEFAULT_DELIMITER


def parse_date(cell: str) -> Optional[dt.date]:
    cell = cell.strip()
    for fmt in DATE_FORMATS:
        try:
            return dt.datetime.strptime(cell, fmt).date()
        except ValueError:
            continue
    return None


def parse_number(cell: str, delimiter: str = DEFAULT_DELIMITER) -> Optional[float]:
    """Parse a numeric cell; empty or garbage cells are missing, not errors."""
    cell = cell.strip()
    if not cell:
        return None
    if "," in cell:
        if delimiter in DECIMAL_COMMA_DELIMITERS and DECIMAL_COMMA.match(cell):
            cell = cell.replace(",", ".")
        elif THOUSANDS_GROUPED.match(cell):
            cell = cell.replace(",", "")
        else:
            return None
    try:
        value = float(cell)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def match_columns(header: List[str]) -> List[Column]:
    columns: List[Column] = []
    seen = set()
    for index, cell in enumerate(header[1:], start=1):
        matched = Kpi.match_header(cell)
        if matched is None:
            logger.debug("ignoring column %r", cell)
            continue
        kpi, benchmark = matched
        if (kpi, benchmark) in seen:
            logger.debug("ignoring duplicate column %r", cell)
            continue
        seen.add((kpi, benchmark))
        columns.append(Column(index=index, name=cell.strip(), kpi=kpi, benchmark=benchmark))
    return columns


def _read_preamble(row: List[str]) -> int:
    if len(row) < 2:
        raise UnrecognizedHeader("Experience ID line has no id")
    try:
        return int(row[1].strip())
    except ValueError:
        raise UnrecognizedHeader(f"Experience ID {row[1]!r} is not an integer") from None


def parse_table(raw: bytes) -> Table:
    text, _ = decode_text(raw)
    delimiter = sniff_delimiter(text)
    logger.debug("using delimiter %r", delimiter)

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    # (line number, cells) for every non-blank row
    rows = [(i, row) for i, row in enumerate(reader, start=1) if any(c.strip() for c in row)]
    if not rows:
        raise EmptyInput("Input is empty")

    experience_id = None
    if rows[0][1][0].strip().lower() == PREAMBLE_MARKER:
        experience_id = _read_preamble(rows[0][1])
        rows = rows[1:]
        if not rows:
            raise EmptyInput("Input has no header row")

    _, header = rows[0]
    columns = match_columns(header)
    if not columns:
        raise UnrecognizedHeader(
            "None of the supported KPI columns found: " + ", ".join(k.value for k in Kpi)
        )

    records: List[Record] = []
    for line, row in rows[1:]:
        date = parse_date(row[0])
        if date is None:
            raise MalformedRow(line, row[0])
        values = {
            col.name: parse_number(row[col.index], delimiter) if col.index < len(row) else None
            for col in columns
        }
        records.append(Record(row=line, date=date, values=values))

    if not records:
        raise EmptyInput()

    logger.debug("parsed %d records over %d columns", len(records), len(columns))
    return Table(columns=columns, records=records, experience_id=experience_id)
