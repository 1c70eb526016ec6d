"""Parsing helpers for production CSV exports.

`parse_csv` turns the raw text of a workshop export into typed `Record`
objects. The format is deliberately simple: the first non-empty line is a
comma-separated header and every following line is split on commas
positionally. Quoted fields are not supported, so an embedded comma shifts the
remaining cells of that row.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import ValidationError

from production_report.config import DEFAULT_WORKSHOPS_COUNT
from production_report.errors import MissingRequiredColumnsError
from production_report.models import Cell, Record
from production_report.schema import (
    INDICATORS,
    MONTH_HEADER,
    MONTHS,
    REQUIRED_FIELDS,
    WORKSHOP_HEADER,
    field_for_header,
)

log = logging.getLogger(__name__)

NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
WORKSHOP_RE = re.compile(r"^\+?(\d+)")


def coerce_cell(raw: str) -> Cell:
    """Return the trimmed cell as a float when it is a decimal literal.

    Anything else is kept as trimmed text; an empty cell stays "".
    """
    value = raw.strip()
    if NUMBER_RE.match(value):
        return float(value)
    return value


def parse_workshop_id(raw: Any) -> int | None:
    """Read the leading integer of a workshop cell ("3", "3.0", "3 ").

    Returns:
        The integer id, or None when the cell does not start with digits.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw == raw and abs(raw) != float("inf") else None
    m = WORKSHOP_RE.match(str(raw).strip())
    return int(m.group(1)) if m else None


def build_record(
    workshop_raw: Any,
    month_raw: Any,
    cells: dict[str, Cell],
    extras: dict[str, float | str],
    max_workshop: int,
) -> Record | None:
    """Validate identity fields and assemble a `Record`.

    Returns:
        The record, or None when the workshop id is not in 1..max_workshop,
        the month is not a canonical label, or validation fails.
    """
    workshop = parse_workshop_id(workshop_raw)
    month = str(month_raw).strip()
    if workshop is None or not 1 <= workshop <= max_workshop:
        log.debug("Dropping row with invalid workshop id %r", workshop_raw)
        return None
    if month not in MONTHS:
        log.debug("Dropping row with unknown month %r", month_raw)
        return None
    try:
        return Record(workshop=workshop, month=month, extras=extras, **cells)
    except ValidationError as e:
        log.debug("Dropping row for workshop %s/%s: %s", workshop, month, e)
        return None


def _missing_columns(fields: list[str | None]) -> list[str]:
    labels = {
        "workshop": WORKSHOP_HEADER,
        "month": MONTH_HEADER,
        **{f: source for f, (source, _) in INDICATORS.items()},
    }
    return [labels[f] for f in REQUIRED_FIELDS if f not in fields]


def parse_csv(text: str, max_workshop: int = DEFAULT_WORKSHOPS_COUNT) -> list[Record]:
    """Parse CSV text into an ordered list of `Record` objects.

    Args:
        text: Raw CSV text; the first non-empty line is the header.
        max_workshop: Highest workshop id accepted (ids run 1..N).

    Returns:
        Records in source order. Empty when the text has no data line.
        Rows with an empty workshop or month cell, or with identity values
        outside the accepted range, are skipped.

    Raises:
        MissingRequiredColumnsError: if the header lacks the workshop, month,
            Output, DefectRate or Downtime column.
    """
    lines = [ln for ln in text.splitlines() if ln.strip()]
    if len(lines) < 2:
        log.info("CSV has no data lines; nothing to parse")
        return []

    headers = [h.strip() for h in lines[0].split(",")]
    fields = [field_for_header(h) for h in headers]
    missing = _missing_columns(fields)
    if missing:
        raise MissingRequiredColumnsError(missing)

    records: list[Record] = []
    for ln in lines[1:]:
        values = ln.split(",")
        workshop_raw = ""
        month_raw = ""
        cells: dict[str, Cell] = {}
        extras: dict[str, float | str] = {}

        for i, (header, field) in enumerate(zip(headers, fields)):
            raw = values[i] if i < len(values) else ""
            if field == "workshop":
                workshop_raw = raw.strip()
            elif field == "month":
                month_raw = raw.strip()
            elif field is not None:
                cells[field] = coerce_cell(raw)
            else:
                extras[header] = coerce_cell(raw)

        if not workshop_raw or not month_raw:
            continue

        rec = build_record(workshop_raw, month_raw, cells, extras, max_workshop)
        if rec is not None:
            records.append(rec)

    log.info("Parsed %d records from %d data lines", len(records), len(lines) - 1)
    return records
