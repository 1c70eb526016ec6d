"""Parsing of the spreadsheet-backed JSON feed.

The feed is a grid of cells: column 0 holds the workshop id, column 1 the
month label and columns 2.. the indicators in canonical order (see
`production_report.schema.INDICATORS`). A missing trailing cell counts as 0.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from production_report.config import DEFAULT_WORKSHOPS_COUNT
from production_report.errors import ParseError
from production_report.ingest.parse_csv import build_record, coerce_cell
from production_report.models import Cell, Record
from production_report.schema import INDICATOR_FIELDS

log = logging.getLogger(__name__)


def _feed_rows(payload: Any) -> list[Any]:
    """Accept either a bare list of rows or a Sheets-style `{"values": [...]}`."""
    if isinstance(payload, dict):
        payload = payload.get("values", [])
    if not isinstance(payload, list):
        raise ParseError(f"Feed payload must be a list of rows, got {type(payload).__name__}")
    return payload


def _cell(value: Any) -> Cell:
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    cell = coerce_cell(str(value))
    return 0.0 if cell == "" else cell


def parse_feed(payload: Any, max_workshop: int = DEFAULT_WORKSHOPS_COUNT) -> list[Record]:
    """Convert feed rows into `Record` objects.

    Args:
        payload: Decoded JSON feed (list of rows or dict with `values`).
        max_workshop: Highest workshop id accepted.

    Returns:
        Records in feed order. Rows whose workshop or month is missing or
        invalid (a header row, for example) are skipped.

    Raises:
        ParseError: if the payload is not a grid of rows.
    """
    rows: Iterable[Any] = _feed_rows(payload)
    records: list[Record] = []
    skipped = 0

    for row in rows:
        if not isinstance(row, (list, tuple)) or len(row) < 2:
            skipped += 1
            continue
        workshop_raw, month_raw = row[0], row[1]
        if workshop_raw in (None, "") or month_raw in (None, ""):
            skipped += 1
            continue

        cells: dict[str, Cell] = {}
        for offset, field in enumerate(INDICATOR_FIELDS, start=2):
            cells[field] = _cell(row[offset]) if offset < len(row) else 0.0

        rec = build_record(workshop_raw, month_raw, cells, {}, max_workshop)
        if rec is None:
            skipped += 1
            continue
        records.append(rec)

    log.info("Parsed %d records from feed (%d rows skipped)", len(records), skipped)
    return records
