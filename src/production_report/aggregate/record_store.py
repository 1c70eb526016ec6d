"""Index parsed records by workshop and canonical month."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable

from production_report.models import MonthlyIndex, Record, WorkshopSet
from production_report.schema import MONTHS

log = logging.getLogger(__name__)


def build_record_store(records: Iterable[Record]) -> tuple[MonthlyIndex, WorkshopSet]:
    """Build the monthly index and the sorted workshop set.

    For every observed workshop and each of the 12 canonical months the index
    holds the first record for that pair, or None when the source has no row
    for it. Later rows for an already-filled pair are ignored.

    Args:
        records: Parsed records in source order.

    Returns:
        A `(monthly_index, workshops)` tuple; both are read-only.
    """
    records = list(records)
    workshops: WorkshopSet = tuple(sorted({r.workshop for r in records}))

    first: dict[tuple[int, str], Record] = {}
    duplicates = 0
    for rec in records:
        key = (rec.workshop, rec.month)
        if key in first:
            duplicates += 1
            continue
        first[key] = rec

    if duplicates:
        log.info("Ignored %d duplicate workshop/month rows (first row wins)", duplicates)

    index = {
        w: MappingProxyType({m: first.get((w, m)) for m in MONTHS})
        for w in workshops
    }
    log.info("Indexed %d records for %d workshops", len(first), len(workshops))
    return MappingProxyType(index), workshops
