"""Quarterly and annual rollups of the monthly index.

Expectations:
- Input: a monthly index (workshop -> canonical month -> Record or None) and
  the sorted workshop set, as built by `build_record_store`.
- A month contributes to a period only when its record exists and its Output
  is a non-zero number (see `contributes`).
- Summed indicators keep the raw total over contributing months; averaged
  indicators (`AVERAGED_FIELDS`) are divided by the number of contributing
  months. Workshops without a contributing month get an all-zero rollup.

The arithmetic runs as a pandas group-by over the contributing rows, then the
result is reindexed onto the full workshop set.
"""
from __future__ import annotations

import logging
import math
from types import MappingProxyType
from typing import Any, Sequence

import pandas as pd

from production_report.ingest.parse_csv import NUMBER_RE
from production_report.models import (
    AggregateRecord,
    AnnualAggregate,
    MonthlyIndex,
    QuarterlyAggregate,
    Record,
    WorkshopSet,
)
from production_report.schema import (
    AVERAGED_FIELDS,
    INDICATOR_FIELDS,
    MONTHS,
    QUARTERS,
    YEAR_PERIOD,
)

log = logging.getLogger(__name__)


def to_number(value: Any) -> float:
    """Coerce a record cell to a float; missing or non-numeric cells are 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return 0.0 if math.isnan(value) else float(value)
    text = str(value).strip()
    return float(text) if NUMBER_RE.match(text) else 0.0


def contributes(record: Record | None) -> bool:
    """Return True when a month counts toward a period rollup.

    The record must exist and its Output must parse to a value other than 0.
    """
    return record is not None and to_number(record.output) != 0


def _contributing_frame(
    index: MonthlyIndex,
    workshops: WorkshopSet,
    months: Sequence[str],
) -> pd.DataFrame:
    rows = []
    for w in workshops:
        for m in months:
            rec = index[w][m]
            if contributes(rec):
                rows.append({"workshop": w, **{f: to_number(getattr(rec, f)) for f in INDICATOR_FIELDS}})
    frame = pd.DataFrame(rows, columns=["workshop", *INDICATOR_FIELDS])
    return frame.astype({f: "float64" for f in INDICATOR_FIELDS})


def aggregate_period(
    index: MonthlyIndex,
    workshops: WorkshopSet,
    months: Sequence[str],
    period: str,
) -> AnnualAggregate:
    """Roll up each workshop over the given canonical months.

    Args:
        index: Monthly index from `build_record_store`.
        workshops: Sorted workshop ids; every id gets an entry in the result.
        months: Canonical months making up the period, in canonical order.
        period: Label stored on each `AggregateRecord` (`Q1`..`Q4`, `year`).

    Returns:
        Read-only mapping workshop -> `AggregateRecord`.
    """
    frame = _contributing_frame(index, workshops, months)
    grouped = frame.groupby("workshop", sort=True)

    totals = grouped[list(INDICATOR_FIELDS)].sum().reindex(list(workshops), fill_value=0.0)
    counts = grouped.size().reindex(list(workshops), fill_value=0).astype("int64")

    averaged = [f for f in INDICATOR_FIELDS if f in AVERAGED_FIELDS]
    # zero-count workshops have zero totals; dividing by 1 keeps them at 0
    totals[averaged] = totals[averaged].div(counts.replace(0, 1), axis=0)

    out = {
        w: AggregateRecord(
            workshop=w,
            period=period,
            month_count=int(counts.loc[w]),
            **{f: float(totals.at[w, f]) for f in INDICATOR_FIELDS},
        )
        for w in workshops
    }
    return MappingProxyType(out)


def quarterly(index: MonthlyIndex, workshops: WorkshopSet) -> QuarterlyAggregate:
    """Return quarter label -> workshop -> `AggregateRecord` for Q1..Q4."""
    out = {
        quarter: aggregate_period(index, workshops, months, quarter)
        for quarter, months in QUARTERS.items()
    }
    log.info("Computed quarterly rollups for %d workshops", len(workshops))
    return MappingProxyType(out)


def annual(index: MonthlyIndex, workshops: WorkshopSet) -> AnnualAggregate:
    """Return workshop -> `AggregateRecord` over all 12 months."""
    out = aggregate_period(index, workshops, MONTHS, YEAR_PERIOD)
    log.info("Computed annual rollups for %d workshops", len(workshops))
    return out


def monthly_frame(index: MonthlyIndex, workshops: WorkshopSet) -> pd.DataFrame:
    """Return a long table of monthly indicator values for charting.

    Columns: `workshop`, `month` and one float column per indicator. Only
    months with a record are included; non-numeric cells become 0.
    """
    rows = []
    for w in workshops:
        for m in MONTHS:
            rec = index[w][m]
            if rec is None:
                continue
            rows.append({"workshop": w, "month": m, **{f: to_number(getattr(rec, f)) for f in INDICATOR_FIELDS}})
    frame = pd.DataFrame(rows, columns=["workshop", "month", *INDICATOR_FIELDS])
    return frame.astype({f: "float64" for f in INDICATOR_FIELDS})
