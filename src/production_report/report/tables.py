"""Formatted report tables.

Each table is a pandas DataFrame of display strings, one row per workshop (or
per month for the monthly table). Numbers are formatted by column kind:

- `int`: rounded to an integer, halves rounded up
- `pct`: two decimals followed by `%`
- `hours`: one decimal
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Sequence

import pandas as pd

from production_report.models import AnnualAggregate, WorkshopSet
from production_report.report.model import ReportModel
from production_report.schema import INDICATOR_FIELDS, MONTHS, indicator_label

MISSING = "-"


def format_int(value: float) -> str:
    return str(int(math.floor(value + 0.5)))


def format_pct(value: float) -> str:
    return f"{value:.2f}%"


def format_hours(value: float) -> str:
    return f"{value:.1f}"


FORMATTERS: dict[str, Callable[[float], str]] = {
    "int": format_int,
    "pct": format_pct,
    "hours": format_hours,
}

# display kind of each indicator when shown on its own
INDICATOR_KINDS: dict[str, str] = {
    **{f: "int" for f in INDICATOR_FIELDS},
    "defect_rate": "pct",
    "downtime": "hours",
    "percent_of_plan": "pct",
    "margin_rate": "pct",
    "profitability_rate": "pct",
}


@dataclass(frozen=True)
class Column:
    header: str
    field: str
    kind: str


WORKSHOP_COLUMN = "Цех"
MONTH_COLUMN = "Месяц"

QUARTERLY_COLUMNS: tuple[Column, ...] = (
    Column("Выпуск", "output", "int"),
    Column("Брак (%)", "defect_rate", "pct"),
    Column("Простой (ч)", "downtime", "hours"),
    Column("Валовая прибыль", "gross_profit", "int"),
    Column("Чистая прибыль", "net_profit", "int"),
)

ANNUAL_COLUMNS: tuple[Column, ...] = (
    Column("Выпуск", "output", "int"),
    Column("Брак (%)", "defect_rate", "pct"),
    Column("Простой (ч)", "downtime", "hours"),
    Column("Маржинальность (%)", "margin_rate", "pct"),
    Column("Рентабельность (%)", "profitability_rate", "pct"),
    Column("Чистая прибыль", "net_profit", "int"),
)

PDF_ANNUAL_COLUMNS: tuple[Column, ...] = (
    Column("Выпуск", "output", "int"),
    Column("Брак (%)", "defect_rate", "pct"),
    Column("Простой (ч)", "downtime", "hours"),
    Column("Прибыль", "net_profit", "int"),
)


def workshop_label(workshop: int) -> str:
    return f"Цех {workshop}"


def format_value(value: Any, kind: str) -> str:
    """Format a numeric value by kind; anything non-numeric becomes "-"."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return MISSING
    if math.isnan(value):
        return MISSING
    return FORMATTERS[kind](float(value))


def aggregate_table(
    aggregates: AnnualAggregate,
    workshops: WorkshopSet,
    columns: Sequence[Column],
) -> pd.DataFrame:
    """Return one formatted row per workshop for the given columns."""
    rows = []
    for w in workshops:
        agg = aggregates[w]
        row = {WORKSHOP_COLUMN: workshop_label(w)}
        for col in columns:
            row[col.header] = format_value(getattr(agg, col.field), col.kind)
        rows.append(row)
    return pd.DataFrame(rows, columns=[WORKSHOP_COLUMN, *(c.header for c in columns)])


def annual_table(
    model: ReportModel,
    columns: Sequence[Column] = ANNUAL_COLUMNS,
) -> pd.DataFrame:
    return aggregate_table(model.annual(), model.workshops, columns)


def quarterly_tables(
    model: ReportModel,
    columns: Sequence[Column] = QUARTERLY_COLUMNS,
) -> dict[str, pd.DataFrame]:
    """Return quarter label -> formatted table, in Q1..Q4 order."""
    return {
        quarter: aggregate_table(aggs, model.workshops, columns)
        for quarter, aggs in model.quarterly().items()
    }


def monthly_table(model: ReportModel, workshop: int) -> pd.DataFrame:
    """Return one row per canonical month with every indicator of a workshop.

    Months without a record and non-numeric cells show as "-".
    """
    monthly = model.monthly(workshop)
    headers = [indicator_label(f) for f in INDICATOR_FIELDS]
    rows = []
    for m in MONTHS:
        rec = monthly[m]
        row = {MONTH_COLUMN: m}
        for f, header in zip(INDICATOR_FIELDS, headers):
            value = getattr(rec, f) if rec is not None else None
            row[header] = format_value(value, INDICATOR_KINDS[f])
        rows.append(row)
    return pd.DataFrame(rows, columns=[MONTH_COLUMN, *headers])
