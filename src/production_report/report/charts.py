"""Chart data and Altair chart builders.

A `ChartSeries` is the renderer-neutral contract: a label sequence plus one or
more named numeric series aligned to it. The `*_chart` helpers turn a series
into an Altair chart for the dashboard.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import altair as alt
import pandas as pd

from production_report.aggregate.rollups import to_number
from production_report.report.model import ReportModel
from production_report.report.tables import workshop_label
from production_report.schema import INDICATOR_FIELDS, MONTHS, QUARTERS, indicator_label

# one colour per workshop id 1..20
WORKSHOP_COLORS: tuple[str, ...] = (
    "#3366cc", "#dc3912", "#ff9900", "#109618", "#990099",
    "#0099c6", "#dd4477", "#66aa00", "#b82e2e", "#316395",
    "#994499", "#22aa99", "#aaaa11", "#6633cc", "#e67300",
    "#8b0707", "#651067", "#329262", "#5574a6", "#3b3eac",
)


def workshop_color(workshop: int) -> str:
    return WORKSHOP_COLORS[(workshop - 1) % len(WORKSHOP_COLORS)]


@dataclass(frozen=True)
class ChartSeries:
    """Labels plus named value series, each aligned to `labels`."""
    labels: tuple[str, ...]
    series: dict[str, tuple[float, ...]]

    def __post_init__(self) -> None:
        for name, values in self.series.items():
            if len(values) != len(self.labels):
                raise ValueError(
                    f"Series {name!r} has {len(values)} values for {len(self.labels)} labels"
                )

    def to_frame(self) -> pd.DataFrame:
        """Return a long table with `label`, `series` and `value` columns."""
        rows = [
            {"label": label, "series": name, "value": value}
            for name, values in self.series.items()
            for label, value in zip(self.labels, values)
        ]
        return pd.DataFrame(rows, columns=["label", "series", "value"])


def _check_field(field: str) -> None:
    if field not in INDICATOR_FIELDS:
        raise ValueError(f"Unknown indicator: {field!r}")


def annual_series(model: ReportModel, field: str) -> ChartSeries:
    """Annual value of one indicator per workshop."""
    _check_field(field)
    annual = model.annual()
    return ChartSeries(
        labels=tuple(workshop_label(w) for w in model.workshops),
        series={indicator_label(field): tuple(getattr(annual[w], field) for w in model.workshops)},
    )


def quarterly_series(model: ReportModel, field: str) -> ChartSeries:
    """One series per workshop across Q1..Q4 for one indicator."""
    _check_field(field)
    quarterly = model.quarterly()
    return ChartSeries(
        labels=tuple(QUARTERS),
        series={
            workshop_label(w): tuple(getattr(quarterly[q][w], field) for q in QUARTERS)
            for w in model.workshops
        },
    )


def monthly_series(model: ReportModel, workshop: int, fields: Sequence[str]) -> ChartSeries:
    """Monthly values of the given indicators for one workshop.

    Months without a record, and non-numeric cells, plot as 0.
    """
    for f in fields:
        _check_field(f)
    monthly = model.monthly(workshop)
    return ChartSeries(
        labels=MONTHS,
        series={
            indicator_label(f): tuple(
                to_number(getattr(monthly[m], f)) if monthly[m] is not None else 0.0
                for m in MONTHS
            )
            for f in fields
        },
    )


def bar_chart(series: ChartSeries, title: str, workshops: Sequence[int] | None = None) -> alt.Chart:
    """Bar chart of a single-series `ChartSeries`, e.g. one indicator per workshop.

    Args:
        series: Data to plot; every series is drawn, coloured by label.
        title: Chart title.
        workshops: When the labels are workshops, their ids, so each bar gets
            that workshop's fixed colour.
    """
    frame = series.to_frame()
    if workshops is not None:
        scale = alt.Scale(domain=list(series.labels), range=[workshop_color(w) for w in workshops])
    else:
        scale = alt.Scale(domain=list(series.labels), range=list(WORKSHOP_COLORS))
    return (
        alt.Chart(frame)
        .mark_bar()
        .encode(
            x=alt.X("label:N", sort=list(series.labels), title=None),
            y=alt.Y("value:Q", title=None),
            color=alt.Color("label:N", scale=scale, legend=None),
            tooltip=["label:N", "series:N", alt.Tooltip("value:Q", format=",.2f")],
        )
        .properties(title=title)
    )


def line_chart(series: ChartSeries, title: str) -> alt.Chart:
    """Line chart with one line per named series."""
    frame = series.to_frame()
    return (
        alt.Chart(frame)
        .mark_line(point=True)
        .encode(
            x=alt.X("label:N", sort=list(series.labels), title=None),
            y=alt.Y("value:Q", title=None),
            color=alt.Color("series:N", title=None),
            tooltip=["label:N", "series:N", alt.Tooltip("value:Q", format=",.2f")],
        )
        .properties(title=title)
    )


def annual_title(field: str) -> str:
    return f"Годовые показатели: {indicator_label(field)}"
