"""Canonical vocabulary of the production report.

Months, quarters, identity columns and the fixed indicator set, with the
source headers each indicator is recognized under. The Russian headers are
what the workshops' spreadsheets export; English names and the Python field
names are accepted as aliases.
"""

from __future__ import annotations

from typing import Literal, get_args

Month = Literal[
    "Янв", "Фев", "Мар", "Апр", "Май", "Июн",
    "Июл", "Авг", "Сен", "Окт", "Ноя", "Дек",
]
MONTHS: tuple[str, ...] = get_args(Month)

QUARTERS: dict[str, tuple[str, ...]] = {
    "Q1": MONTHS[0:3],
    "Q2": MONTHS[3:6],
    "Q3": MONTHS[6:9],
    "Q4": MONTHS[9:12],
}
YEAR_PERIOD = "year"

WORKSHOP_HEADER = "Цех"
MONTH_HEADER = "Месяц"

# field name -> (source header, English name), in feed column order
INDICATORS: dict[str, tuple[str, str]] = {
    "output": ("Выпуск", "Output"),
    "defect_rate": ("Брак", "DefectRate"),
    "downtime": ("Простой", "Downtime"),
    "headcount": ("Численность", "Headcount"),
    "units_produced": ("Изготовлено", "UnitsProduced"),
    "percent_of_plan": ("ПроцентОтПлана", "PercentOfPlan"),
    "unit_cost": ("Себестоимость", "UnitCost"),
    "gross_profit": ("ВаловаяПрибыль", "GrossProfit"),
    "margin_rate": ("Маржинальность", "MarginRate"),
    "ebitda": ("EBITDA", "EBITDA"),
    "profitability_rate": ("Рентабельность", "ProfitabilityRate"),
    "net_profit": ("ЧистаяПрибыль", "NetProfit"),
}
INDICATOR_FIELDS: tuple[str, ...] = tuple(INDICATORS)

AVERAGED_FIELDS: frozenset[str] = frozenset(
    {"defect_rate", "downtime", "percent_of_plan", "margin_rate", "profitability_rate"}
)
SUMMED_FIELDS: frozenset[str] = frozenset(INDICATOR_FIELDS) - AVERAGED_FIELDS

REQUIRED_FIELDS: tuple[str, ...] = ("workshop", "month", "output", "defect_rate", "downtime")


def _build_header_aliases() -> dict[str, str]:
    aliases = {
        WORKSHOP_HEADER: "workshop",
        "Workshop": "workshop",
        "workshop": "workshop",
        MONTH_HEADER: "month",
        "Month": "month",
        "month": "month",
    }
    for field, (source, english) in INDICATORS.items():
        aliases[source] = field
        aliases[english] = field
        aliases[field] = field
    return aliases


HEADER_ALIASES: dict[str, str] = _build_header_aliases()


def field_for_header(header: str) -> str | None:
    """Return the Python field name for a source header, or None if unknown."""
    return HEADER_ALIASES.get(header.strip())


def indicator_label(field: str) -> str:
    """Return the source (display) header for an indicator field."""
    return INDICATORS[field][0]


def quarter_of(month: str) -> str:
    """Return the quarter label a canonical month belongs to.

    Raises:
        ValueError: if `month` is not one of the canonical labels.
    """
    for quarter, months in QUARTERS.items():
        if month in months:
            return quarter
    raise ValueError(f"Unknown month label: {month!r}")
