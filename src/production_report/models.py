"""Pydantic models for parsed records, aggregates and the cached dataset.

`Record` is the fixed-schema row produced by the parsers: two identity fields
plus the twelve known indicators. `AggregateRecord` is one workshop's rollup
over a quarter or the whole year.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from production_report.schema import Month

# float for numeric cells, str for non-numeric text ("" when empty),
# None when the column was not in the source
Cell = float | str | None


class Record(BaseModel):
    """One observation for a (workshop, month) pair."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    workshop: int = Field(..., ge=1)
    month: Month
    output: Cell = None
    defect_rate: Cell = None
    downtime: Cell = None
    headcount: Cell = None
    units_produced: Cell = None
    percent_of_plan: Cell = None
    unit_cost: Cell = None
    gross_profit: Cell = None
    margin_rate: Cell = None
    ebitda: Cell = None
    profitability_rate: Cell = None
    net_profit: Cell = None
    extras: Mapping[str, float | str] = Field(default_factory=dict, validate_default=True)

    @field_validator("extras", mode="after")
    @classmethod
    def _freeze_extras(cls, v: Mapping[str, float | str]) -> Mapping[str, float | str]:
        return MappingProxyType(dict(v))

    @field_serializer("extras")
    def _dump_extras(self, v: Mapping[str, float | str]) -> dict[str, float | str]:
        return dict(v)


class AggregateRecord(BaseModel):
    """Rollup of one workshop over a period (a quarter or the year).

    Attributes:
        workshop: Workshop id.
        period: Quarter label (`Q1`..`Q4`) or `year`.
        month_count: Number of contributing months.

    Summed indicators hold the raw total over contributing months; averaged
    indicators hold that total divided by `month_count`. Every indicator is
    0.0 when no month contributed.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)
    workshop: int = Field(..., ge=1)
    period: str
    output: float = 0.0
    defect_rate: float = 0.0
    downtime: float = 0.0
    headcount: float = 0.0
    units_produced: float = 0.0
    percent_of_plan: float = 0.0
    unit_cost: float = 0.0
    gross_profit: float = 0.0
    margin_rate: float = 0.0
    ebitda: float = 0.0
    profitability_rate: float = 0.0
    net_profit: float = 0.0
    month_count: int = Field(0, ge=0)


class CachedDataset(BaseModel):
    """Raw records of the last successful load plus the source they came from."""
    model_config = ConfigDict(extra="forbid")
    filename: str
    saved_at: datetime
    records: list[Record]


WorkshopSet = tuple[int, ...]
MonthlyIndex = Mapping[int, Mapping[str, Record | None]]
AnnualAggregate = Mapping[int, AggregateRecord]
QuarterlyAggregate = Mapping[str, AnnualAggregate]
