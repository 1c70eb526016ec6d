"""Read-only report model consumed by the table, chart and PDF renderers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Mapping

from production_report.aggregate.record_store import build_record_store
from production_report.aggregate.rollups import annual, quarterly
from production_report.models import (
    AnnualAggregate,
    MonthlyIndex,
    QuarterlyAggregate,
    Record,
    WorkshopSet,
)


@dataclass(frozen=True)
class ReportModel:
    """Snapshot of one successful load.

    Attributes:
        workshops: Sorted workshop ids present in the source.
        records: Parsed records in source order (what the cache stores).
        source_name: File name or URL the records came from.
        generated_at: UTC time the aggregates were computed.
    """
    workshops: WorkshopSet
    records: tuple[Record, ...]
    source_name: str
    generated_at: datetime
    _monthly: MonthlyIndex
    _quarterly: QuarterlyAggregate
    _annual: AnnualAggregate

    def monthly(self, workshop: int) -> Mapping[str, Record | None]:
        """Return canonical month -> Record (or None) for one workshop.

        Raises:
            KeyError: if the workshop is not in the report.
        """
        return self._monthly[workshop]

    def quarterly(self) -> QuarterlyAggregate:
        return self._quarterly

    def annual(self) -> AnnualAggregate:
        return self._annual

    @property
    def is_empty(self) -> bool:
        return not self.workshops


def build_report_model(records: Iterable[Record], source_name: str) -> ReportModel:
    """Index the records, compute every rollup and freeze the result."""
    records = tuple(records)
    index, workshops = build_record_store(records)
    return ReportModel(
        workshops=workshops,
        records=records,
        source_name=source_name,
        generated_at=datetime.now(timezone.utc),
        _monthly=index,
        _quarterly=quarterly(index, workshops),
        _annual=annual(index, workshops),
    )
