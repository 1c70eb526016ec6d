from __future__ import annotations

import pytest

from production_report.aggregate.record_store import build_record_store
from production_report.ingest.parse_csv import parse_csv
from production_report.models import Record
from production_report.schema import MONTHS


def test_workshop_set_sorted_and_deduplicated() -> None:
    recs = [
        Record(workshop=3, month="Янв", output=1.0),
        Record(workshop=1, month="Янв", output=1.0),
        Record(workshop=3, month="Фев", output=1.0),
    ]
    index, workshops = build_record_store(recs)
    assert workshops == (1, 3)
    assert set(index) == {1, 3}


def test_every_canonical_month_present_with_none_for_gaps() -> None:
    index, _ = build_record_store([Record(workshop=2, month="Май", output=5.0)])
    assert list(index[2]) == list(MONTHS)
    assert index[2]["Май"].output == 5.0
    assert index[2]["Янв"] is None


def test_first_row_wins_for_duplicates() -> None:
    recs = parse_csv("Цех,Месяц,Выпуск,Брак,Простой\n1,Янв,100,2,5\n1,Янв,999,9,9\n")
    index, _ = build_record_store(recs)
    assert index[1]["Янв"].output == 100.0


def test_rows_with_empty_identity_never_reach_the_store() -> None:
    recs = parse_csv("Цех,Месяц,Выпуск,Брак,Простой\n,Янв,100,2,5\n4,,100,2,5\n")
    index, workshops = build_record_store(recs)
    assert workshops == ()
    assert dict(index) == {}


def test_index_is_read_only() -> None:
    index, _ = build_record_store([Record(workshop=1, month="Янв")])
    with pytest.raises(TypeError):
        index[1]["Янв"] = None  # type: ignore[index]
