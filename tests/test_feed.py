from __future__ import annotations

import pytest

from production_report.errors import ParseError
from production_report.ingest.parse_feed import parse_feed


def test_feed_rows_positional_with_missing_cells_as_zero() -> None:
    payload = {
        "values": [
            ["Цех", "Месяц", "Выпуск", "Брак"],
            [1, "Янв", 100, 2, 5, 10],
            ["2", "Фев", "200"],
        ]
    }
    recs = parse_feed(payload)
    assert [(r.workshop, r.month) for r in recs] == [(1, "Янв"), (2, "Фев")]
    assert recs[0].output == 100.0
    assert recs[0].downtime == 5.0
    assert recs[0].headcount == 10.0
    assert recs[0].net_profit == 0.0
    assert recs[1].output == 200.0
    assert recs[1].defect_rate == 0.0


def test_feed_accepts_bare_list_and_skips_bad_rows() -> None:
    recs = parse_feed([[1, "Янв", 1], [None, "Фев", 1], [3], "junk", [99, "Мар", 1]])
    assert [(r.workshop, r.month) for r in recs] == [(1, "Янв")]


def test_feed_empty_and_text_cells() -> None:
    recs = parse_feed([[1, "Янв", "", "брак"]])
    assert recs[0].output == 0.0
    assert recs[0].defect_rate == "брак"


def test_feed_rejects_non_grid_payload() -> None:
    with pytest.raises(ParseError):
        parse_feed("not a grid")
