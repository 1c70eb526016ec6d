from __future__ import annotations

from production_report.aggregate.record_store import build_record_store
from production_report.aggregate.rollups import (
    aggregate_period,
    annual,
    contributes,
    monthly_frame,
    quarterly,
    to_number,
)
from production_report.ingest.parse_csv import parse_csv
from production_report.models import Record
from production_report.schema import AVERAGED_FIELDS, INDICATOR_FIELDS, MONTHS, SUMMED_FIELDS


def _store(text: str):
    return build_record_store(parse_csv(text))


def test_annual_scenario_sums_and_averages() -> None:
    index, workshops = _store("Цех,Месяц,Выпуск,Брак,Простой\n1,Янв,100,2,5\n1,Фев,200,4,10")
    agg = annual(index, workshops)[1]
    assert agg.output == 300
    assert agg.defect_rate == 3
    assert agg.downtime == 7.5
    assert agg.month_count == 2
    assert agg.period == "year"


def test_zero_and_missing_output_months_do_not_contribute() -> None:
    text = (
        "Цех,Месяц,Выпуск,Брак,Простой\n"
        "1,Янв,100,2,4\n"
        "1,Фев,0,50,50\n"
        "1,Мар,,50,50\n"
        "1,Апр,abc,50,50\n"
    )
    index, workshops = _store(text)
    agg = annual(index, workshops)[1]
    assert agg.month_count == 1
    assert agg.defect_rate == 2
    assert agg.downtime == 4


def test_workshop_without_contributing_months_is_all_zero() -> None:
    index, workshops = _store("Цех,Месяц,Выпуск,Брак,Простой\n5,Янв,0,3,8\n5,Фев,,1,1\n")
    agg = annual(index, workshops)[5]
    assert agg.month_count == 0
    for f in INDICATOR_FIELDS:
        assert getattr(agg, f) == 0


def test_quarterly_uses_quarter_months_only() -> None:
    text = (
        "Цех,Месяц,Выпуск,Брак,Простой,ЧистаяПрибыль,Маржинальность\n"
        "1,Янв,10,1,1,100,10\n"
        "1,Мар,30,3,3,300,30\n"
        "1,Апр,40,4,4,400,40\n"
        "2,Дек,5,5,5,5,5\n"
    )
    index, workshops = _store(text)
    q = quarterly(index, workshops)
    assert list(q) == ["Q1", "Q2", "Q3", "Q4"]
    assert q["Q1"][1].output == 40
    assert q["Q1"][1].net_profit == 400
    assert q["Q1"][1].margin_rate == 20
    assert q["Q1"][1].month_count == 2
    assert q["Q2"][1].month_count == 1
    assert q["Q3"][1].month_count == 0
    assert q["Q1"][2].month_count == 0
    assert q["Q4"][2].output == 5
    assert set(q["Q3"]) == {1, 2}


def test_summed_fields_equal_sum_of_first_rows_only() -> None:
    text = (
        "Цех,Месяц,Выпуск,Брак,Простой,Численность,EBITDA\n"
        "1,Янв,10,0,0,5,7\n"
        "1,Янв,1000,0,0,500,700\n"
        "1,Фев,20,0,0,6,8\n"
    )
    index, workshops = _store(text)
    agg = annual(index, workshops)[1]
    assert agg.output == 10 + 20
    assert agg.headcount == 5 + 6
    assert agg.ebitda == 7 + 8


def test_aggregation_is_idempotent() -> None:
    text = "Цех,Месяц,Выпуск,Брак,Простой\n" + "\n".join(
        f"{w},{m},{w * 10 + i}.3,{i}.7,{w}.1" for w in (1, 2, 3) for i, m in enumerate(MONTHS)
    )
    index, workshops = _store(text)
    assert dict(annual(index, workshops)) == dict(annual(index, workshops))
    first = {q: dict(v) for q, v in quarterly(index, workshops).items()}
    second = {q: dict(v) for q, v in quarterly(index, workshops).items()}
    assert first == second


def test_empty_store_gives_empty_aggregates() -> None:
    index, workshops = build_record_store([])
    assert dict(annual(index, workshops)) == {}
    assert all(dict(v) == {} for v in quarterly(index, workshops).values())


def test_aggregate_period_custom_months() -> None:
    index, workshops = _store("Цех,Месяц,Выпуск,Брак,Простой\n1,Июн,6,1,2\n1,Июл,7,3,4\n")
    agg = aggregate_period(index, workshops, ("Июн", "Июл"), "summer")[1]
    assert (agg.output, agg.defect_rate, agg.month_count, agg.period) == (13, 2, 2, "summer")


def test_field_sets_partition_indicators() -> None:
    assert SUMMED_FIELDS | AVERAGED_FIELDS == set(INDICATOR_FIELDS)
    assert not SUMMED_FIELDS & AVERAGED_FIELDS
    assert "downtime" in AVERAGED_FIELDS


def test_contribution_predicate_and_coercion() -> None:
    assert not contributes(None)
    assert not contributes(Record(workshop=1, month="Янв"))
    assert not contributes(Record(workshop=1, month="Янв", output=0.0))
    assert not contributes(Record(workshop=1, month="Янв", output=""))
    assert contributes(Record(workshop=1, month="Янв", output=-1.0))
    assert to_number("12.5") == 12.5
    assert to_number("x") == 0.0
    assert to_number(float("nan")) == 0.0
    assert to_number(None) == 0.0


def test_monthly_frame_lists_present_months() -> None:
    index, workshops = _store("Цех,Месяц,Выпуск,Брак,Простой\n1,Фев,2,0,0\n1,Янв,1,0,0\n")
    frame = monthly_frame(index, workshops)
    assert frame["month"].tolist() == ["Янв", "Фев"]
    assert frame["output"].tolist() == [1.0, 2.0]
