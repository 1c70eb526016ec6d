from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from production_report import cache
from production_report.config import Settings
from production_report.errors import MissingRequiredColumnsError, SourceUnavailable
from production_report.pipeline import PipelineState, ReportSession, load_csv_text


def test_load_csv_text_builds_model(sample_csv: str) -> None:
    model = load_csv_text(sample_csv, "sample.csv")
    assert model.workshops == (1, 2, 3)
    assert model.source_name == "sample.csv"
    assert model.annual()[1].output == 450
    assert model.annual()[3].month_count == 0
    assert model.monthly(1)["Фев"].output == 200.0
    assert model.monthly(1)["Мар"] is None


def test_model_views_are_read_only(sample_csv: str) -> None:
    model = load_csv_text(sample_csv, "sample.csv")
    with pytest.raises(TypeError):
        model.annual()[1] = None  # type: ignore[index]
    with pytest.raises(TypeError):
        model.quarterly()["Q1"] = {}  # type: ignore[index]
    with pytest.raises(AttributeError):
        model.source_name = "other"  # type: ignore[misc]


def test_session_starts_idle(settings: Settings) -> None:
    session = ReportSession(settings)
    assert session.state is PipelineState.IDLE
    assert session.model is None


def test_successful_load_is_ready_and_cached(settings: Settings, sample_csv: str) -> None:
    session = ReportSession(settings)
    model = session.load_text(sample_csv, "sample.csv")
    assert session.state is PipelineState.READY
    assert session.model is model
    cached = cache.load_dataset(settings.cache_path)
    assert cached is not None
    assert cached.filename == "sample.csv"
    assert len(cached.records) == len(model.records)


def test_failed_first_load_returns_to_idle(settings: Settings) -> None:
    session = ReportSession(settings)
    with pytest.raises(MissingRequiredColumnsError):
        session.load_text("Цех,Месяц,Выпуск\n1,Янв,1\n", "bad.csv")
    assert session.state is PipelineState.IDLE
    assert session.model is None
    assert isinstance(session.last_error, MissingRequiredColumnsError)


def test_failed_load_keeps_previous_report(settings: Settings, tmp_path: Path, sample_csv: str) -> None:
    session = ReportSession(settings)
    good = session.load_text(sample_csv, "sample.csv")
    with pytest.raises(SourceUnavailable):
        session.load_file(tmp_path / "missing.csv")
    assert session.state is PipelineState.READY
    assert session.model is good
    assert cache.load_dataset(settings.cache_path).filename == "sample.csv"


def test_next_load_replaces_without_merging(settings: Settings, sample_csv: str) -> None:
    session = ReportSession(settings)
    session.load_text(sample_csv, "sample.csv")
    model = session.load_text("Цех,Месяц,Выпуск,Брак,Простой\n9,Июл,1,1,1\n", "july.csv")
    assert model.workshops == (9,)
    assert session.model is model
    assert session.last_error is None


def test_load_file(settings: Settings, tmp_path: Path, sample_csv: str) -> None:
    path = tmp_path / "data.csv"
    path.write_bytes(b"\xef\xbb\xbf" + sample_csv.encode("utf-8"))
    model = ReportSession(settings).load_file(path)
    assert model.source_name == "data.csv"
    assert model.workshops == (1, 2, 3)


def test_load_cached_reruns_pipeline(settings: Settings, sample_csv: str) -> None:
    ReportSession(settings).load_text(sample_csv, "sample.csv")
    fresh = ReportSession(settings)
    model = fresh.load_cached()
    assert model is not None
    assert fresh.state is PipelineState.READY
    assert model.source_name == "sample.csv"
    assert model.annual()[1].defect_rate == 3


def test_load_cached_without_cache(settings: Settings) -> None:
    session = ReportSession(settings)
    assert session.load_cached() is None
    assert session.state is PipelineState.IDLE


def test_unreadable_cache_is_a_warning(settings: Settings) -> None:
    settings.cache_path.parent.mkdir(parents=True)
    settings.cache_path.write_text("{broken", encoding="utf-8")
    session = ReportSession(settings)
    assert session.load_cached() is None
    assert session.warnings


def test_cache_write_failure_does_not_fail_load(settings: Settings, sample_csv: str) -> None:
    settings.cache_path.mkdir(parents=True)  # a directory where the file should be
    session = ReportSession(settings)
    model = session.load_text(sample_csv, "sample.csv")
    assert session.state is PipelineState.READY
    assert session.model is model
    assert session.warnings


def test_use_cache_false_skips_writing(settings: Settings, sample_csv: str) -> None:
    ReportSession(settings, use_cache=False).load_text(sample_csv, "sample.csv")
    assert not settings.cache_path.exists()


def test_feed_without_url_is_unavailable(settings: Settings) -> None:
    session = ReportSession(settings)
    with pytest.raises(SourceUnavailable):
        session.load_feed()
    assert session.state is PipelineState.IDLE


def test_successful_load_recovers_corrupt_cache(settings: Settings, sample_csv: str) -> None:
    settings.cache_path.parent.mkdir(parents=True)
    settings.cache_path.write_text("{broken", encoding="utf-8")
    session = ReportSession(settings)
    session.load_text(sample_csv, "sample.csv")
    assert not session.warnings
    assert cache.load_dataset(settings.cache_path).filename == "sample.csv"


def test_load_bytes_decodes_upload(settings: Settings, sample_csv: str) -> None:
    session = ReportSession(settings)
    model = session.load_bytes(b"\xef\xbb\xbf" + sample_csv.encode("utf-8"), "upload.csv")
    assert model.workshops == (1, 2, 3)


def test_load_bytes_rejects_non_utf8(settings: Settings) -> None:
    session = ReportSession(settings)
    with pytest.raises(SourceUnavailable):
        session.load_bytes(b"\xff\xfe\x00", "upload.csv")
    assert session.state is PipelineState.IDLE
    assert isinstance(session.last_error, SourceUnavailable)


def test_load_cached_respects_lowered_workshops_count(settings: Settings, sample_csv: str) -> None:
    ReportSession(settings).load_text(sample_csv, "sample.csv")
    model = ReportSession(replace(settings, workshops_count=2)).load_cached()
    assert model is not None
    assert model.workshops == (1, 2)
    assert 3 not in model.annual()
