"""Load pipeline and the process-wide report session.

`run_pipeline` is the pure part: records in, immutable `ReportModel` out.
`ReportSession` owns the single "current" model and the load state machine:

    Idle -> Parsing -> (error -> Idle | Ready) | (Aggregating -> Ready)
    Ready -> Parsing on the next load

A new model replaces the old one only after the whole pipeline succeeded, so a
failed load leaves the previous report untouched.
"""
from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable

from production_report import cache
from production_report.config import DEFAULT_WORKSHOPS_COUNT, Settings, get_settings
from production_report.errors import ReportError, SourceUnavailable, StorageError
from production_report.ingest.fetch import decode_text, fetch_feed, fetch_text, read_source_file
from production_report.ingest.parse_csv import parse_csv
from production_report.ingest.parse_feed import parse_feed
from production_report.models import Record
from production_report.report.model import ReportModel, build_report_model

log = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    PARSING = "parsing"
    AGGREGATING = "aggregating"
    READY = "ready"


def run_pipeline(records: Iterable[Record], source_name: str) -> ReportModel:
    """Index and aggregate parsed records into a fresh `ReportModel`."""
    model = build_report_model(records, source_name)
    log.info(
        "Report ready for %s: %d records, %d workshops",
        source_name,
        len(model.records),
        len(model.workshops),
    )
    return model


def load_csv_text(
    text: str,
    source_name: str,
    max_workshop: int = DEFAULT_WORKSHOPS_COUNT,
) -> ReportModel:
    """Parse CSV text and run the pipeline on it.

    Raises:
        ParseError: if the CSV header lacks required columns.
    """
    return run_pipeline(parse_csv(text, max_workshop=max_workshop), source_name)


class ReportSession:
    """Holds the current report and runs loads against it.

    Attributes:
        state: Current `PipelineState`.
        model: Last successfully built report, or None before the first load.
        last_error: Error of the most recent failed load (cleared on success).
        warnings: Non-fatal problems, such as cache failures.
    """

    def __init__(self, settings: Settings | None = None, use_cache: bool = True) -> None:
        self.settings = settings or get_settings()
        self.use_cache = use_cache
        self.state = PipelineState.IDLE
        self.model: ReportModel | None = None
        self.last_error: ReportError | None = None
        self.warnings: list[str] = []

    # --------------------------------------------------
    # Core run
    # --------------------------------------------------
    def _run(
        self,
        source_name: str,
        read_records: Callable[[], list[Record]],
        save_to_cache: bool,
    ) -> ReportModel:
        self.state = PipelineState.PARSING
        ok = False
        try:
            records = read_records()
            self.state = PipelineState.AGGREGATING
            model = run_pipeline(records, source_name)
            ok = True
        except ReportError as e:
            self.last_error = e
            log.error("Loading %s failed: %s", source_name, e)
            raise
        finally:
            if not ok:
                self.state = PipelineState.READY if self.model is not None else PipelineState.IDLE

        self.model = model
        self.last_error = None
        self.state = PipelineState.READY
        if save_to_cache and self.use_cache:
            self._save(model)
        return model

    def _save(self, model: ReportModel) -> None:
        try:
            cache.save_dataset(self.settings.cache_path, model.records, model.source_name)
        except StorageError as e:
            log.warning("Report loaded but not cached: %s", e)
            self.warnings.append(str(e))

    # --------------------------------------------------
    # Sources
    # --------------------------------------------------
    def load_text(self, text: str, source_name: str) -> ReportModel:
        """Load CSV text already in memory (e.g. an uploaded file)."""
        n = self.settings.workshops_count
        return self._run(source_name, lambda: parse_csv(text, max_workshop=n), True)

    def load_bytes(self, data: bytes, source_name: str) -> ReportModel:
        """Load raw CSV bytes (e.g. an uploaded file).

        Raises:
            SourceUnavailable: if the bytes are not UTF-8 text.
        """
        n = self.settings.workshops_count
        return self._run(source_name, lambda: parse_csv(decode_text(data), max_workshop=n), True)

    def load_file(self, path: Path) -> ReportModel:
        """Load a local CSV file."""
        n = self.settings.workshops_count
        return self._run(
            path.name,
            lambda: parse_csv(read_source_file(path), max_workshop=n),
            True,
        )

    def load_url(self, url: str) -> ReportModel:
        """Fetch a CSV resource over HTTP and load it."""
        s = self.settings
        return self._run(
            url,
            lambda: parse_csv(fetch_text(url, s.http_timeout), max_workshop=s.workshops_count),
            True,
        )

    def load_feed(self, url: str | None = None) -> ReportModel:
        """Fetch the spreadsheet JSON feed and load it.

        Raises:
            SourceUnavailable: if no URL is given and `FEED_URL` is not set.
        """
        s = self.settings
        target = url or s.feed_url
        if not target:
            err = SourceUnavailable("No feed URL given and FEED_URL is not configured.")
            self.last_error = err
            raise err
        return self._run(
            target,
            lambda: parse_feed(fetch_feed(target, s.http_timeout), max_workshop=s.workshops_count),
            True,
        )

    def load_cached(self) -> ReportModel | None:
        """Re-run the pipeline on the cached records.

        Returns:
            The rebuilt model, or None when nothing is cached or the cache
            cannot be read (the problem is logged and added to `warnings`).
        """
        try:
            dataset = cache.load_dataset(self.settings.cache_path)
        except StorageError as e:
            log.warning("Ignoring unreadable cache: %s", e)
            self.warnings.append(str(e))
            return None
        if dataset is None:
            log.info("No cached dataset in %s", self.settings.cache_path)
            return None
        n = self.settings.workshops_count
        records = [r for r in dataset.records if r.workshop <= n]
        if len(records) < len(dataset.records):
            log.info(
                "Dropped %d cached records above WORKSHOPS_COUNT=%d",
                len(dataset.records) - len(records),
                n,
            )
        return self._run(dataset.filename, lambda: records, False)
