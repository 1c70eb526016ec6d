"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads environment variables (with a `.env` file at the project root taken into
account) and validates the numeric ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_WORKSHOPS_COUNT = 20


@dataclass(frozen=True)
class Settings:
    """Container for report configuration read from the environment.

    Attributes:
        workshops_count: Highest valid workshop id (ids run 1..N).
        cache_path: JSON file used to cache the last loaded dataset.
        output_dir: Directory where PDF reports are written.
        feed_url: Optional default URL of the spreadsheet JSON feed.
        http_timeout: Timeout in seconds for fetching remote sources.
        pdf_font_path: Optional TTF font with Cyrillic glyphs for the PDF.
        log_path: File the CLI writes its log to.
    """
    workshops_count: int
    cache_path: Path
    output_dir: Path
    feed_url: str | None
    http_timeout: float
    pdf_font_path: Path | None
    log_path: Path


def _positive_number(name: str, raw: str, cast: type) -> int | float:
    try:
        value = cast(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}.") from None
    if value <= 0:
        raise RuntimeError(f"{name} must be positive, got {raw!r}.")
    return value


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if `WORKSHOPS_COUNT` or `HTTP_TIMEOUT` is not a
            positive number.
    """
    workshops_count = int(
        _positive_number(
            "WORKSHOPS_COUNT",
            os.getenv("WORKSHOPS_COUNT", str(DEFAULT_WORKSHOPS_COUNT)).strip(),
            int,
        )
    )
    http_timeout = float(
        _positive_number("HTTP_TIMEOUT", os.getenv("HTTP_TIMEOUT", "30").strip(), float)
    )
    cache_path = Path(os.getenv("REPORT_CACHE_PATH", "data/cache/report_cache.json"))
    output_dir = Path(os.getenv("REPORT_OUTPUT_DIR", "reports"))
    feed_url = os.getenv("FEED_URL", "").strip() or None
    font = os.getenv("PDF_FONT_PATH", "").strip()
    log_path = Path(os.getenv("LOG_PATH", "logs/report.log"))

    return Settings(
        workshops_count=workshops_count,
        cache_path=cache_path,
        output_dir=output_dir,
        feed_url=feed_url,
        http_timeout=http_timeout,
        pdf_font_path=Path(font) if font else None,
        log_path=log_path,
    )
