"""Reading report sources from disk or over HTTP.

Every failure (missing file, HTTP error, undecodable body) is raised as
`SourceUnavailable`; there are no retries, the user re-triggers the load.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import requests

from production_report.errors import SourceUnavailable

log = logging.getLogger(__name__)


def decode_text(data: bytes) -> str:
    """Decode UTF-8 bytes, tolerating a leading byte-order mark."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise SourceUnavailable(f"Source is not valid UTF-8 text: {e}") from e


def read_source_file(path: Path) -> str:
    """Return the text of a local CSV file.

    Raises:
        SourceUnavailable: if the file cannot be read or decoded.
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise SourceUnavailable(f"Cannot read {path}: {e}") from e
    log.info("Read %s (%d bytes)", path, len(data))
    return decode_text(data)


def _get(url: str, timeout: float) -> requests.Response:
    log.info("Fetching %s", url)
    try:
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise SourceUnavailable(f"Cannot fetch {url}: {e}") from e
    return r


def fetch_text(url: str, timeout: float = 30.0) -> str:
    """Download a CSV resource and return its text.

    Raises:
        SourceUnavailable: on connection errors, non-2xx status or bad encoding.
    """
    r = _get(url, timeout)
    return decode_text(r.content)


def fetch_feed(url: str, timeout: float = 30.0) -> Any:
    """Download the spreadsheet JSON feed and return the decoded payload.

    Raises:
        SourceUnavailable: on connection errors, non-2xx status or invalid JSON.
    """
    r = _get(url, timeout)
    try:
        return json.loads(decode_text(r.content))
    except json.JSONDecodeError as e:
        raise SourceUnavailable(f"Feed at {url} is not valid JSON: {e}") from e
