"""Local cache of the last successfully loaded dataset.

Only the raw records and the source name are stored, under a single fixed key
in a JSON file. Restoring a dataset re-runs the full pipeline; aggregates are
never cached.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from production_report.errors import StorageError
from production_report.models import CachedDataset, Record

log = logging.getLogger(__name__)

CACHE_KEY = "production_report.dataset"


def _read_store(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        store = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise StorageError(f"Cannot read cache {path}: {e}") from e
    if not isinstance(store, dict):
        raise StorageError(f"Cache {path} does not hold a JSON object")
    return store


def _read_store_or_reset(path: Path) -> dict:
    # A corrupt file is overwritten by the next write rather than blocking it.
    try:
        return _read_store(path)
    except StorageError as e:
        if not path.is_file():
            raise
        log.warning("Discarding corrupt cache: %s", e)
        return {}


def _write_store(path: Path, store: dict) -> None:
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(json.dumps(store, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)
    except OSError as e:
        raise StorageError(f"Cannot write cache {path}: {e}") from e


def save_dataset(path: Path, records: Iterable[Record], filename: str) -> CachedDataset:
    """Store the records and their source name under `CACHE_KEY`.

    Other keys already present in the file are preserved. A cache file that
    cannot be decoded is replaced.

    Raises:
        StorageError: if the cache file cannot be written.
    """
    dataset = CachedDataset(
        filename=filename,
        saved_at=datetime.now(timezone.utc),
        records=list(records),
    )
    store = _read_store_or_reset(path)
    store[CACHE_KEY] = dataset.model_dump(mode="json")
    _write_store(path, store)
    log.info("Cached %d records from %s to %s", len(dataset.records), filename, path)
    return dataset


def load_dataset(path: Path) -> CachedDataset | None:
    """Return the cached dataset, or None when nothing has been cached.

    Raises:
        StorageError: if the cache exists but is unreadable or malformed.
    """
    store = _read_store(path)
    raw = store.get(CACHE_KEY)
    if raw is None:
        return None
    try:
        return CachedDataset.model_validate(raw)
    except ValidationError as e:
        raise StorageError(f"Cached dataset in {path} is invalid: {e}") from e


def clear_dataset(path: Path) -> bool:
    """Remove the cached dataset. Returns True when something was removed.

    A corrupt cache file is reset to an empty store and counts as removed.

    Raises:
        StorageError: if the cache file cannot be written.
    """
    try:
        store = _read_store(path)
    except StorageError:
        if not path.is_file():
            raise
        _write_store(path, {})
        log.warning("Reset corrupt cache %s", path)
        return True
    if CACHE_KEY not in store:
        return False
    del store[CACHE_KEY]
    _write_store(path, store)
    log.info("Cleared cached dataset in %s", path)
    return True
