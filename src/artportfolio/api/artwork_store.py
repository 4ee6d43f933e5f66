"""Artwork record storage helpers for the Art Portfolio API.

This module isolates the JSON persistence logic from
``artportfolio.api.main`` so route handlers can focus on HTTP concerns while
the file-backed store remains testable as a small unit.

The store is intentionally simple:

- the whole collection lives in a single ``data.json`` array
- array order is insertion order (oldest first)
- every mutation reads the document, changes it, and rewrites it in full

Route handlers depend on the :class:`ArtworkRepository` protocol rather than
on :class:`JsonArtworkStore` directly, so the JSON document can be swapped for
a real datastore without touching the routing layer.
"""

from __future__ import annotations

import json
import logging
import math
import os
import tempfile
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Protocol

from artportfolio.api.errors import StoreError

logger = logging.getLogger(__name__)

# Keys the server owns; callers cannot overwrite them through update().
_IMMUTABLE_KEYS = frozenset({"id", "createdAt"})


def utc_timestamp() -> str:
    """Return the current UTC time as ISO 8601 with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ArtworkRepository(Protocol):
    """Persistence interface the routing layer relies on."""

    def read_all(self) -> list[dict]: ...

    def find_by_id(self, artwork_id: str) -> dict | None: ...

    def create(self, fields: Mapping[str, Any]) -> dict: ...

    def update(self, artwork_id: str, fields: Mapping[str, Any]) -> dict | None: ...

    def delete(self, artwork_id: str) -> dict | None: ...


class JsonArtworkStore:
    """Artwork collection persisted as one JSON document.

    A missing document is an empty collection.  A document that exists but
    cannot be read, is not valid JSON, or is not a JSON array raises
    :class:`StoreError` rather than being silently replaced, since rewriting
    it would discard every record.

    Read-modify-write cycles are serialised by an instance lock, so concurrent
    requests inside one process cannot lose each other's updates.  Separate
    processes sharing the same file are not coordinated.

    Args:
        data_file: Path to the JSON document.
    """

    def __init__(self, data_file: Path):
        self.data_file = Path(data_file)
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Document I/O.
    # ------------------------------------------------------------------

    def _load(self) -> list[dict]:
        try:
            with open(self.data_file, encoding="utf-8") as handle:
                records = json.load(handle)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            raise StoreError(f"Cannot read artwork document {self.data_file}: {e}") from e

        if not isinstance(records, list):
            raise StoreError(
                f"Artwork document {self.data_file} must contain a JSON array, "
                f"found {type(records).__name__}"
            )
        return records

    def _save(self, records: list[dict]) -> None:
        """Write the full collection via a temporary file and atomic replace."""
        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.data_file.name}.", suffix=".tmp", dir=self.data_file.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(records, handle, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.data_file)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StoreError(f"Cannot write artwork document {self.data_file}: {e}") from e

    @staticmethod
    def _index_of(records: list[dict], artwork_id: str) -> int | None:
        for index, record in enumerate(records):
            if record.get("id") == artwork_id:
                return index
        return None

    # ------------------------------------------------------------------
    # Repository operations.
    # ------------------------------------------------------------------

    def read_all(self) -> list[dict]:
        """Return every record in insertion order."""
        with self._lock:
            return self._load()

    def find_by_id(self, artwork_id: str) -> dict | None:
        """Return the record with ``artwork_id``, or ``None``."""
        with self._lock:
            records = self._load()
            index = self._index_of(records, artwork_id)
            return None if index is None else records[index]

    def create(self, fields: Mapping[str, Any]) -> dict:
        """Append a new record and persist the collection.

        The record gets a fresh UUID plus ``createdAt``/``updatedAt``
        timestamps; any ``id`` or timestamp keys in ``fields`` are ignored.

        Returns:
            The stored record.
        """
        with self._lock:
            records = self._load()
            existing_ids = {record.get("id") for record in records}

            artwork_id = str(uuid.uuid4())
            while artwork_id in existing_ids:
                artwork_id = str(uuid.uuid4())

            now = utc_timestamp()
            payload = {
                key: value
                for key, value in fields.items()
                if key not in _IMMUTABLE_KEYS and key != "updatedAt"
            }
            record = {"id": artwork_id, **payload, "createdAt": now, "updatedAt": now}

            records.append(record)
            self._save(records)

        logger.info(f"Created artwork {artwork_id}")
        return record

    def update(self, artwork_id: str, fields: Mapping[str, Any]) -> dict | None:
        """Merge ``fields`` into an existing record and persist.

        ``id`` and ``createdAt`` are never overwritten; ``updatedAt`` is
        refreshed.

        Returns:
            The updated record, or ``None`` if no record has ``artwork_id``.
        """
        with self._lock:
            records = self._load()
            index = self._index_of(records, artwork_id)
            if index is None:
                return None

            changes = {key: value for key, value in fields.items() if key not in _IMMUTABLE_KEYS}
            record = {**records[index], **changes, "updatedAt": utc_timestamp()}

            records[index] = record
            self._save(records)

        logger.info(f"Updated artwork {artwork_id}")
        return record

    def delete(self, artwork_id: str) -> dict | None:
        """Remove a record and persist.

        Returns:
            The removed record, or ``None`` if no record has ``artwork_id``.
        """
        with self._lock:
            records = self._load()
            index = self._index_of(records, artwork_id)
            if index is None:
                return None

            record = records.pop(index)
            self._save(records)

        logger.info(f"Deleted artwork {artwork_id}")
        return record


def filter_artworks(records: list[dict], *, status: int | None = None) -> list[dict]:
    """Keep only records whose ``status`` equals ``status``.

    Stored statuses are compared after integer coercion so documents written
    with string statuses still match.

    Args:
        records: Source records.
        status: ``0`` or ``1`` to filter by, or ``None`` to keep everything.

    Returns:
        Filtered records in their original order.
    """
    if status is None:
        return records

    filtered: list[dict] = []
    for record in records:
        try:
            record_status = int(record.get("status"))
        except (TypeError, ValueError):
            continue
        if record_status == status:
            filtered.append(record)
    return filtered


def paginate_artworks(records: list[dict], page: int, limit: int) -> dict:
    """Slice one page out of ``records``.

    Pages are one-based.  A page past the end yields an empty ``data`` list
    while still reporting the real ``total`` and ``pages``.

    Args:
        records: Filtered records.
        page: Requested page number (>= 1).
        limit: Items per page (>= 1).

    Returns:
        Dictionary with ``data`` and ``pagination`` (``page``, ``limit``,
        ``total``, ``pages``).
    """
    total = len(records)
    start = (page - 1) * limit

    return {
        "data": records[start : start + limit],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }
