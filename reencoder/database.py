"""Persistent index of FLAC files keyed by content hash."""

from __future__ import annotations

import os
import sqlite3
import threading
from typing import Dict, Iterator, Optional, Tuple

from .models import Evaluation, FileInfo, RunConfig


class KeyNotFoundError(KeyError):
    """Raised when a key is absent from the store."""


class Store:
    """A key-value store kept in a directory."""

    _FILENAME = "entries.sqlite3"

    def __init__(self, directory):
        self.directory = os.fspath(directory)
        os.makedirs(self.directory, exist_ok=True)
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(
            os.path.join(self.directory, self._FILENAME), check_same_thread=False
        )
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS entries (key BLOB PRIMARY KEY, value BLOB NOT NULL)"
            )

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def items(self) -> Iterator[Tuple[bytes, bytes]]:
        """Yield every (key, value) pair, ordered by key."""
        with self._lock:
            rows = self._conn.execute("SELECT key, value FROM entries ORDER BY key").fetchall()
        for key, value in rows:
            yield bytes(key), bytes(value)

    def batch(self) -> "Batch":
        return Batch(self)

    def sync(self) -> None:
        with self._lock:
            self._conn.commit()

    def _lookup(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            row = self._conn.execute("SELECT value FROM entries WHERE key = ?", (key,)).fetchone()
        return None if row is None else bytes(row[0])

    def _apply(self, changes: Dict[bytes, Optional[bytes]]) -> None:
        with self._lock, self._conn:
            for key, value in changes.items():
                if value is None:
                    self._conn.execute("DELETE FROM entries WHERE key = ?", (key,))
                else:
                    self._conn.execute(
                        "INSERT OR REPLACE INTO entries (key, value) VALUES (?, ?)", (key, value)
                    )


class Batch:
    """Pending writes to a store, applied together on commit."""

    def __init__(self, store: Store):
        self._store = store
        self._pending: Dict[bytes, Optional[bytes]] = {}
        self._lock = threading.Lock()
        self._committed = False

    def _check_open(self) -> None:
        if self._committed:
            raise RuntimeError("batch already committed")

    def exists(self, key) -> bool:
        key = bytes(key)
        with self._lock:
            self._check_open()
            if key in self._pending:
                return self._pending[key] is not None
        return self._store._lookup(key) is not None

    def get(self, key) -> bytes:
        key = bytes(key)
        with self._lock:
            self._check_open()
            if key in self._pending:
                value = self._pending[key]
                if value is None:
                    raise KeyNotFoundError(key)
                return value
        value = self._store._lookup(key)
        if value is None:
            raise KeyNotFoundError(key)
        return value

    def put(self, key, value) -> None:
        with self._lock:
            self._check_open()
            self._pending[bytes(key)] = bytes(value)

    def delete(self, key) -> None:
        with self._lock:
            self._check_open()
            self._pending[bytes(key)] = None

    def commit(self) -> None:
        with self._lock:
            self._check_open()
            self._store._apply(self._pending)
            self._pending.clear()
            self._committed = True


def decode_info(value) -> FileInfo:
    return FileInfo.from_json(value)


def get_info(batch: Batch, hashsum) -> FileInfo:
    """Return the stored record for a hash, or raise KeyNotFoundError."""
    if not batch.exists(hashsum):
        raise KeyNotFoundError(hashsum)
    return decode_info(batch.get(hashsum))


def evaluate_file(info: FileInfo, batch: Batch, hashsum, encoder: str) -> Evaluation:
    """Compare a file's current state with its stored record."""
    stored = get_info(batch, hashsum)
    if stored.process:
        return Evaluation.REENCODE_NEEDED
    if info.encoder != encoder:
        return Evaluation.REENCODE_NEEDED
    if stored.abs_path != info.abs_path:
        return Evaluation.FILE_MOVED
    return Evaluation.REENCODE_NOT_NEEDED


def update_file(info: FileInfo, batch: Batch, hashsum) -> None:
    batch.put(hashsum, info.to_json())


def index_file(info: FileInfo, config: RunConfig, hashsum, batch: Batch) -> bool:
    """Record a file in the index; return True when it needs reencoding."""
    try:
        result = evaluate_file(info, batch, hashsum, config.encoder)
    except KeyNotFoundError:
        result = Evaluation.REENCODE_NEEDED
    needed = result is Evaluation.REENCODE_NEEDED
    if not needed:
        info.process = False
    update_file(info, batch, hashsum)
    return needed