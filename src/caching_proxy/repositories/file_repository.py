"""JSON snapshot implementation of CacheStore.

Entries live in an in-memory dict guarded by a lock. Every successful
``set`` rewrites the whole snapshot file (write-through), so the file never
lags memory by more than the entry being written. The snapshot only holds
``{key: value}``: entries restored at startup count as freshly inserted and
get the full default TTL again.

Rewriting the full file on every miss is fine for the volumes a local
proxy sees; it is the first thing to replace (append-only log or an
embedded store) if the cache grows large.
"""

import json
import logging
import os
import tempfile
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from caching_proxy.config import settings
from caching_proxy.entities import CacheEntry
from caching_proxy.exceptions import StoreReadError, StoreWriteError

logger = logging.getLogger(__name__)


class FileCacheRepository:
    """In-memory entry store persisted to a single JSON file.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    Two locks are used:
    - ``_lock`` guards the entry map and is never held during I/O
    - ``_persist_lock`` serializes snapshot writes and clears
    Writes go to a temporary file that is moved into place with
    ``os.replace``, so readers never observe a partial snapshot.
    """

    def __init__(
        self,
        file_path: str | Path | None = None,
        ttl: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the repository. Call ``load()`` to read an existing snapshot.

        Args:
            file_path: Snapshot location. Defaults to settings.
            ttl: Default time-to-live in seconds. Defaults to settings.
            clock: Source of Unix timestamps, injectable for tests.
        """
        self._path = Path(file_path or settings.cache_file_path).expanduser()
        self._ttl = settings.cache_ttl if ttl is None else ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._persist_lock = threading.Lock()

        if self._ttl < 0:
            raise ValueError(f"TTL must be zero or positive, got {self._ttl}")

    @classmethod
    def create(
        cls,
        file_path: str | Path | None = None,
        ttl: int | None = None,
    ) -> "FileCacheRepository":
        """Factory method that also restores the existing snapshot.

        Args:
            file_path: Snapshot location. If None, uses settings.
            ttl: Default entry TTL in seconds. If None, uses settings.

        Returns:
            Loaded FileCacheRepository
        """
        repository = cls(file_path=file_path, ttl=ttl)
        repository.load()
        return repository

    def get(self, key: str) -> CacheEntry | None:
        """Look up a live entry, dropping it if it has expired.

        Args:
            key: The cache key

        Returns:
            The entry, or None if absent or expired
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Store a value and rewrite the snapshot.

        Args:
            key: The cache key
            value: JSON-serializable payload
            ttl_seconds: Lifetime in seconds; None uses the default, 0 never expires

        Raises:
            StoreWriteError: If the snapshot could not be written. The entry
                stays in memory.
        """
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        if ttl < 0:
            raise ValueError(f"TTL must be zero or positive, got {ttl}")

        entry = CacheEntry(key=key, value=value, inserted_at=self._clock(), ttl_seconds=ttl)
        with self._lock:
            self._entries[key] = entry

        self._persist()

    def delete(self, key: str) -> bool:
        """Delete a specific entry by key and rewrite the snapshot.

        Returns:
            True if deleted, False otherwise
        """
        with self._lock:
            removed = self._entries.pop(key, None) is not None

        if removed:
            self._persist()
        return removed

    def clear(self) -> int:
        """Remove every entry and delete the snapshot file.

        Safe to call on an empty store and when no snapshot exists.

        Returns:
            Number of entries removed from memory

        Raises:
            StoreWriteError: If the snapshot exists but cannot be deleted
        """
        with self._persist_lock:
            with self._lock:
                count = len(self._entries)
                self._entries.clear()

            try:
                self._path.unlink(missing_ok=True)
            except OSError as e:
                raise StoreWriteError(f"Failed to delete cache file: {e}", path=str(self._path)) from e

        logger.info("Cache cleared (%d entries, %s)", count, self._path)
        return count

    def snapshot(self) -> dict[str, Any]:
        """Return a key to value mapping of all live entries."""
        with self._lock:
            now = self._clock()
            return {
                key: entry.value
                for key, entry in self._entries.items()
                if not entry.is_expired(now)
            }

    def restore(self, data: Any) -> None:
        """Replace the contents with a snapshot.

        Args:
            data: A mapping produced by ``snapshot()``, or its JSON text/bytes

        Raises:
            StoreReadError: If the data is malformed. The store is left empty.
        """
        if isinstance(data, (str, bytes, bytearray)):
            try:
                data = json.loads(data)
            except ValueError as e:
                self._reset()
                raise StoreReadError(f"Snapshot is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            self._reset()
            raise StoreReadError(
                f"Snapshot must be a JSON object, got {type(data).__name__}"
            )

        bad_keys = [key for key in data if not isinstance(key, str)]
        if bad_keys:
            self._reset()
            raise StoreReadError(f"Snapshot keys must be strings, got {bad_keys[0]!r}")

        now = self._clock()
        entries = {
            key: CacheEntry(key=key, value=value, inserted_at=now, ttl_seconds=self._ttl)
            for key, value in data.items()
        }
        with self._lock:
            self._entries = entries

    def load(self) -> bool:
        """Restore from the snapshot file. Never raises.

        A missing file is an empty cache. An unreadable or corrupt file is
        logged and the store starts empty.

        Returns:
            True if the store reflects the file (or there was none), False otherwise
        """
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.warning("Could not read cache file %s: %s", self._path, e)
            self._reset()
            return False

        try:
            self.restore(raw)
        except StoreReadError as e:
            logger.warning("Ignoring corrupt cache file %s: %s", self._path, e)
            return False

        logger.info("Loaded %d cached entries from %s", self.count_all(), self._path)
        return True

    def count_all(self) -> int:
        """Count live entries."""
        with self._lock:
            now = self._clock()
            return sum(1 for entry in self._entries.values() if not entry.is_expired(now))

    def health_check(self) -> bool:
        """Check if the snapshot directory is writable.

        Returns:
            True if healthy, False otherwise
        """
        directory = self._path.parent
        if directory.exists():
            return os.access(directory, os.W_OK)
        # mkdir happens on first write; it only needs a writable ancestor
        for ancestor in directory.parents:
            if ancestor.exists():
                return os.access(ancestor, os.W_OK)
        return False

    def get_stats(self) -> dict:
        """Get repository statistics.

        Returns:
            Dictionary with stats
        """
        return {
            "total_entries": self.count_all(),
            "ttl": self._ttl,
            "cache_file": str(self._path),
            "persisted": self._path.exists(),
        }

    @property
    def path(self) -> Path:
        """Get the snapshot file path."""
        return self._path

    @property
    def ttl(self) -> int:
        """Get the default entry TTL in seconds."""
        return self._ttl

    def _reset(self) -> None:
        with self._lock:
            self._entries = {}

    def _persist(self) -> None:
        # Snapshot is taken inside the persist lock so the last writer
        # always writes the latest state
        with self._persist_lock:
            try:
                payload = json.dumps(self.snapshot())
            except (TypeError, ValueError) as e:
                raise StoreWriteError(f"Cache value is not JSON-serializable: {e}", path=str(self._path)) from e

            try:
                self._write_atomic(payload)
            except OSError as e:
                raise StoreWriteError(f"Failed to write cache file: {e}", path=str(self._path)) from e

    def _write_atomic(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
