from __future__ import annotations

import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

from ..core.exceptions import StorageError
from ..security.cipher import CipherSession, decrypt_fields, encrypt_fields

logger = logging.getLogger(__name__)

_LOCKS: Dict[Path, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    with _LOCKS_GUARD:
        lock = _LOCKS.get(path)
        if lock is None:
            lock = threading.RLock()
            _LOCKS[path] = lock
        return lock


def _inactive_session() -> CipherSession:
    return CipherSession()


class JsonCollectionStore:
    """A flat JSON array on disk, loaded and written back whole.

    Each write is a full read-modify-write cycle serialized by one lock per file.
    Sensitive fields are encrypted on the way out and decrypted on the way in
    using whatever cipher session the provider returns at call time.
    """

    def __init__(
        self,
        path: Path,
        *,
        sensitive_fields: Sequence[str] = (),
        session_provider: Optional[Callable[[], CipherSession]] = None,
    ):
        self._path = Path(path).resolve()
        self._fields = tuple(sensitive_fields)
        self._session_provider = session_provider or _inactive_session
        self._lock = _lock_for(self._path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> List[Dict[str, Any]]:
        with self._lock:
            return self._read(self._session_provider())

    @contextmanager
    def transaction(self) -> Iterator[List[Dict[str, Any]]]:
        """Yield the decrypted rows; whatever is left in the list is written back."""
        with self._lock:
            session = self._session_provider()
            rows = self._read(session)
            yield rows
            self._write(rows, session)

    def migrate(self, previous: CipherSession, current: CipherSession) -> int:
        """Re-serialize every row, decrypting with ``previous`` and encrypting with ``current``."""
        with self._lock:
            rows = self._read(previous)
            self._write(rows, current)
            logger.info("Re-encoded %d rows in %s", len(rows), self._path.name)
            return len(rows)

    def _read(self, session: CipherSession) -> List[Dict[str, Any]]:
        if not self._path.exists():
            return []
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                raw = json.load(fh)
        except (OSError, ValueError) as e:
            logger.error("Failed to read %s: %s", self._path, e)
            raise StorageError(f"Could not read {self._path.name}: {e}") from e

        if not isinstance(raw, list):
            raise StorageError(f"{self._path.name} does not hold a JSON array")
        return [decrypt_fields(row, self._fields, session) for row in raw if isinstance(row, dict)]

    def _write(self, rows: List[Dict[str, Any]], session: CipherSession) -> None:
        payload = [encrypt_fields(row, self._fields, session) for row in rows]
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to write %s: %s", self._path, e)
            raise StorageError(f"Could not write {self._path.name}: {e}") from e


class JsonDocumentStore:
    """A single JSON object on disk (settings)."""

    def __init__(self, path: Path):
        self._path = Path(path).resolve()
        self._lock = _lock_for(self._path)

    def load(self) -> Dict[str, Any]:
        with self._lock:
            if not self._path.exists():
                return {}
            try:
                with self._path.open("r", encoding="utf-8") as fh:
                    raw = json.load(fh)
            except (OSError, ValueError) as e:
                logger.error("Failed to read %s: %s", self._path, e)
                raise StorageError(f"Could not read {self._path.name}: {e}") from e
            return raw if isinstance(raw, dict) else {}

    def save(self, document: Dict[str, Any]) -> None:
        with self._lock:
            tmp_path = self._path.with_name(self._path.name + ".tmp")
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with tmp_path.open("w", encoding="utf-8") as fh:
                    json.dump(document, fh, indent=2, ensure_ascii=False)
                os.replace(tmp_path, self._path)
            except (OSError, TypeError, ValueError) as e:
                logger.error("Failed to write %s: %s", self._path, e)
                raise StorageError(f"Could not write {self._path.name}: {e}") from e
