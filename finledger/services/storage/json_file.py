"""
JSON File Storage Implementation

All keys live in a single JSON object on disk:

    {"finances_accounts": "[...]", "finances_transactions": "[...]", ...}

Values are the raw strings handed to `set`, so the file mirrors a
browser-style local store exactly.

TRADEOFFS:
- Every `set` rewrites the whole file (fine for personal-scale data)
- Writes go to a temporary file first and are moved into place, so a
  crash never leaves a half-written store behind
- Single writer only; the last process to write wins
"""

import json
import os
from pathlib import Path
from typing import Optional

from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finledger.services.storage.interface import (
    PersistenceStore,
    StorageConnectionError,
    StorageError,
)


class JsonFileStore(PersistenceStore):
    """
    File-backed key-value store.

    The file is read lazily on first access and cached; writes update the
    cache and flush the full mapping to disk.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._cache: Optional[dict[str, str]] = None

    def _load(self) -> dict[str, str]:
        if self._cache is None:
            if not self._path.exists():
                self._cache = {}
            else:
                try:
                    raw = self._path.read_text(encoding="utf-8")
                except OSError as e:
                    raise StorageConnectionError(f"Cannot read store file {self._path}: {e}")
                # A corrupt file is surfaced to the ledger as missing keys;
                # the ledger reseeds and rewrites it.
                try:
                    data = json.loads(raw) if raw.strip() else {}
                except json.JSONDecodeError:
                    data = {}
                if not isinstance(data, dict):
                    data = {}
                self._cache = {str(k): v for k, v in data.items() if isinstance(v, str)}
        return self._cache

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
        retry=retry_if_exception_type(OSError),
    )
    def _flush(self, data: dict[str, str]) -> None:
        """Atomically replace the store file with the given mapping."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, self._path)

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = dict(self._load())
        data[key] = value
        try:
            self._flush(data)
        except RetryError as e:
            raise StorageError(f"Failed to write store file {self._path}: {e.last_attempt.exception()}")
        self._cache = data
