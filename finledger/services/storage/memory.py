"""In-memory key-value store, used by tests and ephemeral sessions."""

from typing import Optional

from finledger.services.storage.interface import PersistenceStore


class InMemoryStore(PersistenceStore):
    """Dictionary-backed store. Contents are lost when the process exits."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def keys(self) -> list[str]:
        return list(self._data)
