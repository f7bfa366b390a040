"""Services package."""

from finledger.services.storage import (
    InMemoryStore,
    JsonFileStore,
    PersistenceStore,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    "InMemoryStore",
    "JsonFileStore",
    "PersistenceStore",
    "StorageConnectionError",
    "StorageError",
]
