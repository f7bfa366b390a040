"""
Storage Services Package

Provides the abstract key-value interface the ledger persists through,
plus in-memory and JSON-file implementations.
"""

from finledger.services.storage.interface import (
    PersistenceStore,
    StorageConnectionError,
    StorageError,
)
from finledger.services.storage.memory import InMemoryStore
from finledger.services.storage.json_file import JsonFileStore

__all__ = [
    # Interface
    "PersistenceStore",
    # Exceptions
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "InMemoryStore",
    "JsonFileStore",
]
