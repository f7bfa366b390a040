"""
Abstract Storage Interface

DESIGN DECISION: The ledger persists through a deliberately tiny
key-value contract: get a string by key, set a string by key.
This allows us to:
1. Use in-memory storage for testing
2. Back the ledger with a JSON file, a browser-like local store or a
   database table without changing ledger code
3. Keep ledger logic decoupled from storage implementation

Stores are synchronous. A `set` either completes or raises; readers never
observe a partially written value.
"""

from abc import ABC, abstractmethod
from typing import Optional


class PersistenceStore(ABC):
    """
    Abstract string key-value store.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: Storage key
            value: Serialized value

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass
