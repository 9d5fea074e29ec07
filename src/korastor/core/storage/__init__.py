"""Key-value persistence: the storage boundary the state store writes through."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class StorageError(Exception):
    """Raised when a key-value read or write fails."""


@runtime_checkable
class KeyValueStore(Protocol):
    """Asynchronous string-blob storage keyed by name.

    The state store only ever reads and writes whole blobs; any failure is
    reported by raising and is treated as "not available" / "not persisted".
    """

    async def get(self, key: str) -> str | None:
        """Return the blob stored under ``key``, or None if absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous blob."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove ``key``. Returns True if something was removed."""
        ...
