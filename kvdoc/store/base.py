"""
Key/value store interface.

Synchronous string-to-string store in the shape of the W3C Web Storage
interface (get / set / remove / length / key / clear). Collections keep
their index records and JSON document bodies here.

Implementations:
    InMemoryStorage — process-local, default when no storage is given
    SQLiteStorage — file-based
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any

# Sentinel pair used to probe foreign storage objects.
_PROBE_KEY = "1E7B9A3B-9D53-469F-BF4E-D056A3BE403C"
_PROBE_VALUE = "3220B380-2E7A-49BD-9A51-44D6408ED989"


class KeyValueStore(ABC):
    """
    Abstract base class for key/value backends.

    Keys and values are plain strings. Serialization is the caller's
    responsibility; kvdoc writes JSON text.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Get a value by key. Returns None if not found."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Set a value. Overwrites if exists."""
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        ...

    @property
    @abstractmethod
    def length(self) -> int:
        """Number of stored entries."""
        ...

    @abstractmethod
    def key(self, index: int) -> str | None:
        """Key at the given position, None when out of range."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every entry."""
        ...

    def close(self) -> None:
        """Release backend resources."""

    def keys(self) -> Iterator[str]:
        """Iterate over the stored keys by position."""
        for i in range(self.length):
            k = self.key(i)
            if k is not None:
                yield k

    def __len__(self) -> int:
        return self.length

    def __enter__(self) -> KeyValueStore:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


def is_valid_storage(storage: Any) -> bool:
    """
    Check that an object behaves like a key/value store.

    Writes and removes a sentinel key, verifying get/length along the
    way. Any exception raised by the probe means the object is unusable.
    """
    if isinstance(storage, KeyValueStore):
        return True

    try:
        storage.remove(_PROBE_KEY)
        length = storage.length
        if isinstance(length, bool) or not isinstance(length, int) or length < 0:
            return False
        storage.set(_PROBE_KEY, _PROBE_VALUE)
        if storage.get(_PROBE_KEY) != _PROBE_VALUE:
            return False
        if storage.length != length + 1:
            return False
        storage.remove(_PROBE_KEY)
        if storage.get(_PROBE_KEY) is not None:
            return False
        if storage.length != length:
            return False
        if not callable(getattr(storage, "key", None)):
            return False
        if not callable(getattr(storage, "clear", None)):
            return False
    except Exception:
        return False

    return True
