"""
In-memory storage backend — the default when no storage is given.

Simple dict-based storage. Data lost when process exits.
"""

from __future__ import annotations

from kvdoc.store.base import KeyValueStore


class InMemoryStorage(KeyValueStore):
    """
    In-memory key/value store.

    Keys enumerate in insertion order.

    Usage:
        storage = InMemoryStorage()
        storage.set("key", "value")
        assert storage.get("key") == "value"
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(str(key))

    def set(self, key: str, value: str) -> None:
        self._data[str(key)] = str(value)

    def remove(self, key: str) -> None:
        self._data.pop(str(key), None)

    @property
    def length(self) -> int:
        return len(self._data)

    def key(self, index: int) -> str | None:
        keys = list(self._data)
        if 0 <= index < len(keys):
            return keys[index]
        return None

    def clear(self) -> None:
        self._data.clear()

    def __repr__(self) -> str:
        return f"InMemoryStorage(length={len(self._data)})"
