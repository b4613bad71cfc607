"""
DocumentStore — binds one key/value backend to a set of named collections.

Usage:
    # In memory
    db = DocumentStore(None, ["orders", "users"])

    # Persistent
    db = DocumentStore(SQLiteStorage("~/.kvdoc/store.db"), "orders")

    db.orders.insert({"recipient": "Juan", "total": 50})
    db["users"].find()
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from kvdoc.core.config import KvDocConfig
from kvdoc.core.errors import InvalidCollectionError, InvalidStorageError
from kvdoc.engine.collection import Collection
from kvdoc.engine.ids import is_valid_collection_name
from kvdoc.store.base import KeyValueStore, is_valid_storage
from kvdoc.store.factory import create_storage
from kvdoc.store.memory import InMemoryStorage

logger = logging.getLogger(__name__)

# Instance attribute names, unusable as collection names.
_RESERVED = ("_storage", "_collections")


class DocumentStore:
    """
    Entry point. Each collection name becomes an attribute.

    Args:
        storage: A KeyValueStore (or any object with the same get / set /
            remove / length / key / clear surface). None selects a fresh
            InMemoryStorage.
        collections: One collection name or a list of names. Names must be
            identifier tokens and can't shadow DocumentStore attributes.

    Raises:
        InvalidStorageError: storage doesn't behave like a key/value store
        InvalidCollectionError: empty list, non-string or unusable name
    """

    def __init__(self, storage: KeyValueStore | None, collections: str | list[str] | tuple[str, ...]) -> None:
        path = "DocumentStore()"

        if storage is not None and not is_valid_storage(storage):
            raise InvalidStorageError(
                f"{path}, invalid storage, expecting key/value storage object"
            )

        names = [collections] if isinstance(collections, str) else collections
        if not isinstance(names, (list, tuple)):
            raise InvalidCollectionError(
                f"{path}, invalid collections, expecting str or list of str"
            )
        if not names:
            raise InvalidCollectionError(f"{path}, invalid collections, list can't be empty")
        for name in names:
            if not isinstance(name, str):
                raise InvalidCollectionError(
                    f"{path}, invalid collections, expecting str or list of str"
                )
        for name in names:
            if not is_valid_collection_name(name) or hasattr(DocumentStore, name) or name in _RESERVED:
                raise InvalidCollectionError(
                    f"{path}, invalid collections, '{name}' is an invalid collection name"
                )

        self._storage: KeyValueStore = storage if storage is not None else InMemoryStorage()
        self._collections: dict[str, Collection] = {}
        for name in names:
            if name not in self._collections:
                self._collections[name] = Collection(self._storage, name)

        logger.debug(f"DocumentStore ready: collections={list(self._collections)}")

    @classmethod
    def from_config(cls, config: KvDocConfig, collections: str | list[str]) -> DocumentStore:
        """Open the backend described by ``config.storage``."""
        return cls(create_storage(config.storage), collections)

    def __getattr__(self, name: str) -> Collection:
        # Only reached when normal lookup fails
        collections = self.__dict__.get("_collections", {})
        if name in collections:
            return collections[name]
        raise AttributeError(f"{type(self).__name__!r} has no collection {name!r}")

    def __getitem__(self, name: str) -> Collection:
        try:
            return self._collections[name]
        except KeyError:
            raise KeyError(f"no collection named {name!r}") from None

    def __contains__(self, name: Any) -> bool:
        return name in self._collections

    def __iter__(self) -> Iterator[str]:
        return iter(self._collections)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._collections))

    def __repr__(self) -> str:
        return f"DocumentStore({self._storage!r}, {list(self._collections)!r})"

    @property
    def storage(self) -> KeyValueStore:
        return self._storage

    @property
    def collection_names(self) -> list[str]:
        return list(self._collections)

    def close(self) -> None:
        # Duck-typed backends need not have close()
        close = getattr(self._storage, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> DocumentStore:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
