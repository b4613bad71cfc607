"""
kvdoc — a MongoDB-like document store over any key/value string store.

Public API:
    from kvdoc import DocumentStore, InMemoryStorage, SQLiteStorage
"""

__version__ = "0.1.0"

# Facade
from kvdoc.database import DocumentStore

# Engine
from kvdoc.engine.collection import Collection
from kvdoc.engine.cursor import Cursor
from kvdoc.engine.document import Document

# Storage
from kvdoc.store.base import KeyValueStore, is_valid_storage
from kvdoc.store.memory import InMemoryStorage
from kvdoc.store.sqlite import SQLiteStorage

# Config & errors
from kvdoc.core.config import KvDocConfig
from kvdoc.core.errors import (
    DocumentNotFoundError,
    IndexCorruptedError,
    KvDocError,
    StorageError,
    UsageError,
)

__all__ = [
    # Facade
    "DocumentStore",
    # Engine
    "Collection",
    "Cursor",
    "Document",
    # Storage
    "KeyValueStore",
    "is_valid_storage",
    "InMemoryStorage",
    "SQLiteStorage",
    # Config & errors
    "KvDocConfig",
    "KvDocError",
    "UsageError",
    "DocumentNotFoundError",
    "IndexCorruptedError",
    "StorageError",
]
