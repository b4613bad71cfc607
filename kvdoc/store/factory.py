"""Build a key/value backend from configuration."""

from __future__ import annotations

import logging

from kvdoc.core.config import StorageConfig
from kvdoc.core.errors import ConfigError
from kvdoc.store.base import KeyValueStore
from kvdoc.store.memory import InMemoryStorage
from kvdoc.store.sqlite import SQLiteStorage

logger = logging.getLogger(__name__)


def create_storage(config: StorageConfig) -> KeyValueStore:
    """Create the backend named by ``config.backend``."""
    if config.backend == "memory":
        logger.debug("Using in-memory storage")
        return InMemoryStorage()
    if config.backend == "sqlite":
        path = config.resolved_path()
        logger.debug(f"Using SQLite storage at {path}")
        return SQLiteStorage(path)
    raise ConfigError(f"Unknown storage backend '{config.backend}'")
