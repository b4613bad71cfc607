"""
kvdoc exception hierarchy.

Every error in the system inherits from KvDocError.
Usage errors are raised before any storage mutation; state and
integrity errors come from the live store.

Usage:
    try:
        orders.get(1).remove()
    except DocumentNotFoundError as e:
        # Stale handle, someone removed it first
    except KvDocError as e:
        # Handle any kvdoc error
"""

from __future__ import annotations

from typing import Any


class KvDocError(Exception):
    """Base exception for all kvdoc errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ━━━ Usage Errors ━━━


class UsageError(KvDocError):
    """Invalid call — bad argument type or value. Nothing was written."""

    pass


class InvalidIdentifierError(UsageError):
    """Document _id is not a natural number or a UUID v4."""

    pass


class InvalidDocumentError(UsageError):
    """Document or update payload is not a JSON-compatible mapping."""

    pass


class InvalidCriterionError(UsageError):
    """Query criterion is neither a mapping nor a callable."""

    pass


class InvalidSortError(UsageError):
    """Sort expression is malformed."""

    pass


class InvalidCollectionError(UsageError):
    """Collection name list is empty or holds an unusable name."""

    pass


class InvalidStorageError(UsageError):
    """Storage handle does not implement the key/value contract."""

    pass


# ━━━ State Errors ━━━


class DocumentNotFoundError(KvDocError):
    """Document is no longer listed in its collection's index."""

    def __init__(
        self,
        message: str,
        document_id: Any = None,
        collection: str = "",
        details: dict | None = None,
    ):
        self.document_id = document_id
        self.collection = collection
        super().__init__(message, details)


# ━━━ Integrity / Backend Errors ━━━


class IndexCorruptedError(KvDocError):
    """Index and stored documents disagree, or the index is unreadable."""

    pass


class StorageError(KvDocError):
    """Storage backend failure — database errors, corruption, etc."""

    pass


class ConfigError(KvDocError):
    """Configuration is invalid, missing, or malformed."""

    pass
