"""
Collection — CRUD over one named set of documents.

Storage layout inside the key/value store:

    <name>            index record (see CollectionIndex)
    <name>-<int id>   document body for auto-increment ids
    <uuid>            document body for UUID ids

Every call re-reads the index; nothing is cached between calls.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from kvdoc.core.errors import (
    IndexCorruptedError,
    InvalidCriterionError,
    InvalidDocumentError,
    InvalidIdentifierError,
)
from kvdoc.engine.cursor import Cursor
from kvdoc.engine.document import ID_FIELD, Document, encode_document
from kvdoc.engine.ids import (
    UUID_SENTINEL,
    generate_uuid_v4,
    is_uuid_v4,
    validate_document_id,
)
from kvdoc.engine.index import CollectionIndex
from kvdoc.engine.query import filter_documents, resolve_criterion
from kvdoc.store.base import KeyValueStore

logger = logging.getLogger(__name__)


class Collection:
    """
    A named collection — analogous to a table.

    Usage:
        orders = Collection(storage, "orders")

        order = orders.insert({"recipient": "Juan", "total": 50})   # _id 1
        orders.insert({"_id": "uuid", "recipient": "Ana"})          # UUID _id

        orders.get(1)
        orders.find({"recipient": "Juan"}).count()
        orders.find(lambda d: d["total"] > 20).sort("total DESC")
        orders.update({"recipient": "Juan"}, {"status": "Delivered"})
        orders.remove({"_id": 1})
    """

    def __init__(self, storage: KeyValueStore, name: str) -> None:
        self._storage = storage
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def __len__(self) -> int:
        return self.count()

    def __repr__(self) -> str:
        return f"Collection({self._name!r})"

    # ━━━ Internal ━━━

    def _key(self, document_id: int | str) -> str:
        if is_uuid_v4(document_id):
            return document_id  # type: ignore[return-value]
        return f"{self._name}-{document_id}"

    def _load_index(self) -> CollectionIndex:
        return CollectionIndex.load(self._storage, self._name)

    def _wrap(self, fields: dict[str, Any]) -> Document:
        return Document(fields, self._storage, self._load_index, self._key, self._name)

    # ━━━ CRUD ━━━

    def insert(self, document: Mapping[str, Any]) -> Document:
        """
        Store a new document and return its handle.

        Omit _id for the next auto-increment value, or pass ``_id="uuid"``
        for a generated UUID. Any other _id is rejected. The input mapping
        is copied, not modified.
        """
        path = "Collection.insert()"
        if not isinstance(document, Mapping):
            raise InvalidDocumentError(
                f"{path}, invalid document, expecting mapping, got {type(document).__name__}"
            )

        fields = dict(document)
        use_uuid = ID_FIELD in fields
        if use_uuid and fields[ID_FIELD] != UUID_SENTINEL:
            raise InvalidIdentifierError(
                f"{path}, invalid _id value {fields[ID_FIELD]!r}, only '{UUID_SENTINEL}' is allowed",
                details={"value": repr(fields[ID_FIELD])},
            )

        # Validate the body before the counter moves
        encode_document({k: v for k, v in fields.items() if k != ID_FIELD}, path)

        index = self._load_index()
        fields[ID_FIELD] = generate_uuid_v4() if use_uuid else index.next_identity()

        self._storage.set(self._key(fields[ID_FIELD]), encode_document(fields, path))
        index.append(fields[ID_FIELD])
        index.save()

        logger.debug(f"Inserted {self._name}:{fields[ID_FIELD]!r}")
        return self._wrap(fields)

    def get(self, document_id: int | str) -> Document | None:
        """
        Fetch by _id; None when no such document is stored.

        UUID bodies sit under the bare UUID, a key every collection shares,
        so a UUID must also be listed in this collection's index.
        """
        document_id = validate_document_id(document_id, "document_id", "Collection.get()")
        if is_uuid_v4(document_id) and not self._load_index().contains(document_id):
            return None
        return self._read(document_id)

    def _read(self, document_id: int | str) -> Document | None:
        raw = self._storage.get(self._key(document_id))
        if raw is None:
            return None
        try:
            fields = json.loads(raw)
        except ValueError as e:
            raise IndexCorruptedError(
                f"document {self._name}:{document_id!r} is not valid JSON: {e}",
                details={"collection": self._name, "document_id": document_id},
            ) from e
        return self._wrap(fields)

    def find(self, criterion: Any = None) -> Cursor:
        """All documents in insertion order, filtered by ``criterion`` if given."""
        resolved = resolve_criterion(criterion, "criterion", "Collection.find()")

        documents = []
        for document_id in self._load_index().ids:
            document = self._read(document_id)
            if document is None:
                logger.warning(
                    f"Index for '{self._name}' lists _id {document_id!r} but its body is missing"
                )
                raise IndexCorruptedError(
                    f"index for collection '{self._name}' lists _id:{document_id} "
                    f"but the document is missing from storage",
                    details={"collection": self._name, "document_id": document_id},
                )
            documents.append(document)

        if resolved is not None:
            documents = filter_documents(documents, resolved)
        return Cursor(documents)

    def find_one(self, criterion: Any = None) -> Document | None:
        return self.find(criterion).first()

    def count(self) -> int:
        """Number of live documents, read from the index without a scan."""
        return self._load_index().count

    def update(self, criterion: Any, fields: Mapping[str, Any]) -> Cursor:
        """Merge ``fields`` into every document matching ``criterion``."""
        path = "Collection.update()"
        if criterion is None:
            raise InvalidCriterionError(f"{path}, criterion can't be None")
        resolved = resolve_criterion(criterion, "criterion", path)
        if not isinstance(fields, Mapping):
            raise InvalidDocumentError(
                f"{path}, invalid fields, expecting mapping, got {type(fields).__name__}"
            )
        encode_document(fields, path)

        return self.find(resolved).update(fields)

    def remove(self, criterion: Any = None) -> int:
        """Remove matching documents (all of them when no criterion). Returns how many."""
        resolved = resolve_criterion(criterion, "criterion", "Collection.remove()")
        removed = self.find(resolved).remove()
        logger.debug(f"Removed {removed} document(s) from '{self._name}'")
        return removed
