"""
Document — a live handle to one stored record.

Documents come from a Collection (insert, get, find, find_one) or from a
Cursor; don't build them yourself.

Usage:
    order = db.orders.insert({"recipient": "Juan", "total": 50})

    # Update with a payload
    order.update({"status": "Delivered"})

    # Or mutate fields, then persist as-is
    order["status"] = "Delivered"
    order.update()

    order.remove()
    order.update()  # raises DocumentNotFoundError, the handle is spent
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from kvdoc.core.errors import DocumentNotFoundError, InvalidDocumentError, UsageError
from kvdoc.engine.index import CollectionIndex
from kvdoc.engine.query import render_json
from kvdoc.store.base import KeyValueStore

logger = logging.getLogger(__name__)

ID_FIELD = "_id"


def encode_document(fields: Mapping[str, Any], path: str) -> str:
    """JSON-encode a document body, rejecting anything JSON can't hold."""
    try:
        return json.dumps(fields, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise InvalidDocumentError(f"{path}, document is not JSON-serializable: {e}") from e


class Document(Mapping[str, Any]):
    """
    Read it like a dict; write through update() and remove().

    Holds the record's fields plus the collaborators needed to persist
    them: the storage handle, a loader for the owning collection's index,
    and the function that maps an _id to its storage key.
    """

    __slots__ = ("_fields", "_storage", "_load_index", "_key_for", "_collection", "_removed")

    def __init__(
        self,
        fields: dict[str, Any],
        storage: KeyValueStore,
        load_index: Callable[[], CollectionIndex],
        key_for: Callable[[int | str], str],
        collection: str = "",
    ) -> None:
        self._fields = fields
        self._storage = storage
        self._load_index = load_index
        self._key_for = key_for
        self._collection = collection
        self._removed = False

    # ━━━ Mapping ━━━

    def __getitem__(self, name: str) -> Any:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __setitem__(self, name: str, value: Any) -> None:
        if name == ID_FIELD:
            raise UsageError("Document._id can't be modified")
        self._fields[name] = value

    def __delitem__(self, name: str) -> None:
        if name == ID_FIELD:
            raise UsageError("Document._id can't be removed")
        del self._fields[name]

    def __repr__(self) -> str:
        state = " removed" if self._removed else ""
        return f"<Document {self._collection}:{self.id!r}{state} {self._fields!r}>"

    @property
    def id(self) -> int | str:
        return self._fields[ID_FIELD]

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def is_removed(self) -> bool:
        return self._removed

    def to_dict(self) -> dict[str, Any]:
        """Deep copy of the fields, detached from this handle."""
        return copy.deepcopy(self._fields)

    # ━━━ Persistence ━━━

    def update(self, fields: Mapping[str, Any] | None = None) -> Document:
        """
        Persist this document, optionally merging ``fields`` first.

        _id in ``fields`` is ignored. Raises DocumentNotFoundError when the
        document has been removed.
        """
        path = "Document.update()"

        merged = self._fields
        if fields is not None:
            if not isinstance(fields, Mapping):
                raise InvalidDocumentError(
                    f"{path}, invalid fields, expecting mapping, got {type(fields).__name__}"
                )
            merged = dict(self._fields)
            merged.update((k, v) for k, v in fields.items() if k != ID_FIELD)

        body = encode_document(merged, path)
        self._ensure_listed(path)

        self._storage.set(self._key_for(self.id), body)
        if merged is not self._fields:
            self._fields.clear()
            self._fields.update(merged)
        logger.debug(f"Updated {self._collection}:{self.id!r}")
        return self

    def remove(self) -> None:
        """Delete this document and drop its _id from the collection index."""
        path = "Document.remove()"

        index = self._ensure_listed(path)

        self._storage.remove(self._key_for(self.id))
        index.discard(self.id)
        index.save()
        self._removed = True
        logger.debug(f"Removed {self._collection}:{self.id!r}")

    def render(self) -> str:
        """Pretty JSON of the fields."""
        return render_json(self._fields)

    def _ensure_listed(self, path: str) -> CollectionIndex:
        index = self._load_index()
        if self._removed or not index.contains(self.id):
            raise DocumentNotFoundError(
                f"{path}, _id:{self.id} doesn't exist",
                document_id=self.id,
                collection=self._collection,
            )
        return index
