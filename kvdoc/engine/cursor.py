"""
Cursor — an ordered batch of Documents returned by a query.

A cursor is a snapshot: later writes to the store don't show up until
you query again. Reading operations (find, sort) return a new Cursor;
update and remove write through every Document it holds.

Usage:
    delivered = db.orders.find({"status": "Delivered"})
    delivered.count()
    delivered.sort("total DESC").first()
    delivered.find(lambda d: d["total"] > 700).update({"vip": True})
    delivered.remove()
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, overload

from kvdoc.core.errors import InvalidDocumentError
from kvdoc.engine.document import ID_FIELD, Document
from kvdoc.engine.ids import validate_document_id
from kvdoc.engine.query import (
    filter_documents,
    first_of,
    last_of,
    render_json,
    resolve_criterion,
    sort_documents,
)

logger = logging.getLogger(__name__)


class Cursor:
    """Immutable, ordered sequence of Document handles."""

    __slots__ = ("_documents",)

    def __init__(self, documents: Iterable[Document] = ()) -> None:
        self._documents: tuple[Document, ...] = tuple(documents)

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents)

    @overload
    def __getitem__(self, index: int) -> Document: ...

    @overload
    def __getitem__(self, index: slice) -> Cursor: ...

    def __getitem__(self, index: int | slice) -> Document | Cursor:
        if isinstance(index, slice):
            return Cursor(self._documents[index])
        return self._documents[index]

    def __bool__(self) -> bool:
        return bool(self._documents)

    def __repr__(self) -> str:
        return f"<Cursor count={len(self._documents)}>"

    # ━━━ Writes ━━━

    def update(self, fields: Mapping[str, Any] | None = None) -> Cursor:
        """Apply ``fields`` to every document (or re-persist them as-is)."""
        if fields is not None and not isinstance(fields, Mapping):
            raise InvalidDocumentError(
                f"Cursor.update(), invalid fields, expecting mapping, got {type(fields).__name__}"
            )
        for document in self._documents:
            document.update(fields)
        return self

    def remove(self) -> int:
        """Remove every document, then empty this cursor. Returns how many."""
        removed = 0
        for document in self._documents:
            document.remove()
            removed += 1
        self._documents = ()
        logger.debug(f"Cursor removed {removed} document(s)")
        return removed

    # ━━━ Reads ━━━

    def get(self, document_id: int | str) -> Document | None:
        """Find by _id among this cursor's documents only."""
        document_id = validate_document_id(document_id, "document_id", "Cursor.get()")
        return self.find_one({ID_FIELD: document_id})

    def find(self, criterion: Any = None) -> Cursor:
        resolved = resolve_criterion(criterion, "criterion", "Cursor.find()")
        return Cursor(filter_documents(self._documents, resolved))

    def find_one(self, criterion: Any = None) -> Document | None:
        resolved = resolve_criterion(criterion, "criterion", "Cursor.find_one()")
        return first_of(filter_documents(self._documents, resolved))

    def sort(self, expression: str) -> Cursor:
        return Cursor(sort_documents(self._documents, expression))

    def first(self) -> Document | None:
        return first_of(self._documents)

    def last(self) -> Document | None:
        return last_of(self._documents)

    def count(self) -> int:
        return len(self._documents)

    def to_list(self) -> list[dict[str, Any]]:
        """Detached copies of every document's fields."""
        return [document.to_dict() for document in self._documents]

    def render(self) -> str:
        """Pretty JSON array of the documents."""
        return render_json([dict(document) for document in self._documents])
