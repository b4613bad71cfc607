"""
Collection index — per-collection metadata record.

Stored as JSON under the bare collection name:

    {"identity": 3, "ids": [1, 2, "0C4E...-..."]}

identity  next auto-increment _id (starts at 1)
ids       live _ids in insertion order; membership here is what makes a
          document exist
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from kvdoc.core.errors import IndexCorruptedError
from kvdoc.store.base import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class CollectionIndex:
    """A snapshot of one collection's index. Load fresh for every operation."""

    storage: KeyValueStore = field(repr=False)
    name: str
    identity: int = 1
    ids: list[int | str] = field(default_factory=list)

    @classmethod
    def load(cls, storage: KeyValueStore, name: str) -> CollectionIndex:
        raw = storage.get(name)
        if raw is None:
            return cls(storage=storage, name=name)

        try:
            data = json.loads(raw)
            return cls(
                storage=storage,
                name=name,
                identity=int(data["identity"]),
                ids=list(data["ids"]),
            )
        except (ValueError, TypeError, KeyError) as e:
            logger.warning(f"Unreadable index record for collection '{name}': {e}")
            raise IndexCorruptedError(
                f"index record for collection '{name}' is unreadable: {e}",
                details={"collection": name},
            ) from e

    def save(self) -> None:
        self.storage.set(self.name, json.dumps(self.to_dict()))
        logger.debug(
            f"Saved index '{self.name}': identity={self.identity} count={len(self.ids)}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {"identity": self.identity, "ids": self.ids}

    def next_identity(self) -> int:
        """Return the current counter value and advance it."""
        value = self.identity
        self.identity += 1
        return value

    def contains(self, document_id: int | str) -> bool:
        return document_id in self.ids

    def append(self, document_id: int | str) -> None:
        self.ids.append(document_id)

    def discard(self, document_id: int | str) -> None:
        if document_id in self.ids:
            self.ids.remove(document_id)

    @property
    def count(self) -> int:
        return len(self.ids)
