"""Shared test fixtures for kvdoc."""

import pytest
from kvdoc.database import DocumentStore
from kvdoc.engine.collection import Collection
from kvdoc.store.memory import InMemoryStorage


@pytest.fixture
def storage():
    """A fresh in-memory key/value store."""
    return InMemoryStorage()


@pytest.fixture
def db(storage):
    """A store with two collections over the shared in-memory backend."""
    return DocumentStore(storage, ["orders", "users"])


@pytest.fixture
def orders(db) -> Collection:
    return db.orders


@pytest.fixture
def seeded(orders) -> Collection:
    """Orders collection with four documents, _ids 1..4."""
    orders.insert({"recipient": "Juan", "seller": "Armani", "total": 50, "status": "Pending"})
    orders.insert({"recipient": "Ana", "seller": "Gucci", "total": 70, "status": "Delivered"})
    orders.insert({"recipient": "Juan", "seller": "Gucci", "total": 900, "status": "Delivered"})
    orders.insert({"recipient": "Luis", "seller": "Armani", "total": 700, "status": "Pending"})
    return orders
