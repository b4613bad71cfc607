"""Tests for Document handles."""

import json

import pytest
from kvdoc.core.errors import DocumentNotFoundError, InvalidDocumentError, UsageError


def test_document_reads_like_a_mapping(orders):
    order = orders.insert({"recipient": "Juan", "total": 50})

    assert order["recipient"] == "Juan"
    assert order.get("missing") is None
    assert "total" in order
    assert order.id == 1
    assert dict(order) == {"recipient": "Juan", "total": 50, "_id": 1}
    assert len(order) == 3


def test_update_with_payload_persists(orders, storage):
    order = orders.insert({"recipient": "Juan", "total": 50})

    returned = order.update({"status": "Delivered", "total": 60})

    assert returned is order
    assert order["status"] == "Delivered"
    assert json.loads(storage.get("orders-1")) == {
        "recipient": "Juan",
        "total": 60,
        "_id": 1,
        "status": "Delivered",
    }


def test_update_ignores_id(orders):
    order = orders.insert({"recipient": "Juan"})

    order.update({"_id": 99, "recipient": "Ana"})

    assert order.id == 1
    assert orders.get(1)["recipient"] == "Ana"
    assert orders.get(99) is None


def test_update_without_payload_persists_direct_edits(orders):
    order = orders.insert({"recipient": "Juan"})

    order["status"] = "Delivered"
    del order["recipient"]
    order.update()

    assert dict(orders.get(1)) == {"_id": 1, "status": "Delivered"}


def test_direct_id_mutation_is_rejected(orders):
    order = orders.insert({"recipient": "Juan"})
    with pytest.raises(UsageError):
        order["_id"] = 5
    with pytest.raises(UsageError):
        del order["_id"]


def test_update_rejects_non_mapping(orders):
    order = orders.insert({"recipient": "Juan"})
    with pytest.raises(InvalidDocumentError, match="expecting mapping"):
        order.update(["status", "x"])


def test_update_rejects_unserializable_without_writing(orders, storage):
    order = orders.insert({"recipient": "Juan"})
    before = storage.get("orders-1")

    with pytest.raises(InvalidDocumentError, match="JSON-serializable"):
        order.update({"when": object()})

    assert storage.get("orders-1") == before
    assert "when" not in order


def test_remove_deletes_blob_and_index_entry(orders, storage):
    order = orders.insert({"recipient": "Juan"})
    orders.insert({"recipient": "Ana"})

    order.remove()

    assert order.is_removed
    assert storage.get("orders-1") is None
    assert json.loads(storage.get("orders"))["ids"] == [2]
    assert orders.count() == 1


def test_remove_twice_fails_and_count_unchanged(orders):
    order = orders.insert({"recipient": "Juan"})
    orders.insert({"recipient": "Ana"})
    order.remove()

    with pytest.raises(DocumentNotFoundError, match="_id:1 doesn't exist") as exc:
        order.remove()

    assert exc.value.document_id == 1
    assert exc.value.collection == "orders"
    assert orders.count() == 1


def test_update_after_remove_fails(orders):
    order = orders.insert({"recipient": "Juan"})
    order.remove()

    with pytest.raises(DocumentNotFoundError):
        order.update({"status": "Delivered"})
    with pytest.raises(DocumentNotFoundError):
        order.update()


def test_stale_handle_from_other_lookup_fails(orders):
    orders.insert({"recipient": "Juan"})
    first = orders.get(1)
    second = orders.get(1)

    first.remove()

    with pytest.raises(DocumentNotFoundError):
        second.update({"status": "x"})
    # Stale fields are still readable
    assert second["recipient"] == "Juan"


def test_render_is_pretty_json(orders):
    order = orders.insert({"recipient": "Juan"})
    assert json.loads(order.render()) == {"recipient": "Juan", "_id": 1}
    assert "\t" in order.render()


def test_to_dict_is_detached(orders):
    order = orders.insert({"tags": ["a"]})
    copy = order.to_dict()
    copy["tags"].append("b")
    assert order["tags"] == ["a"]


def test_uuid_document_uses_uuid_key(orders, storage):
    order = orders.insert({"_id": "uuid", "recipient": "Ana"})
    order.update({"status": "Delivered"})
    assert json.loads(storage.get(order.id))["status"] == "Delivered"
