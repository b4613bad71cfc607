"""Tests for Cursor."""

import json

import pytest
from kvdoc.core.errors import InvalidCriterionError, InvalidDocumentError, InvalidIdentifierError, InvalidSortError
from kvdoc.engine.cursor import Cursor


def ids(cursor):
    return [d.id for d in cursor]


def test_cursor_sequence_protocol(seeded):
    cursor = seeded.find()
    assert len(cursor) == 4
    assert cursor.count() == 4
    assert cursor[0].id == 1
    assert cursor[-1].id == 4
    assert ids(cursor[1:3]) == [2, 3]
    assert isinstance(cursor[1:3], Cursor)
    assert bool(Cursor()) is False


def test_find_returns_new_cursor(seeded):
    cursor = seeded.find()
    juan = cursor.find({"recipient": "Juan"})

    assert juan is not cursor
    assert ids(juan) == [1, 3]
    assert cursor.count() == 4


def test_find_with_predicate(seeded):
    big = seeded.find().find(lambda d: d["total"] >= 700)
    assert ids(big) == [3, 4]


def test_find_one(seeded):
    cursor = seeded.find()
    assert cursor.find_one({"seller": "Gucci"}).id == 2
    assert cursor.find_one({"seller": "Prada"}) is None
    assert cursor.find_one().id == 1


def test_find_rejects_bad_criterion(seeded):
    with pytest.raises(InvalidCriterionError):
        seeded.find().find("Juan")


def test_sort_returns_new_cursor(seeded):
    cursor = seeded.find()
    by_total = cursor.sort("total DESC")

    assert ids(by_total) == [3, 4, 2, 1]
    assert ids(cursor) == [1, 2, 3, 4]


def test_sort_rejects_malformed_expression(seeded):
    with pytest.raises(InvalidSortError):
        seeded.find().sort("total SIDEWAYS")


def test_chained_sort_multi_key(seeded):
    result = seeded.find().sort("seller ASC, total DESC")
    assert ids(result) == [4, 1, 3, 2]


def test_first_and_last(seeded):
    cursor = seeded.find().sort("total")
    assert cursor.first()["total"] == 50
    assert cursor.last()["total"] == 900
    assert Cursor().first() is None
    assert Cursor().last() is None


def test_get_searches_only_this_cursor(seeded):
    juan = seeded.find({"recipient": "Juan"})
    assert juan.get(3).id == 3
    assert juan.get(2) is None


def test_get_validates_id(seeded):
    with pytest.raises(InvalidIdentifierError):
        seeded.find().get("two")


def test_update_applies_to_all_and_returns_self(seeded):
    pending = seeded.find({"status": "Pending"})

    returned = pending.update({"status": "Shipped"})

    assert returned is pending
    assert all(d["status"] == "Shipped" for d in pending)
    assert ids(seeded.find({"status": "Shipped"})) == [1, 4]
    assert seeded.find({"status": "Delivered"}).count() == 2


def test_update_rejects_non_mapping(seeded):
    with pytest.raises(InvalidDocumentError):
        seeded.find().update("Shipped")


def test_remove_empties_cursor_and_collection(seeded):
    gucci = seeded.find({"seller": "Gucci"})

    removed = gucci.remove()

    assert removed == 2
    assert gucci.count() == 0
    assert seeded.count() == 2
    assert ids(seeded.find()) == [1, 4]


def test_snapshot_does_not_see_later_writes(seeded):
    cursor = seeded.find()
    seeded.insert({"recipient": "Eva", "total": 1})
    assert cursor.count() == 4
    assert seeded.find().count() == 5


def test_render_and_to_list(seeded):
    cursor = seeded.find({"recipient": "Ana"})
    assert json.loads(cursor.render()) == cursor.to_list()
    assert cursor.to_list()[0]["_id"] == 2
