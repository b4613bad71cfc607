"""
Query engine — pure functions over sequences of mappings.

Criteria come in two shapes, resolved once at the boundary:

    EqualityMap   {"status": "Delivered", "seller": "Armani"}
    Predicate     lambda doc: doc["total"] > 700

Sort expressions are comma-separated ``field [ASC|DESC]`` clauses:

    "seller"
    "seller, total"
    "seller ASC, total DESC"

None of these functions mutate their input; each returns a new list.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar, Union

from kvdoc.core.errors import InvalidCriterionError, InvalidSortError

T = TypeVar("T")

_MISSING = object()


# ━━━ Criteria ━━━


@dataclass(frozen=True, slots=True)
class EqualityMap:
    """Every declared field must be present and strictly equal."""

    fields: Mapping[str, Any]

    def matches(self, element: Mapping[str, Any]) -> bool:
        for name, expected in self.fields.items():
            actual = element.get(name, _MISSING)
            if actual is _MISSING or not strict_equals(actual, expected):
                return False
        return True


@dataclass(frozen=True, slots=True)
class Predicate:
    """Keep elements for which the function returns exactly True."""

    func: Callable[[Any], Any]

    def matches(self, element: Any) -> bool:
        return self.func(element) is True


Criterion = Union[EqualityMap, Predicate]


def resolve_criterion(criterion: Any, name: str = "criterion", path: str = "") -> Criterion | None:
    """Turn a mapping, callable or None into a Criterion."""
    if criterion is None or isinstance(criterion, (EqualityMap, Predicate)):
        return criterion
    if isinstance(criterion, Mapping):
        return EqualityMap(dict(criterion))
    if callable(criterion):
        return Predicate(criterion)
    prefix = f"{path}, " if path else ""
    raise InvalidCriterionError(
        f"{prefix}invalid {name}, expecting mapping or callable, "
        f"got {type(criterion).__name__}"
    )


def strict_equals(a: Any, b: Any) -> bool:
    """Value equality that never treats booleans as numbers."""
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


def filter_documents(sequence: Sequence[T], criterion: Any = None) -> list[T]:
    """Return the elements matching ``criterion``, in their original order."""
    resolved = resolve_criterion(criterion)
    if resolved is None:
        return list(sequence)
    return [element for element in sequence if resolved.matches(element)]


# ━━━ Sorting ━━━


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True, slots=True)
class SortClause:
    field: str
    direction: SortDirection = SortDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC


def parse_sort_expression(expression: Any) -> list[SortClause]:
    """Parse ``"a ASC, b DESC"`` into clauses, primary first."""
    if not isinstance(expression, str):
        raise InvalidSortError(
            f"invalid sort expression, expecting string, got {type(expression).__name__}"
        )
    if not expression.strip():
        raise InvalidSortError("sort expression can't be empty")

    clauses = []
    for raw in expression.split(","):
        tokens = raw.split()
        if not tokens or len(tokens) > 2:
            raise InvalidSortError(f"malformed sort clause {raw.strip()!r} in {expression!r}")
        direction = SortDirection.ASC
        if len(tokens) == 2:
            try:
                direction = SortDirection(tokens[1].upper())
            except ValueError:
                raise InvalidSortError(
                    f"unknown sort direction {tokens[1]!r}, expecting ASC or DESC"
                ) from None
        clauses.append(SortClause(tokens[0], direction))
    return clauses


def _sort_key(value: Any) -> tuple:
    # Type rank first:
    # missing < null < numbers < strings < lists < objects
    if value is _MISSING:
        return (0,)
    if value is None:
        return (1,)
    if isinstance(value, (bool, int, float)):
        return (2, value)
    if isinstance(value, str):
        return (3, value)
    if isinstance(value, (list, tuple)):
        return (4, json.dumps(value, sort_keys=True, default=str))
    return (5, json.dumps(value, sort_keys=True, default=str))


def sort_documents(sequence: Sequence[T], expression: Any) -> list[T]:
    """
    Stable multi-key sort.

    Applies one stable pass per clause, last clause first, so the first
    clause ends up as the primary key. Documents missing a field sort
    before every present value (after them when descending).
    """
    clauses = parse_sort_expression(expression)
    result = list(sequence)
    for clause in reversed(clauses):
        result.sort(
            key=lambda element, f=clause.field: _sort_key(element.get(f, _MISSING)),
            reverse=clause.descending,
        )
    return result


# ━━━ Picking ━━━


def first_of(sequence: Sequence[T]) -> T | None:
    return sequence[0] if sequence else None


def last_of(sequence: Sequence[T]) -> T | None:
    return sequence[-1] if sequence else None


def render_json(obj: Any) -> str:
    """Pretty JSON with tab indentation; strings are returned as-is."""
    if isinstance(obj, str):
        return obj
    return json.dumps(obj, indent="\t", ensure_ascii=False)
