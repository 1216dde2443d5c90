"""
Module to build store queries from listing request filters.

A query is built by a fixed pipeline of stages, applied in this order:

  1. equality filters
  2. time range filters
  3. order by (sort timestamp, unique id)
  4. start after (cursor position)
  5. limit

Document stores typically require range filters and ordering clauses to be declared in a
particular relation to each other, and a resume position to be expressed in terms of the
ordering fields. The `Query` class enforces the stage order: adding a clause belonging to an
earlier stage than one already applied raises ValueError.
"""

import logging

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from ecomm.cursor import Cursor, as_utc, from_nanos
from typing import Any, Literal


_logger = logging.getLogger(__name__)


Operator = Literal["==", "<", "<=", ">", ">="]

OPERATORS: frozenset[str] = frozenset(("==", "<", "<=", ">", ">="))


@dataclass(frozen=True)
class Predicate:
    """
    A single filter condition on a document field.

    Attributes:
    • path: dotted path of the document field (e.g. "ordered_by.family_name")
    • op: comparison operator
    • value: value to compare field value against
    """

    path: str
    op: Operator
    value: Any

    def __post_init__(self):
        if self.op not in OPERATORS:
            raise ValueError(f"unsupported operator: {self.op}")

    def __str__(self) -> str:
        return f"{self.path} {self.op} {self.value!r}"


# stage ranks; a clause may only be added at or after the rank of the last clause
_EQUALITY, _RANGE, _ORDER_BY, _START_AFTER, _LIMIT = range(5)


@dataclass(frozen=True)
class Query:
    """
    An immutable query on a store collection. Each clause method returns a new query.

    Attributes:
    • collection: name of the collection to query
    • predicates: filter conditions, all of which must match
    • order_by: document paths to order results by, ascending
    • start_after: values of order_by fields of the record to resume after
    • limit: maximum number of records to return
    """

    collection: str
    predicates: tuple[Predicate, ...] = ()
    order_by: tuple[str, ...] = ()
    start_after: tuple[Any, ...] | None = None
    limit: int | None = None
    _stage: int = field(default=_EQUALITY, repr=False, compare=False)

    def _advance(self, stage: int, **changes) -> "Query":
        if stage < self._stage:
            raise ValueError("query clauses must be applied in stage order")
        return replace(self, _stage=stage, **changes)

    def where(self, path: str, op: Operator, value: Any) -> "Query":
        """Return query with an additional filter condition."""
        stage = _EQUALITY if op == "==" else _RANGE
        return self._advance(stage, predicates=(*self.predicates, Predicate(path, op, value)))

    def ordered_by(self, *paths: str) -> "Query":
        """Return query with additional ordering paths."""
        return self._advance(_ORDER_BY, order_by=(*self.order_by, *paths))

    def after(self, *values: Any) -> "Query":
        """Return query that resumes after the record with the specified order_by values."""
        if len(values) != len(self.order_by):
            raise ValueError("start after values must correspond to order by paths")
        return self._advance(_START_AFTER, start_after=tuple(values))

    def limited(self, limit: int) -> "Query":
        """Return query that returns no more than the specified number of records."""
        if limit < 1:
            raise ValueError("limit must be positive")
        return self._advance(_LIMIT, limit=limit)

    def __str__(self) -> str:
        clauses = [f"FROM {self.collection}"]
        if self.predicates:
            clauses.append("WHERE " + " AND ".join(str(p) for p in self.predicates))
        if self.order_by:
            clauses.append("ORDER BY " + ", ".join(self.order_by))
        if self.start_after is not None:
            clauses.append(f"START AFTER {self.start_after!r}")
        if self.limit is not None:
            clauses.append(f"LIMIT {self.limit}")
        return " ".join(clauses)


@dataclass(frozen=True)
class Collection:
    """
    Describes a queryable collection of records.

    Attributes:
    • name: name of the store collection
    • record_type: dataclass of records stored in the collection
    • timestamp: document path of the record sort timestamp
    • id: document path of the record unique identifier
    • equality: mapping of equality filter names to document paths
    """

    name: str
    record_type: type
    timestamp: str = "submission_time"
    id: str = "id"
    equality: Mapping[str, str] = field(default_factory=dict)


Filters = Mapping[str, Any]

Stage = Callable[[Query, Collection, Filters, Cursor | None, int], Query]


def equality_stage(query, collection, filters, cursor, limit):
    for name, path in collection.equality.items():
        if value := filters.get(name):
            query = query.where(path, "==", value)
    return query


def time_range_stage(query, collection, filters, cursor, limit):
    start: datetime | None = filters.get("start_time")
    end: datetime | None = filters.get("end_time")
    if start is not None:
        query = query.where(collection.timestamp, ">=", as_utc(start))
    if end is not None:
        query = query.where(collection.timestamp, "<", as_utc(end))
    return query


def order_by_stage(query, collection, filters, cursor, limit):
    return query.ordered_by(collection.timestamp, collection.id)


def start_after_stage(query, collection, filters, cursor, limit):
    if cursor is None:
        return query
    return query.after(from_nanos(cursor.timestamp), cursor.id)


def limit_stage(query, collection, filters, cursor, limit):
    return query.limited(limit)


STAGES: tuple[Stage, ...] = (
    equality_stage,
    time_range_stage,
    order_by_stage,
    start_after_stage,
    limit_stage,
)


def build_query(
    collection: Collection,
    filters: Filters,
    cursor: Cursor | None,
    limit: int,
    stages: Iterable[Stage] = STAGES,
) -> Query:
    """
    Build a query on a collection by applying each stage of the pipeline in turn.

    Parameters:
    • collection: collection to query
    • filters: filter values, keyed by equality filter name, "start_time" and "end_time";
      empty or missing values are ignored
    • cursor: position of the last record already delivered, or None to start at the beginning
    • limit: maximum number of records to return
    • stages: query building stages  [STAGES]
    """
    query = Query(collection=collection.name)
    for stage in stages:
        query = stage(query, collection, filters, cursor, limit)
    _logger.debug("built query: %s", query)
    return query
