"""Module to store records in memory."""

import dataclasses
import logging
import operator

from collections.abc import AsyncIterator, Mapping
from copy import deepcopy
from ecomm.error import ConflictError, NotFoundError
from ecomm.query import Predicate, Query
from ecomm.store import R, Store
from ecomm.types import get_path
from typing import Any


_logger = logging.getLogger(__name__)


_compare = {
    "==": operator.eq,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def _matches(record: Any, predicate: Predicate) -> bool:
    value = get_path(record, predicate.path)
    if value is None:  # missing fields never match, as in a document store
        return False
    return _compare[predicate.op](value, predicate.value)


class MemoryStore(Store):
    """
    Stores records in memory.

    Records are copied on the way in and on the way out, so that callers cannot mutate
    stored state. Intended for tests and for local development.
    """

    def __init__(self):
        self._collections: dict[str, dict[str, Any]] = {}

    def _collection(self, name: str) -> dict[str, Any]:
        return self._collections.setdefault(name, {})

    async def query(self, query: Query, record_type: type[R]) -> AsyncIterator[R]:
        records = [
            r
            for r in self._collection(query.collection).values()
            if all(_matches(r, p) for p in query.predicates)
        ]
        if query.order_by:
            key = lambda r: tuple(get_path(r, path) for path in query.order_by)
            records.sort(key=key)
            if query.start_after is not None:
                records = [r for r in records if key(r) > query.start_after]
        if query.limit is not None:
            records = records[: query.limit]
        for record in records:
            yield deepcopy(record)

    async def create(self, collection: str, id: str, record: Any) -> None:
        records = self._collection(collection)
        if id in records:
            raise ConflictError(f"record already exists: {id}")
        records[id] = deepcopy(record)
        _logger.debug("created record %s in %s", id, collection)

    async def read(self, collection: str, id: str, record_type: type[R]) -> R:
        try:
            return deepcopy(self._collection(collection)[id])
        except KeyError:
            raise NotFoundError(f"record not found: {id}")

    async def update(self, collection: str, id: str, changes: Mapping[str, Any]) -> None:
        records = self._collection(collection)
        if id not in records:
            raise NotFoundError(f"record not found: {id}")
        records[id] = dataclasses.replace(records[id], **deepcopy(dict(changes)))
        _logger.debug("updated record %s in %s", id, collection)

    def clear(self) -> None:
        """Remove all records from all collections."""
        self._collections.clear()
