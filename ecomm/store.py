"""
Module that defines the interface to a record store.

A store persists records in named collections. Each record is a dataclass instance with a
unique string identifier. Services receive a store when they are constructed; unit tests can
supply any implementation of this interface, including one that raises errors on demand.
"""

from collections.abc import AsyncIterator, Mapping
from ecomm.query import Query
from typing import Any, TypeVar


R = TypeVar("R")  # record type variable


class RecordError(Exception):
    """
    Error raised by a store if a stored record could not be retrieved or decoded.

    Attribute:
    • record_id: identifier of the offending record
    """

    def __init__(self, record_id: str, message: str | None = None):
        super().__init__(message or f"could not retrieve record: {record_id}")
        self.record_id = record_id


class Store:
    """Base class for a record store."""

    def query(self, query: Query, record_type: type[R]) -> AsyncIterator[R]:
        """
        Execute a query, returning an asynchronous iterator over matching records.

        Parameters:
        • query: the query to execute
        • record_type: the dataclass to return each record in

        Records are fetched lazily as the iterator is advanced; errors raised while fetching
        propagate from the iterator. The caller must close the iterator (`aclose`) when done,
        whether iteration completed or not.
        """
        raise NotImplementedError

    async def create(self, collection: str, id: str, record: Any) -> None:
        """
        Store a new record. Raises ConflictError if a record with the same identifier
        already exists in the collection.
        """
        raise NotImplementedError

    async def read(self, collection: str, id: str, record_type: type[R]) -> R:
        """Return a record. Raises NotFoundError if the record does not exist."""
        raise NotImplementedError

    async def update(self, collection: str, id: str, changes: Mapping[str, Any]) -> None:
        """
        Update top-level fields of a record. Raises NotFoundError if the record does not
        exist.
        """
        raise NotImplementedError
