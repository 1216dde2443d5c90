"""
Module to support pagination of records.

For an operation that returns a large set of records, it can be expensive to return all
records in a single response. In this case, the operation returns records in pages, requiring
multiple calls to the operation to retrieve all records.

Paginated records are provided through a page dataclass, which contains:

  • a list of `items` in the page
  • an opaque `cursor` value to retrieve the next page

The caller initially passes no cursor value to an operation, resulting in the first page of
records. When generating the page, if there may be additional records to be returned, the page
cursor contains an opaque value that can be used to request the subsequent page. The last page
contains no cursor value, indicating there are no further records to request.

Records are always ordered by sort timestamp, then by unique identifier; the cursor encodes
both values of the last record in the page (see `ecomm.cursor`). A page that is filled to its
limit is assumed to be followed by another page; if the records run out exactly at a page
boundary, the next call returns an empty page with no cursor.
"""

import asyncio
import logging

from collections.abc import AsyncIterator, Callable, Coroutine, Mapping
from contextlib import aclosing
from dataclasses import dataclass, field
from datetime import datetime
from ecomm.cursor import Cursor, decode_cursor, encode_cursor, to_nanos
from ecomm.error import GatewayTimeoutError, StoreQueryError
from ecomm.query import Collection, Query, build_query
from ecomm.store import Store
from ecomm.types import get_path
from typing import Any, Generic, TypeVar


_logger = logging.getLogger(__name__)


DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


Item = TypeVar("Item")


@dataclass
class Page(Generic[Item]):
    """
    A paginated result.

    Attributes:
    • items: records in the page
    • cursor: token to request the next page, or None if there are no further pages
    """

    items: list[Item] = field(default_factory=list)
    cursor: str | None = None


def clamp_page_size(
    requested: int | None,
    default: int = DEFAULT_PAGE_SIZE,
    maximum: int = MAX_PAGE_SIZE,
) -> int:
    """
    Return the effective page size for a requested page size. A missing, zero or negative
    request yields the default size; a request above the maximum yields the maximum. Either
    adjustment is logged as a warning.
    """
    if requested is None or requested < 1:
        _logger.warning(
            "non-positive page size adjusted to default (requested=%s, default=%s)",
            requested,
            default,
        )
        return default
    if requested > maximum:
        _logger.warning(
            "excessive page size adjusted to maximum (requested=%s, max=%s)",
            requested,
            maximum,
        )
        return maximum
    return requested


def record_cursor(collection: Collection) -> Callable[[Any], Cursor]:
    """Return a function that derives the cursor position of a record in a collection."""

    def _cursor(record: Any) -> Cursor:
        timestamp: datetime = get_path(record, collection.timestamp)
        return Cursor(timestamp=to_nanos(timestamp), id=get_path(record, collection.id))

    return _cursor


async def execute(
    store: Store,
    query: Query,
    record_type: type[Item],
    *,
    cursor_of: Callable[[Item], Cursor],
    operation: str,
    timeout: float | None = None,
) -> Page[Item]:
    """
    Execute a limited query and return the resulting page of records.

    Parameters:
    • store: store to execute query against
    • query: query to execute, with a limit of the page size
    • record_type: dataclass to return each record in
    • cursor_of: function to derive the cursor position of a record
    • operation: name of the operation executing the query, to report in errors
    • timeout: seconds to wait for the page to be retrieved  [unlimited]

    If the number of records returned reaches the query limit, the page cursor is derived
    from the last record; otherwise the page has no cursor.

    The store iterator is always closed before returning or raising. A store failure raises
    StoreQueryError; expiry of the timeout raises GatewayTimeoutError; cancellation raises
    asyncio.CancelledError. No partial page is ever returned.
    """

    async def collect() -> list[Item]:
        items = []
        async with aclosing(store.query(query, record_type)) as records:
            async for record in records:
                items.append(record)
        return items

    try:
        items = await asyncio.wait_for(collect(), timeout)
    except asyncio.TimeoutError as te:
        raise GatewayTimeoutError(f"{operation}: query timed out") from te
    except Exception as e:
        raise StoreQueryError(operation, getattr(e, "record_id", None)) from e

    cursor = None
    if query.limit is not None and len(items) >= query.limit:
        cursor = encode_cursor(cursor_of(items[-1]))
    return Page(items=items, cursor=cursor)


async def fetch_page(
    store: Store,
    collection: Collection,
    filters: Mapping[str, Any],
    *,
    limit: int | None = None,
    cursor: str | None = None,
    operation: str,
    default: int = DEFAULT_PAGE_SIZE,
    maximum: int = MAX_PAGE_SIZE,
    timeout: float | None = None,
) -> Page:
    """
    Fetch a page of records from a collection that match the specified filters.

    Parameters:
    • store: store to query
    • collection: collection to query
    • filters: equality filter and time range values (see `ecomm.query.build_query`)
    • limit: requested page size
    • cursor: page token returned with the previous page, or None for the first page
    • operation: name of the operation fetching the page, to report in errors
    • default: page size if none or a non-positive size is requested
    • maximum: maximum page size
    • timeout: seconds to wait for the page to be retrieved  [unlimited]

    An undecodable cursor raises InvalidCursorError before the store is queried.
    """
    size = clamp_page_size(limit, default, maximum)
    position = decode_cursor(cursor) if cursor else None
    query = build_query(collection, filters, position, size)
    page = await execute(
        store,
        query,
        collection.record_type,
        cursor_of=record_cursor(collection),
        operation=operation,
        timeout=timeout,
    )
    _logger.info(
        "%s: retrieved %d record(s) (cursor=%s)", operation, len(page.items), page.cursor
    )
    return page


async def paginate(
    operation: Callable[..., Coroutine[Any, Any, Page]], /, **kwargs
) -> AsyncIterator[Any]:
    """
    Wraps a paginated operation with an asynchronous generator that iterates through all
    records. The wrapped operation must return a page dataclass and accept a `cursor`
    parameter.

    Parameters:
    • operation: operation to wrap with generator
    • kwargs: keyword arguments to pass to operation
    """
    cursor = {}
    while cursor is not None:
        page = await operation(**kwargs, **cursor)
        cursor = {"cursor": page.cursor} if page.cursor is not None else None
        for item in page.items:
            yield item
