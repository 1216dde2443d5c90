"""
Module to store records as JSON documents in a SQLite database.

All collections share a single table; each row holds the collection name, the record
identifier and the record encoded as a JSON document. Query predicates and ordering are
evaluated against document fields through the SQLite json_extract function, which emulates the
behavior of a document store: a document that lacks a filtered field never matches.
"""

import aiosqlite
import ecomm.store
import json
import logging
import re
import sqlite3

from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from ecomm.codec import DecodeError, JSONCodec
from ecomm.error import ConflictError, NotFoundError
from ecomm.query import Predicate, Query
from ecomm.sql import Expression, Param
from ecomm.store import R, RecordError
from typing import Any


_logger = logging.getLogger(__name__)


_PATH = re.compile(r"[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*")

TABLE = "documents"

_CREATE = (
    f"CREATE TABLE IF NOT EXISTS {TABLE} ("
    "collection TEXT NOT NULL, id TEXT NOT NULL, document TEXT NOT NULL, "
    "PRIMARY KEY (collection, id));"
)


def _field(path: str) -> str:
    if not _PATH.fullmatch(path):
        raise ValueError(f"invalid document path: {path}")
    return f"json_extract(document, '$.{path}')"


def _param(value: Any) -> Param:
    return Param(JSONCodec.get(type(value)).encode(value), type(value))


def _predicate(predicate: Predicate) -> Expression:
    op = "=" if predicate.op == "==" else predicate.op
    return Expression(f"{_field(predicate.path)} {op} ", _param(predicate.value))


def _start_after(paths: tuple[str, ...], values: tuple[Any, ...]) -> Expression:
    """Expand a lexicographic (p1, p2, ...) > (v1, v2, ...) comparison."""
    head, value = paths[0], values[0]
    expr = Expression(f"{_field(head)} > ", _param(value))
    if len(paths) == 1:
        return expr
    return Expression(
        "(",
        expr,
        f" OR ({_field(head)} = ",
        _param(value),
        " AND ",
        _start_after(paths[1:], values[1:]),
        "))",
    )


def select_statement(query: Query) -> Expression:
    """Return the SQL statement that executes the specified query."""
    conditions = [Expression("collection = ", Param(query.collection))]
    conditions.extend(_predicate(p) for p in query.predicates)
    if query.start_after is not None:
        conditions.append(_start_after(query.order_by, query.start_after))
    stmt = Expression(
        f"SELECT id, document FROM {TABLE} WHERE ",
        Expression.join(conditions, " AND "),
    )
    if query.order_by:
        stmt += Expression(" ORDER BY ", ", ".join(_field(p) for p in query.order_by))
    if query.limit is not None:
        stmt += Expression(" LIMIT ", Param(query.limit))
    stmt += ";"
    return stmt


class Store(ecomm.store.Store):
    """
    Stores records as JSON documents in a SQLite database.

    Parameter:
    • path: path to SQLite database file
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = path

    @asynccontextmanager
    async def connection(self):
        _logger.debug("open connection")
        connection = await aiosqlite.connect(self.path)
        connection.row_factory = sqlite3.Row
        try:
            await connection.execute(_CREATE)
            yield connection
        finally:
            _logger.debug("close connection")
            await connection.close()

    async def query(self, query: Query, record_type: type[R]) -> AsyncIterator[R]:
        codec = JSONCodec.get(record_type)
        text, args = select_statement(query).compile()
        async with self.connection() as connection:
            async with connection.execute(text, args) as rows:
                async for row in rows:
                    try:
                        record = codec.loads(row["document"])
                    except DecodeError as de:
                        id = row["id"]
                        raise RecordError(id, f"could not decode record: {id}") from de
                    yield record

    async def create(self, collection: str, id: str, record: Any) -> None:
        document = JSONCodec.get(type(record)).dumps(record)
        async with self.connection() as connection:
            try:
                await connection.execute(
                    f"INSERT INTO {TABLE} (collection, id, document) VALUES (?, ?, ?);",
                    (collection, id, document),
                )
            except sqlite3.IntegrityError as ie:
                raise ConflictError(f"record already exists: {id}") from ie
            await connection.commit()
        _logger.debug("created record %s in %s", id, collection)

    async def _document(self, connection, collection: str, id: str) -> sqlite3.Row:
        async with connection.execute(
            f"SELECT id, document FROM {TABLE} WHERE collection = ? AND id = ?;",
            (collection, id),
        ) as rows:
            row = await rows.fetchone()
        if row is None:
            raise NotFoundError(f"record not found: {id}")
        return row

    async def read(self, collection: str, id: str, record_type: type[R]) -> R:
        async with self.connection() as connection:
            row = await self._document(connection, collection, id)
        try:
            return JSONCodec.get(record_type).loads(row["document"])
        except DecodeError as de:
            raise RecordError(id, f"could not decode record: {id}") from de

    async def update(self, collection: str, id: str, changes: Mapping[str, Any]) -> None:
        async with self.connection() as connection:
            row = await self._document(connection, collection, id)
            document = json.loads(row["document"])
            for name, value in changes.items():
                if value is None:
                    document.pop(name, None)
                else:
                    document[name] = JSONCodec.get(type(value)).encode(value)
            await connection.execute(
                f"UPDATE {TABLE} SET document = ? WHERE collection = ? AND id = ?;",
                (json.dumps(document, separators=(",", ":")), collection, id),
            )
            await connection.commit()
        _logger.debug("updated record %s in %s", id, collection)
