import pytest

from contextlib import aclosing
from datetime import datetime, timedelta, timezone
from ecomm.data import datacls
from ecomm.error import ConflictError, NotFoundError
from ecomm.memory import MemoryStore
from ecomm.query import Query


@datacls
class Owner:
    name: str | None


@datacls
class Rec:
    id: str
    submission_time: datetime
    owner: Owner | None
    count: int | None


T0 = datetime(2022, 1, 1, tzinfo=timezone.utc)


async def _query(store, query):
    async with aclosing(store.query(query, Rec)) as records:
        return [r async for r in records]


@pytest.fixture(scope="function")
async def store():
    store = MemoryStore()
    for n, name in enumerate(("smith", "jones", "smith", None)):
        rec = Rec(
            id=f"r{n}",
            submission_time=T0 + timedelta(hours=n),
            owner=Owner(name=name) if name else None,
            count=n,
        )
        await store.create("recs", rec.id, rec)
    yield store


async def test_create_read(store):
    rec = await store.read("recs", "r1", Rec)
    assert rec.owner.name == "jones"


async def test_create_conflict(store):
    with pytest.raises(ConflictError):
        await store.create("recs", "r0", Rec(id="r0", submission_time=T0))


async def test_read_not_found(store):
    with pytest.raises(NotFoundError):
        await store.read("recs", "nope", Rec)


async def test_collections_separate(store):
    await store.create("other", "r0", Rec(id="r0", submission_time=T0))
    assert len(await _query(store, Query("other"))) == 1


async def test_copy_on_read(store):
    rec = await store.read("recs", "r0", Rec)
    rec.owner.name = "changed"
    assert (await store.read("recs", "r0", Rec)).owner.name == "smith"


async def test_copy_on_create():
    store = MemoryStore()
    rec = Rec(id="a", submission_time=T0, owner=Owner(name="x"))
    await store.create("recs", "a", rec)
    rec.owner.name = "y"
    assert (await store.read("recs", "a", Rec)).owner.name == "x"


async def test_update(store):
    await store.update("recs", "r0", {"count": 42})
    rec = await store.read("recs", "r0", Rec)
    assert rec.count == 42
    assert rec.owner.name == "smith"


async def test_update_not_found(store):
    with pytest.raises(NotFoundError):
        await store.update("recs", "nope", {"count": 1})


async def test_query_equality_nested(store):
    query = Query("recs").where("owner.name", "==", "smith").ordered_by("submission_time", "id")
    assert [r.id for r in await _query(store, query)] == ["r0", "r2"]


async def test_query_missing_field_never_matches(store):
    query = Query("recs").where("owner.name", "<", "zzz")
    assert {r.id for r in await _query(store, query)} == {"r0", "r1", "r2"}


async def test_query_range(store):
    query = (
        Query("recs")
        .where("submission_time", ">=", T0 + timedelta(hours=1))
        .where("submission_time", "<", T0 + timedelta(hours=3))
        .ordered_by("submission_time", "id")
    )
    assert [r.id for r in await _query(store, query)] == ["r1", "r2"]


async def test_query_start_after_limit(store):
    query = (
        Query("recs")
        .ordered_by("submission_time", "id")
        .after(T0 + timedelta(hours=1), "r1")
        .limited(1)
    )
    assert [r.id for r in await _query(store, query)] == ["r2"]


async def test_clear(store):
    store.clear()
    assert await _query(store, Query("recs")) == []


async def test_query_mismatched_types_raise(store):
    query = Query("recs").where("count", ">=", "1")
    with pytest.raises(TypeError):
        await _query(store, query)
