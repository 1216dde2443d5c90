import pytest

from datetime import datetime, timezone
from ecomm.cursor import Cursor, to_nanos
from ecomm.data import datacls
from ecomm.query import Collection, Predicate, Query, build_query, equality_stage


@datacls
class Rec:
    id: str
    submission_time: datetime
    name: str | None


RECS = Collection(name="recs", record_type=Rec, equality={"name": "owner.name"})

T1 = datetime(2021, 1, 1, tzinfo=timezone.utc)
T2 = datetime(2021, 2, 1, tzinfo=timezone.utc)


def test_predicate_invalid_operator():
    with pytest.raises(ValueError):
        Predicate("a", "!=", 1)


def test_stage_order_enforced():
    query = Query("c").ordered_by("a")
    with pytest.raises(ValueError):
        query.where("b", "==", 1)
    with pytest.raises(ValueError):
        query.limited(1).after(1)


def test_range_after_equality():
    query = Query("c").where("a", "==", 1).where("t", ">=", 2)
    with pytest.raises(ValueError):
        query.where("b", "==", 3)


def test_after_requires_order_by_values():
    with pytest.raises(ValueError):
        Query("c").ordered_by("a", "b").after(1)


def test_limit_positive():
    with pytest.raises(ValueError):
        Query("c").limited(0)


def test_query_immutable():
    query = Query("c")
    query.where("a", "==", 1)
    assert query.predicates == ()


def test_build_no_filters():
    query = build_query(RECS, {}, None, 10)
    assert query.collection == "recs"
    assert query.predicates == ()
    assert query.order_by == ("submission_time", "id")
    assert query.start_after is None
    assert query.limit == 10


def test_build_all_stages():
    cursor = Cursor(timestamp=to_nanos(T1), id="r9")
    query = build_query(RECS, {"name": "Bloggs", "start_time": T1, "end_time": T2}, cursor, 5)
    assert query.predicates == (
        Predicate("owner.name", "==", "Bloggs"),
        Predicate("submission_time", ">=", T1),
        Predicate("submission_time", "<", T2),
    )
    assert query.order_by == ("submission_time", "id")
    assert query.start_after == (T1, "r9")
    assert query.limit == 5


def test_build_naive_range_is_utc():
    query = build_query(RECS, {"start_time": T1.replace(tzinfo=None), "end_time": T2}, None, 5)
    assert query.predicates == (
        Predicate("submission_time", ">=", T1),
        Predicate("submission_time", "<", T2),
    )
    assert query.predicates[0].value.tzinfo is timezone.utc


def test_build_ignores_empty_filters():
    query = build_query(RECS, {"name": "", "start_time": None}, None, 5)
    assert query.predicates == ()


def test_build_custom_stages():
    query = build_query(RECS, {"name": "x"}, None, 5, stages=(equality_stage,))
    assert query.predicates == (Predicate("owner.name", "==", "x"),)
    assert query.order_by == ()
    assert query.limit is None


def test_str():
    query = build_query(RECS, {"name": "x"}, None, 5)
    assert str(query) == (
        "FROM recs WHERE owner.name == 'x' ORDER BY submission_time, id LIMIT 5"
    )
