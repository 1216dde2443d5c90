from ecomm.types import get_path, is_optional, is_subclass, split_annotated, strip_annotations
from types import SimpleNamespace
from typing import Annotated, Optional, Union


def test_split_annotated():
    assert split_annotated(Annotated[int, "a", "b"]) == (int, ("a", "b"))
    assert split_annotated(int) == (int, ())


def test_strip_annotations():
    assert strip_annotations(Annotated[str, "x"]) is str


def test_is_optional():
    assert is_optional(None.__class__)
    assert is_optional(Optional[int])
    assert is_optional(Union[int, None])
    assert is_optional(int | None)
    assert is_optional(Annotated[str | None, "x"])
    assert not is_optional(int)
    assert not is_optional(int | str)


def test_is_subclass():
    assert is_subclass(bool, int)
    assert not is_subclass(1, int)


def test_get_path_attributes():
    obj = SimpleNamespace(a=SimpleNamespace(b="c"))
    assert get_path(obj, "a.b") == "c"
    assert get_path(obj, "a.x") is None
    assert get_path(SimpleNamespace(a=None), "a.b") is None


def test_get_path_mapping():
    assert get_path({"a": {"b": 1}}, "a.b") == 1
    assert get_path({"a": {}}, "a.b") is None
