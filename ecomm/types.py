"""Module to manage types and type hints."""

import types
import typing

from collections.abc import Mapping
from types import NoneType
from typing import Any


def split_annotated(type_hint: Any) -> tuple[Any, tuple[Any, ...]]:
    """Return a tuple separating the python type and annotations."""
    if not typing.get_origin(type_hint) is typing.Annotated:
        return type_hint, ()
    args = typing.get_args(type_hint)
    return args[0], args[1:]


def strip_annotations(type_hint: Any) -> Any:
    """Return type hint with any Annotated wrapper removed."""
    return split_annotated(type_hint)[0]


def is_optional(type_hint: Any) -> bool:
    """
    Return if the specified type is optional.

    A type is optional if its type hint matches any of the following:
    • None
    • Optional[...]
    • Union[..., None]
    • ... | None
    """
    python_type, _ = split_annotated(type_hint)
    if not typing.get_origin(python_type) in {types.UnionType, typing.Union}:
        return python_type is NoneType
    for arg in typing.get_args(python_type):
        if is_optional(arg):
            return True
    return False


def is_subclass(cls: Any, class_or_tuple: type | tuple[type, ...]) -> bool:
    """A more forgiving issubclass."""
    try:
        return issubclass(cls, class_or_tuple)
    except TypeError:
        return False


def get_path(obj: Any, path: str) -> Any:
    """
    Return the value at a dotted attribute path within an object (e.g. "ordered_by.name").
    Mapping values are traversed by key. If any element of the path is missing or None,
    None is returned.
    """
    for name in path.split("."):
        if obj is None:
            return None
        if isinstance(obj, Mapping):
            obj = obj.get(name)
        else:
            obj = getattr(obj, name, None)
    return obj
