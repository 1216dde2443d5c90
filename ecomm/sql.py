"""
Module to compose parameterized SQL statements.

A statement is built as a sequence of text fragments and parameter values; parameter values
are never interpolated into statement text. Compiling a statement yields text with
placeholders and the list of values to bind to them.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


class Param:
    """
    A value to be bound to a statement placeholder.

    Attributes:
    • value: the value to bind
    • type: the Python type the value was derived from  [type of value]
    """

    __slots__ = {"value", "type"}

    def __init__(self, value: Any, type: Any = None):
        self.value = value
        self.type = type or value.__class__

    def __eq__(self, other):
        return isinstance(other, Param) and (self.value, self.type) == (other.value, other.type)

    def __repr__(self) -> str:
        return f"Param({self.value!r}, {self.type.__name__})"

    def __str__(self) -> str:
        return f"«{self.value}»"


Fragment = str | Param


class Expression(Iterable[Fragment]):
    """
    A SQL expression, held as a flat list of text and parameter fragments.

    Arguments to the initializer, and values added with +=, can be strings, Param objects,
    other expressions, or iterables of these; nested values are flattened.
    """

    __slots__ = {"fragments"}

    def __init__(self, *args):
        self.fragments: list[Fragment] = []
        for arg in args:
            self += arg

    def __iadd__(self, value):
        match value:
            case str() | Param():
                self.fragments.append(value)
            case Iterable():
                for element in value:
                    self += element
            case _:
                raise ValueError(f"unsupported fragment: {value!r}")
        return self

    def __iter__(self):
        return iter(self.fragments)

    def __len__(self):
        return len(self.fragments)

    def __bool__(self):
        return bool(self.fragments)

    def __repr__(self):
        return f"Expression({self.fragments!r})"

    def __str__(self):
        return "".join(str(f) for f in self.fragments)

    @staticmethod
    def join(values: Iterable[Expression | Fragment], sep: str | None = None) -> Expression:
        """Return an expression of values, with an optional separator between each."""
        expr = Expression()
        for value in values:
            if expr and sep:
                expr += sep
            expr += value
        return expr

    def compile(self, placeholder: str = "?") -> tuple[str, list[Any]]:
        """Return statement text with placeholders, and the values to bind to them."""
        text = []
        values = []
        for fragment in self.fragments:
            if isinstance(fragment, Param):
                text.append(placeholder)
                values.append(fragment.value)
            else:
                text.append(fragment)
        return "".join(text), values
