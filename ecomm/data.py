"""Module to declare record dataclasses."""

import dataclasses
import typing

from ecomm.types import is_optional


def _default(field: dataclasses.Field) -> typing.Any:
    if field.default is not dataclasses.MISSING:
        return field.default
    if field.default_factory is not dataclasses.MISSING:
        return field.default_factory()
    return None


def _required(field: dataclasses.Field, hint: typing.Any) -> bool:
    return (
        not is_optional(hint)
        and field.default is dataclasses.MISSING
        and field.default_factory is dataclasses.MISSING
    )


def _init(dc: type):
    fields = {f.name: f for f in dataclasses.fields(dc) if f.init}
    hints = {}

    def __init__(self, **kwargs):
        if not hints:  # resolved on first use; forward references may not exist earlier
            hints.update(typing.get_type_hints(dc))
        for name in kwargs:
            if name not in fields:
                raise TypeError(f"__init__() got an unexpected keyword argument '{name}'")
        missing = [
            f"'{name}'"
            for name, field in fields.items()
            if name not in kwargs and _required(field, hints[name])
        ]
        if len(missing) == 1:
            raise TypeError(f"__init__() missing 1 required keyword-only argument: {missing[0]}")
        if missing:
            raise TypeError(
                f"__init__() missing {len(missing)} required keyword-only arguments: "
                f"{', '.join(missing[:-1])} and {missing[-1]}"
            )
        for name, field in fields.items():
            setattr(self, name, kwargs[name] if name in kwargs else _default(field))
        if post_init := getattr(self, "__post_init__", None):
            post_init()

    return __init__


def datacls(cls: type | None = None, /, *, init: bool = True, **kwargs) -> type:
    """
    Decorate a class as a record dataclass. The class is processed by dataclasses.dataclass,
    with a generated __init__ method that differs as follows:

    • only keyword arguments are accepted
    • fields with and without defaults can be declared in any order
    • optional fields without a default value default to None
    • __post_init__, if defined, is called once fields are set

    Remaining keyword arguments are passed to dataclasses.dataclass.
    """
    if cls is None:
        return lambda cls: datacls(cls, init=init, **kwargs)
    dc = dataclasses.dataclass(cls, init=False, **kwargs)
    if init:
        dc.__init__ = _init(dc)
    return dc
