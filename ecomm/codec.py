"""Module to support encoding and decoding of values to and from JSON representations."""

import dataclasses
import enum
import iso8601
import json
import typing

from contextlib import contextmanager, suppress
from datetime import datetime, timezone
from ecomm.types import is_optional, is_subclass, strip_annotations
from types import NoneType, UnionType
from typing import Any, Generic, TypeVar, Union, get_args, get_origin


JSONType = Any


# ----- utilities -----


@contextmanager
def _wrap(exception):
    try:
        yield
    except Exception as e:
        if isinstance(e, exception):
            raise
        raise exception from e


# ----- errors -----


class CodecError(ValueError):
    """
    Error raised in the event that a value cannot be encoded or decoded.
    """

    __slots__ = {"message", "path"}

    def __init__(self, message: str | None = None, path: list[str | int] | None = None):
        self.message = message
        self.path = path

    def __repr__(self):
        return f"{self.__class__.__name__}({self.message!r}, {self.path!r})"

    def __str__(self):
        return " ".join(str(s) for s in (self.message, self.path) if s is not None)

    @staticmethod
    @contextmanager
    def path_on_error(path: list[str | int] | str | int) -> None:
        """Context manager to add to error path in the event that a CodecError is raised."""
        try:
            yield
        except CodecError as ce:
            if ce.path is None:
                ce.path = []
            match path:
                case str() | int():
                    ce.path.insert(0, path)
                case list():
                    ce.path = path + ce.path
            raise


class EncodeError(CodecError):
    """..."""


class DecodeError(CodecError):
    """..."""


# ----- base -----


PT = TypeVar("PT")  # Python type hint


class JSONCodec(Generic[PT]):
    """
    Base class for codecs that encode Python types to/from JSON representations.

    Use `JSONCodec.get(python_type)` to obtain a codec for a type.
    """

    _cache = {}

    def __init__(self, python_type: Any):
        self.python_type = python_type

    @staticmethod
    def handles(python_type: Any) -> bool:
        """Return True if the codec handles the specified Python type."""
        raise NotImplementedError

    @classmethod
    def get(cls, python_type: Any) -> "JSONCodec[PT]":
        """Return a codec that handles the specified Python type."""
        with suppress(KeyError, TypeError):
            return JSONCodec._cache[python_type]
        for codec_class in JSONCodec.__subclasses__():
            if codec_class.handles(python_type):
                codec = codec_class(python_type)
                with suppress(TypeError):  # unhashable type hint
                    JSONCodec._cache[python_type] = codec
                return codec
        raise TypeError(f"no codec for {python_type}")

    def encode(self, value: PT) -> JSONType:
        """Encode value from Python type to JSON type."""
        raise NotImplementedError

    def decode(self, value: JSONType) -> PT:
        """Decode value from JSON type to Python type."""
        raise NotImplementedError

    def dumps(self, value: PT) -> str:
        """Encode value to a JSON document string."""
        return json.dumps(self.encode(value), separators=(",", ":"))

    def loads(self, value: str) -> PT:
        """Decode value from a JSON document string."""
        if not isinstance(value, str):
            raise DecodeError
        with _wrap(DecodeError):
            return self.decode(json.loads(value))


# ----- scalars -----


class StrJSONCodec(JSONCodec[str]):
    """JSON codec for Unicode character strings."""

    @staticmethod
    def handles(python_type: Any) -> bool:
        python_type = strip_annotations(python_type)
        return is_subclass(python_type, str) and not is_subclass(python_type, enum.Enum)

    def encode(self, value: str) -> JSONType:
        if not isinstance(value, str):
            raise EncodeError
        return value

    def decode(self, value: JSONType) -> str:
        if not isinstance(value, str):
            raise DecodeError
        return value


class IntJSONCodec(JSONCodec[int]):
    """JSON codec for integers."""

    @staticmethod
    def handles(python_type: Any) -> bool:
        python_type = strip_annotations(python_type)
        return (
            is_subclass(python_type, int)
            and not is_subclass(python_type, bool)
            and not is_subclass(python_type, enum.Enum)
        )

    def encode(self, value: int) -> JSONType:
        if not isinstance(value, int) or isinstance(value, bool):
            raise EncodeError
        return value

    def decode(self, value: JSONType) -> int:
        if not isinstance(value, int | float) or isinstance(value, bool):
            raise DecodeError
        result = value
        if isinstance(result, float):
            result = int(result)
            if result != value:  # 1.0 == 1
                raise DecodeError
        return result


class BoolJSONCodec(JSONCodec[bool]):
    """JSON codec for boolean values."""

    @staticmethod
    def handles(python_type: Any) -> bool:
        python_type = strip_annotations(python_type)
        return is_subclass(python_type, bool)

    def encode(self, value: bool) -> JSONType:
        if not isinstance(value, bool):
            raise EncodeError
        return value

    def decode(self, value: JSONType) -> bool:
        if not isinstance(value, bool):
            raise DecodeError
        return value


class NoneTypeJSONCodec(JSONCodec[NoneType]):
    """JSON codec for None."""

    @staticmethod
    def handles(python_type: Any) -> bool:
        python_type = strip_annotations(python_type)
        return python_type is NoneType or python_type is None

    def encode(self, value: NoneType) -> JSONType:
        if value is not None:
            raise EncodeError
        return None

    def decode(self, value: JSONType) -> NoneType:
        if value is not None:
            raise DecodeError
        return None


class EnumJSONCodec(JSONCodec[enum.Enum]):
    """JSON codec for enumerations; encodes the member value."""

    @staticmethod
    def handles(python_type: Any) -> bool:
        python_type = strip_annotations(python_type)
        return is_subclass(python_type, enum.Enum)

    def __init__(self, python_type: Any):
        super().__init__(python_type)
        self.raw_type = strip_annotations(python_type)

    def encode(self, value: enum.Enum) -> JSONType:
        if not isinstance(value, self.raw_type):
            raise EncodeError
        return value.value

    def decode(self, value: JSONType) -> enum.Enum:
        with _wrap(DecodeError):
            return self.raw_type(value)


# ----- datetime -----


def _to_utc(value):
    if value.tzinfo is None:  # naive value interpreted as UTC
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class DatetimeJSONCodec(JSONCodec[datetime]):
    """
    JSON codec for timezone-aware datetimes, as RFC 3339 strings in UTC with a fixed six
    digit fraction, so that encoded values sort in time order. Naive values are taken to be
    UTC. Any ISO 8601 string decodes, and is converted to UTC.

    Example: "2020-04-07T12:34:56.789012Z".
    """

    @staticmethod
    def handles(python_type: Any) -> bool:
        python_type = strip_annotations(python_type)
        return is_subclass(python_type, datetime)

    def encode(self, value: datetime) -> JSONType:
        if not isinstance(value, datetime):
            raise EncodeError
        result = _to_utc(value).isoformat(timespec="microseconds")
        return f"{result[0:-6]}Z"  # strip +00:00

    def decode(self, value: JSONType) -> datetime:
        if not isinstance(value, str):
            raise DecodeError
        with _wrap(DecodeError):
            return _to_utc(iso8601.parse_date(value))


# ----- containers -----


class ListJSONCodec(JSONCodec[PT]):
    """JSON codec for homogeneous lists, represented as JSON arrays."""

    @staticmethod
    def handles(python_type: Any) -> bool:
        return get_origin(strip_annotations(python_type)) is list

    def __init__(self, python_type: Any):
        super().__init__(python_type)
        (item_type,) = get_args(strip_annotations(python_type))
        self.codec = JSONCodec.get(item_type)

    def encode(self, value: PT) -> JSONType:
        if not isinstance(value, list | tuple):
            raise EncodeError
        result = []
        for index, item in enumerate(value):
            with CodecError.path_on_error(index):
                result.append(self.codec.encode(item))
        return result

    def decode(self, value: JSONType) -> PT:
        if not isinstance(value, list):
            raise DecodeError
        result = []
        for index, item in enumerate(value):
            with CodecError.path_on_error(index):
                result.append(self.codec.decode(item))
        return result


class DataclassJSONCodec(JSONCodec[PT]):
    """
    JSON codec for dataclasses, represented as JSON objects. Fields with None values are
    omitted when encoding; missing optional fields decode to None.
    """

    @staticmethod
    def handles(python_type: Any) -> bool:
        python_type = strip_annotations(python_type)
        return dataclasses.is_dataclass(python_type)

    def __init__(self, python_type: Any):
        super().__init__(python_type)
        self.raw_type = strip_annotations(python_type)
        self.hints = typing.get_type_hints(self.raw_type, include_extras=True)

    @property
    def _codecs(self) -> dict[str, JSONCodec[Any]]:
        return {key: JSONCodec.get(hint) for key, hint in self.hints.items()}

    def encode(self, value: PT) -> JSONType:
        if not isinstance(value, self.raw_type):
            raise EncodeError
        codecs = self._codecs
        result = {}
        for field in dataclasses.fields(self.raw_type):
            v = getattr(value, field.name, None)
            if v is not None:
                with CodecError.path_on_error(field.name):
                    result[field.name] = codecs[field.name].encode(v)
        return result

    def decode(self, value: JSONType) -> PT:
        if not isinstance(value, dict):
            raise DecodeError
        codecs = self._codecs
        kwargs = {}
        for field in dataclasses.fields(self.raw_type):
            try:
                with CodecError.path_on_error(field.name):
                    kwargs[field.name] = codecs[field.name].decode(value[field.name])
            except KeyError:
                if (
                    is_optional(self.hints[field.name])
                    and field.default is dataclasses.MISSING
                    and field.default_factory is dataclasses.MISSING
                ):
                    kwargs[field.name] = None
        with _wrap(DecodeError):
            return self.raw_type(**kwargs)


class UnionJSONCodec(JSONCodec[PT]):
    """JSON codec for UnionType/Union/Optional; members are tried in turn."""

    @staticmethod
    def handles(python_type: Any) -> bool:
        python_type = strip_annotations(python_type)
        return get_origin(python_type) in {UnionType, Union}

    def __init__(self, python_type: Any):
        super().__init__(python_type)
        args = get_args(strip_annotations(python_type))
        self.codecs = tuple(JSONCodec.get(arg) for arg in args)

    def encode(self, value: PT) -> JSONType:
        for codec in self.codecs:
            with suppress(EncodeError):
                return codec.encode(value)
        raise EncodeError

    def decode(self, value: JSONType) -> PT:
        for codec in self.codecs:
            with suppress(DecodeError):
                return codec.decode(value)
        raise DecodeError
