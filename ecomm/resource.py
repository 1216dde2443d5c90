"""
Module to declare service operations.

A service is a class whose public coroutines, decorated with @operation (or @query and
@mutation), form its interface. Operations are named after the HTTP method they correspond
to. A collection service exposes an item service through __getitem__, for example
`orders["order-1"].get()`.
"""

import functools
import inspect
import logging
import wrapt

from collections.abc import Callable
from copy import deepcopy
from ecomm.error import ServerError
from typing import Any, Literal, TypeVar, get_args


T = TypeVar("T")


_logger = logging.getLogger(__name__)


Method = Literal["get", "put", "post", "delete", "patch"]

_METHODS = frozenset(get_args(Method))


def _check_signature(function: Callable[..., Any]) -> None:
    params = list(inspect.signature(function).parameters.values())
    if not params or params[0].name != "self":
        raise TypeError(f"{function.__name__}: first parameter must be self")
    for param in params[1:]:
        if param.kind in {param.VAR_POSITIONAL, param.VAR_KEYWORD}:
            raise TypeError(f"{function.__name__}: variable arguments are not supported")
        if param.annotation is param.empty:
            raise TypeError(f"{function.__name__}: parameter {param.name} requires a type hint")


def operation(wrapped: T = None, *, method: Method | None = None) -> T:
    """
    Decorate a service coroutine as an operation.

    Parameters:
    • method: HTTP method of the operation  [name of the coroutine]

    Every parameter after self must carry a type hint. Arguments are deep copied before the
    coroutine is called, so an operation can never alter a caller's objects. Service errors
    propagate to the caller unchanged; server errors are logged with their traceback.
    """
    if wrapped is None:
        return functools.partial(operation, method=method)

    if not inspect.iscoroutinefunction(wrapped):
        raise TypeError(f"{wrapped.__name__}: operation must be a coroutine")

    if method is None and wrapped.__name__ not in _METHODS:
        raise TypeError(f"{wrapped.__name__}: operation name must be one of {sorted(_METHODS)}")
    if method is not None and method not in _METHODS:
        raise TypeError(f"{method}: operation method must be one of {sorted(_METHODS)}")

    _check_signature(wrapped)

    @wrapt.decorator
    async def wrapper(wrapped, instance, args, kwargs):
        cls = instance.__class__
        name = f"{cls.__module__}.{cls.__qualname__}.{wrapped.__name__}"
        _logger.debug("operation: %s", name)
        try:
            return await wrapped(*deepcopy(args), **deepcopy(kwargs))
        except ServerError:
            _logger.exception("operation failed: %s", name)
            raise

    return wrapper(wrapped)


def query(wrapped: T | None = None, *, method: Method = "get") -> T:
    """Decorate a service coroutine as an operation that only reads state."""
    return operation(wrapped, method=method)


def mutation(wrapped: T | None = None, *, method: Method = "post") -> T:
    """Decorate a service coroutine as an operation that changes state."""
    return operation(wrapped, method=method)
