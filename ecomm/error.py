"""Service error module."""

import http

from contextlib import contextmanager


class Error(Exception):
    """
    Base class for service errors. Each concrete error class carries the HTTP status it
    maps to, in the class attributes `status` and `phrase`.
    """


class ClientError(Error):
    """Base class for errors caused by the request (4xx)."""


class ServerError(Error):
    """Base class for errors caused by the service or its store (5xx)."""


def _class_name(status: http.HTTPStatus) -> str:
    words = (w if w in {"HTTP", "URI"} else w.title() for w in status.name.split("_"))
    name = "".join(words)
    return name if name.endswith("Error") else f"{name}Error"


class _Errors:
    """
    Registry of error classes, one per 4xx and 5xx status of http.HTTPStatus. Classes are
    looked up by status code or by class name:

        errors[404] is errors.NotFoundError
    """

    def __init__(self):
        self._by_name = {}
        self._by_code = {}
        for status in http.HTTPStatus:
            if not 400 <= status.value <= 599:
                continue
            base = ClientError if status.value < 500 else ServerError
            doc = f"{status.description or status.phrase.capitalize()}."
            error = type(
                _class_name(status),
                (base,),
                {"status": status.value, "phrase": status.phrase, "__doc__": doc},
            )
            self._by_name[error.__name__] = error
            self._by_code[status.value] = error

    def __getitem__(self, code: int) -> type[Error]:
        return self._by_code[code]

    def __getattr__(self, name: str) -> type[Error]:
        try:
            return self.__dict__["_by_name"][name]
        except KeyError:
            raise AttributeError(name) from None


errors = _Errors()


# commonly used errors
BadRequestError: ClientError = errors.BadRequestError
ConflictError: ClientError = errors.ConflictError
GatewayTimeoutError: ServerError = errors.GatewayTimeoutError
InternalServerError: ServerError = errors.InternalServerError
NotFoundError: ClientError = errors.NotFoundError


class InvalidCursorError(BadRequestError):
    """
    Error raised if a page cursor token cannot be decoded.

    Attribute:
    • token: the offending token
    """

    def __init__(self, token: str):
        super().__init__(f"invalid page token: {token}")
        self.token = token


class StoreQueryError(InternalServerError):
    """
    Error raised if a store failed while a query was built or iterated. The underlying
    exception is chained as the cause.

    Attributes:
    • operation: name of the operation that issued the query
    • record_id: identifier of the record that could not be retrieved, if known
    """

    def __init__(self, operation: str, record_id: str | None = None):
        if record_id is not None:
            message = f"{operation}: failed to retrieve record {record_id} matching query"
        else:
            message = f"{operation}: failed to retrieve records matching query"
        super().__init__(message)
        self.operation = operation
        self.record_id = record_id


@contextmanager
def wrap_exception(
    *,
    catch: type[Exception] | tuple[type[Exception], ...] = Exception,
    throw: type[Exception] = InternalServerError,
):
    """
    Return a context manager that catches exception(s) and raises a different exception,
    chaining the caught exception as its cause. Service errors pass through unchanged.

    Parameters:
    • catch: exception class or tuple of classes to catch
    • throw: exception class to raise
    """
    try:
        yield
    except (throw, Error):
        raise
    except catch as e:
        raise throw(*e.args) from e
