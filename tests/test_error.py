import ecomm.error as error
import pytest


def test_get_error_code():
    assert error.errors[400] == error.BadRequestError
    assert error.errors[404] == error.NotFoundError
    assert error.errors[409] == error.ConflictError
    assert error.errors[500] == error.InternalServerError
    assert error.errors[504] == error.GatewayTimeoutError


def test_get_error_name():
    assert error.errors.NotFoundError is error.NotFoundError
    with pytest.raises(AttributeError):
        error.errors.NoSuchError


def test_error_class_hierarchy():
    assert issubclass(error.BadRequestError, error.ClientError)
    assert issubclass(error.InternalServerError, error.ServerError)
    assert error.NotFoundError.status == 404


def test_wrap_exception():
    try:
        with error.wrap_exception(catch=ValueError, throw=RuntimeError):
            raise ValueError("oops")
    except RuntimeError as re:
        cause = re.__cause__
        assert type(cause) is ValueError
        assert cause.args == ("oops",)


def test_wrap_exception_passes_service_error():
    with pytest.raises(error.ConflictError):
        with error.wrap_exception(throw=error.InternalServerError):
            raise error.ConflictError("exists")


def test_invalid_cursor_error():
    e = error.InvalidCursorError("bad,token,here")
    assert isinstance(e, error.BadRequestError)
    assert e.token == "bad,token,here"
    assert str(e) == "invalid page token: bad,token,here"


def test_store_query_error_record():
    e = error.StoreQueryError("get orders", "abc")
    assert isinstance(e, error.InternalServerError)
    assert e.record_id == "abc"
    assert str(e) == "get orders: failed to retrieve record abc matching query"


def test_store_query_error_no_record():
    e = error.StoreQueryError("get tasks")
    assert e.record_id is None
    assert str(e) == "get tasks: failed to retrieve records matching query"
