import functools
import math

from dotrpc.rpc.error_boundary import (
    call_boundary_result,
    is_call_boundary_error,
    rpc_error_result,
    is_native_callable,
    top_level_error,
    unhandled_exception_result,
)
from dotrpc.utils.exceptions import InvalidRequest, MethodNotFound, ParseError


def test_rpc_error_result_logs_and_maps():
    calls = []
    res = rpc_error_result(
        method="x.y",
        req_id=1,
        exc=MethodNotFound(),
        log_warning=lambda fmt, m, code, msg: calls.append((m, code)),
    )
    assert (res.id, res.code, res.message) == (1, -32601, "Method not found.")
    assert calls == [("x.y", -32601)]


def test_unhandled_exception_result_logs_and_maps():
    calls = []
    res = unhandled_exception_result(
        method="abc",
        req_id="7",
        exc=RuntimeError("boom"),
        log_exception=lambda fmt, m, code, msg: calls.append((m, code, msg)),
    )
    assert (res.id, res.code, res.message) == ("7", -32603, "boom")
    assert calls == [("abc", -32603, "boom")]


def test_unhandled_exception_result_redacts_secrets():
    res = unhandled_exception_result(
        method="abc",
        req_id=1,
        exc=RuntimeError("login failed password=hunter2"),
        log_exception=lambda *args: None,
    )
    assert "hunter2" not in res.message


def test_unhandled_exception_without_message():
    res = unhandled_exception_result(method="abc", req_id=1, exc=RuntimeError(), log_exception=lambda *args: None)
    assert res.message == "Internal error."


def test_call_boundary_result_is_invalid_params():
    res = call_boundary_result(
        method="m",
        req_id=1,
        exc=TypeError("takes 1 positional argument but 2 were given"),
        log_warning=lambda *args: None,
    )
    assert res.code == -32602
    assert "takes 1 positional argument" in res.message


def test_top_level_error():
    assert top_level_error(ParseError()).to_dict() == {
        "jsonrpc": "2.0",
        "error": {"code": -32700, "message": "Parse error."},
        "id": None,
    }
    assert top_level_error(InvalidRequest("denied")).message == "denied"
    err = top_level_error(KeyError("token"))
    assert (err.code, err.message) == (-32603, "KeyError: 'token'")


def _one_arg(value):
    return value


def _raises_inside(value):
    raise TypeError("inside")


def _caught(func, *args):
    try:
        func(*args)
    except TypeError as exc:
        return exc
    raise AssertionError("expected TypeError")


def test_is_call_boundary_error():
    assert is_call_boundary_error(_caught(_one_arg, 1, 2)) is True
    assert is_call_boundary_error(_caught(_raises_inside, 1)) is False
    assert is_call_boundary_error(ValueError("x")) is False
    assert is_call_boundary_error(TypeError("never raised")) is False


def test_native_targets_never_report_call_boundary():
    exc = _caught(math.floor, "x")
    assert is_call_boundary_error(exc) is True
    assert is_call_boundary_error(exc, math.floor) is False
    assert is_call_boundary_error(_caught(_one_arg, 1, 2), _one_arg) is True


def test_is_native_callable():
    assert is_native_callable(math.floor) is True
    assert is_native_callable(str.upper) is True
    assert is_native_callable(functools.partial(math.pow, 2)) is True
    assert is_native_callable(_one_arg) is False
    assert is_native_callable(functools.partial(_one_arg)) is False
