"""Common RPC error-boundary helpers for server dispatch."""

from __future__ import annotations

import functools
import inspect
import types
from typing import Any, Callable

from dotrpc.rpc.protocol import ErrorResponse, RequestId
from dotrpc.utils.exceptions import (
    INTERNAL_ERROR,
    DotRpcError,
    InvalidParams,
    classify_exception,
    sanitize_error_message,
)


def rpc_error_result(
    *,
    method: str | None,
    req_id: RequestId | None,
    exc: DotRpcError,
    log_warning: Callable[[str, Any, Any, Any], None],
) -> ErrorResponse:
    """Map a DotRpcError raised during dispatch to an error entry."""
    log_warning("RPC method {} failed with [{}]: {}", method, exc.code, exc.message)
    return ErrorResponse(id=req_id, code=exc.code, message=exc.message, data=exc.data)


def unhandled_exception_result(
    *,
    method: str | None,
    req_id: RequestId | None,
    exc: BaseException,
    log_exception: Callable[[str, Any, Any, Any], None],
) -> ErrorResponse:
    """Map any other handler exception to an error entry.

    Exceptions exposing an integer ``code`` keep it along with their message;
    the rest become INTERNAL_ERROR.
    """
    code, _category = classify_exception(exc)
    sanitized = sanitize_error_message(str(exc))
    log_exception("RPC method {} failed with [{}]: {}", method, code, sanitized)
    if code == INTERNAL_ERROR:
        message = sanitized or "Internal error."
    else:
        message = str(getattr(exc, "message", "") or sanitized)
    return ErrorResponse(id=req_id, code=code, message=message, data=getattr(exc, "data", None))


def call_boundary_result(
    *,
    method: str | None,
    req_id: RequestId | None,
    exc: TypeError,
    log_warning: Callable[[str, Any, Any, Any], None],
) -> ErrorResponse:
    """Map an arity fault raised while entering the handler to INVALID_PARAMS."""
    err = InvalidParams(f"Invalid params: {sanitize_error_message(str(exc))}")
    return rpc_error_result(method=method, req_id=req_id, exc=err, log_warning=log_warning)


def top_level_error(exc: BaseException) -> ErrorResponse:
    """Build the single error reported when the whole call fails."""
    code, _category = classify_exception(exc)
    message = exc.message if isinstance(exc, DotRpcError) else sanitize_error_message(str(exc))
    if isinstance(exc, DotRpcError):
        return ErrorResponse(id=None, code=code, message=message, data=exc.data)
    return ErrorResponse(id=None, code=code, message=f"{type(exc).__name__}: {message}")


def is_call_boundary_error(exc: BaseException, target: Callable[..., Any] | None = None) -> bool:
    """True when ``exc`` was raised by the call itself, not inside the handler.

    The traceback of an exception caught right around ``target(*args)`` has a
    single frame when Python rejected the arguments before running the body.
    Natively implemented targets never add a frame of their own, so for them
    the traceback says nothing and the error counts as the handler's.
    """
    if not isinstance(exc, TypeError):
        return False
    if target is not None and is_native_callable(target):
        return False
    tb: types.TracebackType | None = exc.__traceback__
    if tb is None:
        return False
    # skip frames of the invoke helper itself
    while tb.tb_next is not None and tb.tb_next.tb_frame.f_globals.get("__name__") == "dotrpc.rpc.binder":
        tb = tb.tb_next
    return tb.tb_next is None


_NATIVE_TYPES = (
    types.BuiltinFunctionType,
    types.MethodDescriptorType,
    types.WrapperDescriptorType,
    types.MethodWrapperType,
    types.ClassMethodDescriptorType,
)


def is_native_callable(target: Callable[..., Any]) -> bool:
    """True for C-implemented functions, including ones wrapped by partial or a decorator."""
    target = inspect.unwrap(target)
    while isinstance(target, functools.partial):
        target = inspect.unwrap(target.func)
    return isinstance(target, _NATIVE_TYPES)
