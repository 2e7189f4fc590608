"""
Exception hierarchy and error handling utilities for dotrpc.

Provides:
- JSON-RPC error classes carrying the protocol error codes
- Error categorization used for logging and HTTP status mapping
- Safe error message formatting (no sensitive data leak)
"""

from __future__ import annotations

import json
import re
from enum import Enum
from typing import Any

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ErrorCategory(Enum):
    """Error categories for classification."""
    PROTOCOL = "protocol"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    APPLICATION = "application"
    TRANSPORT = "transport"
    FATAL = "fatal"


class DotRpcError(Exception):
    """Base exception for all errors that map onto a JSON-RPC error object."""

    default_code = INTERNAL_ERROR
    default_message = "Internal error."
    default_category = ErrorCategory.FATAL

    def __init__(
        self,
        message: str | None = None,
        code: int | None = None,
        data: Any = None,
        category: ErrorCategory | None = None,
    ):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.code = self.default_code if code is None else int(code)
        self.data = data
        self.category = category or self.default_category

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-RPC ``error`` member for this exception."""
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ParseError(DotRpcError):
    """Top-level payload is not valid JSON."""
    default_code = PARSE_ERROR
    default_message = "Parse error."
    default_category = ErrorCategory.PROTOCOL


class InvalidRequest(DotRpcError):
    """Request item failed structural validation."""
    default_code = INVALID_REQUEST
    default_message = "Invalid Request."
    default_category = ErrorCategory.PROTOCOL


class MethodNotFound(DotRpcError):
    """Dotted path does not resolve to a callable."""
    default_code = METHOD_NOT_FOUND
    default_message = "Method not found."
    default_category = ErrorCategory.NOT_FOUND


class InvalidParams(DotRpcError):
    """Arguments do not match the handler signature."""
    default_code = INVALID_PARAMS
    default_message = "Invalid params."
    default_category = ErrorCategory.VALIDATION


class InternalError(DotRpcError):
    """Unexpected runtime fault during dispatch."""
    default_code = INTERNAL_ERROR
    default_message = "Internal error."
    default_category = ErrorCategory.FATAL


class ApplicationError(DotRpcError):
    """Failure raised by a handler with its own code and message.

    Usage:
        raise ApplicationError(-32001, "Account is locked", data={"account": 7})
    """

    default_category = ErrorCategory.APPLICATION

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message, code=code, data=data)


class RegistrationError(ValueError):
    """Handler registration would break the namespace tree."""


class InvalidStateError(RuntimeError):
    """Server output requested before ``handle`` ran."""


class TransportError(DotRpcError):
    """Client transport failed to deliver a request or read the reply."""

    default_code = INTERNAL_ERROR
    default_message = "Transport error."
    default_category = ErrorCategory.TRANSPORT

    def __init__(self, message: str, *, status_code: int | None = None, retryable: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"sk-[a-zA-Z0-9]{20,}"),
    re.compile(r"[a-zA-Z0-9]{32,}"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove sensitive information from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: BaseException) -> tuple[int, ErrorCategory]:
    """
    Classify an exception and return (json_rpc_code, category).

    Exceptions that carry an integer ``code`` attribute keep it; everything
    else is an internal error.
    """
    if isinstance(exc, DotRpcError):
        return exc.code, exc.category

    code = getattr(exc, "code", None)
    if isinstance(code, int) and not isinstance(code, bool):
        return code, ErrorCategory.APPLICATION

    if isinstance(exc, json.JSONDecodeError):
        return PARSE_ERROR, ErrorCategory.PROTOCOL

    return INTERNAL_ERROR, ErrorCategory.FATAL
