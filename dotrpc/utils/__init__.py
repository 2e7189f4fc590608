"""Utility functions for dotrpc."""

from dotrpc.utils.exceptions import (
    PARSE_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
    INTERNAL_ERROR,
    DotRpcError,
    ParseError,
    InvalidRequest,
    MethodNotFound,
    InvalidParams,
    InternalError,
    ApplicationError,
    RegistrationError,
    InvalidStateError,
    TransportError,
    ErrorCategory,
    classify_exception,
    sanitize_error_message,
)

__all__ = [
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "DotRpcError",
    "ParseError",
    "InvalidRequest",
    "MethodNotFound",
    "InvalidParams",
    "InternalError",
    "ApplicationError",
    "RegistrationError",
    "InvalidStateError",
    "TransportError",
    "ErrorCategory",
    "classify_exception",
    "sanitize_error_message",
]
