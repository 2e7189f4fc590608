"""Server-side JSON-RPC 2.0 engine.

Registry, argument binding, dispatch, response shaping and lifecycle hooks.
"""

from __future__ import annotations

from dotrpc.rpc.binder import BoundArguments, CallableDescriptor, ParameterSpec, bind, describe
from dotrpc.rpc.dispatcher import CallContext, DispatchOutcome, Dispatcher
from dotrpc.rpc.hooks import HookBus, HookPhase
from dotrpc.rpc.normalizer import normalize, normalize_query, validate_request
from dotrpc.rpc.protocol import (
    JSONRPC_VERSION,
    CallResult,
    ErrorResponse,
    NormalizedInput,
    Request,
    Response,
    decode_response,
    encode_request,
)
from dotrpc.rpc.registry import HandlerRegistry, Namespace
from dotrpc.rpc.server import Server

__all__ = [
    # Protocol
    "JSONRPC_VERSION",
    "Request",
    "Response",
    "ErrorResponse",
    "CallResult",
    "NormalizedInput",
    "encode_request",
    "decode_response",
    # Registry and binding
    "HandlerRegistry",
    "Namespace",
    "CallableDescriptor",
    "ParameterSpec",
    "BoundArguments",
    "describe",
    "bind",
    # Dispatch
    "normalize",
    "normalize_query",
    "validate_request",
    "Dispatcher",
    "DispatchOutcome",
    "CallContext",
    "HookBus",
    "HookPhase",
    "Server",
]
