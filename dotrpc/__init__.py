"""dotrpc - JSON-RPC 2.0 server and client with dotted method namespaces."""

__version__ = "0.1.0"
__logo__ = "⚡"

from dotrpc.client import Client, HttpTransport, LocalTransport
from dotrpc.rpc import CallResult, HandlerRegistry, HookPhase, Server
from dotrpc.utils.exceptions import (
    ApplicationError,
    DotRpcError,
    InternalError,
    InvalidParams,
    InvalidRequest,
    MethodNotFound,
    ParseError,
)

__all__ = [
    "__version__",
    "Server",
    "Client",
    "HttpTransport",
    "LocalTransport",
    "HandlerRegistry",
    "HookPhase",
    "CallResult",
    "DotRpcError",
    "ParseError",
    "InvalidRequest",
    "MethodNotFound",
    "InvalidParams",
    "InternalError",
    "ApplicationError",
]
