"""JSON-RPC 2.0 client with dotted-name attribute chaining.

Usage:
    client = Client("http://127.0.0.1:8080/")
    client.echo("something")                   # method "echo"
    client.math.sum(25, 30, 45)                # method "math.sum"
    client.strings.hash.encode("text")         # method "strings.hash.encode"
    client.call("strings.hash.encode", "text") # explicit form
    client.set_option("timeout", 40.0)         # handed to the transport

Names defined on the class (``call``, ``batch``, ``debug``, ``set_option``...)
shadow remote methods of the same name; reach those with ``client.call``.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger

from dotrpc.client.transport import HttpTransport, Transport
from dotrpc.config.schema import ClientConfig
from dotrpc.rpc.protocol import (
    SEPARATOR,
    CallResult,
    Entry,
    Params,
    Request,
    decode_response,
    encode_request,
    to_call_result,
)
from dotrpc.utils.exceptions import TransportError


class Client:
    """Build requests from chained attribute access and send them."""

    def __init__(self, transport: Transport | str, *, config: ClientConfig | None = None):
        cfg = config or ClientConfig()
        if isinstance(transport, str):
            transport = HttpTransport(transport, timeout=cfg.timeout_seconds, headers=cfg.headers)
        self.transport = transport
        self._callstack: list[str] = []
        self._id = 0
        self._options: dict[str, Any] = {}
        self._debug = cfg.debug
        self.last_request: str | None = None
        self.last_response: str | None = None

    def __getattr__(self, name: str) -> "Client":
        if name.startswith("_"):
            raise AttributeError(name)
        self._callstack.append(name)
        return self

    def __call__(self, *args: Any, **kwargs: Any) -> CallResult:
        if not self._callstack:
            raise TypeError("no method selected; use client.<method>(...) or client.call(name, ...)")
        method = self._callstack.pop()
        return self.call(method, *args, **kwargs)

    @property
    def pending_path(self) -> str:
        return SEPARATOR.join(self._callstack)

    def set_option(self, name: str, value: Any) -> None:
        """Store an opaque transport option (e.g. ``timeout``) for later calls."""
        self._options[name] = value

    def debug(self, enable: bool = True) -> None:
        """Keep the raw request/response of the last call in last_request/last_response."""
        self._debug = bool(enable)

    def call(self, method: str, *args: Any, **kwargs: Any) -> CallResult:
        """Invoke ``method`` with positional or named arguments (not both)."""
        if args and kwargs:
            raise ValueError("JSON-RPC calls take either positional or named arguments, not both")
        params: Params = dict(kwargs) if kwargs else list(args)
        request = self._request(self._consume_path(method), params)
        entry = self._exchange(encode_request(request))
        if isinstance(entry, list):
            entry = entry[0] if entry else None
        return to_call_result(entry)

    def batch(self, method: str, params_list: Iterable[Any]) -> list[CallResult]:
        """Call ``method`` once per params entry in a single batch request."""
        name = self._consume_path(method)
        requests = [self._request(name, _as_params(params)) for params in params_list]
        if not requests:
            raise ValueError("batch requires at least one params entry")
        entry = self._exchange(encode_request(requests))
        if not isinstance(entry, list):
            # a top-level error answers the batch as a whole
            return [to_call_result(entry) for _ in requests]
        by_id = {e.id: e for e in entry if e.id is not None}
        return [to_call_result(by_id.get(r.id)) for r in requests]

    def _consume_path(self, method: str) -> str:
        if SEPARATOR not in method and self._callstack:
            method = SEPARATOR.join([*self._callstack, method])
        self._callstack = []
        return method

    def _request(self, method: str, params: Params) -> Request:
        request = Request(method=method, params=params, id=self._id)
        self._id += 1
        return request

    def _exchange(self, raw_request: str) -> Entry | list[Entry] | None:
        logger.debug("RPC request {}", raw_request)
        raw = self.transport.send(raw_request.encode("utf-8"), dict(self._options))
        if self._debug:
            self.last_request = raw_request
            self.last_response = raw.decode("utf-8", errors="replace")
        try:
            return decode_response(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise TransportError("rpc bad response: non-json body") from exc


def _as_params(params: Any) -> Params:
    if params is None or isinstance(params, (list, dict)):
        return params
    if isinstance(params, Mapping):
        return dict(params)
    if isinstance(params, tuple):
        return list(params)
    return [params]
