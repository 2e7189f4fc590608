"""JSON-RPC 2.0 server: registry, hooks and the request/response cycle.

Usage:
    server = Server()
    server.register("math.sum", lambda *xs: sum(xs))
    server.register("users", UserService())        # users.<public method>
    server.add_hook("before_call", check_token)

    # standalone: the reply is written to stdout
    server.handle('{"jsonrpc": "2.0", "method": "math.sum", "params": [1, 2], "id": 1}')

    # embedded: the framework delivers the reply itself
    server.suppress_output()
    server.handle(body)
    send(server.get_raw_output())
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from typing import Any, Callable

from loguru import logger

from dotrpc.config.schema import ServerConfig
from dotrpc.rpc import response
from dotrpc.rpc.binder import CallableDescriptor
from dotrpc.rpc.dispatcher import CallContext, Dispatcher
from dotrpc.rpc.error_boundary import top_level_error
from dotrpc.rpc.hooks import Hook, HookBus, HookPhase
from dotrpc.rpc.normalizer import normalize, normalize_query
from dotrpc.rpc.protocol import NormalizedInput
from dotrpc.rpc.registry import HandlerRegistry
from dotrpc.utils.exceptions import InvalidRequest, InvalidStateError, ParseError


def _stdout_writer(raw: str) -> None:
    sys.stdout.write(raw)
    sys.stdout.flush()


class Server:
    """Handler namespace plus the request/response cycle around it."""

    def __init__(
        self,
        config: ServerConfig | None = None,
        *,
        registry: HandlerRegistry | None = None,
        writer: Callable[[str], None] | None = None,
        reader: Callable[[], str | bytes | None] | None = None,
    ):
        self.config = config or ServerConfig()
        self.registry = registry or HandlerRegistry()
        self.hooks = HookBus()
        self.last = CallContext()
        self._writer = writer or _stdout_writer
        self._reader = reader
        self._suppress_output = self.config.suppress_output
        self._output: Any = None
        self._raw_output = ""
        self._handled = False
        self._is_error = False
        self._dispatcher = Dispatcher(
            self.registry,
            strict_version=self.config.strict_version,
            on_item=self._remember,
        )

    # -- registry -----------------------------------------------------------

    def register(self, path: str, target: Any) -> "Server":
        self.registry.register(path, target)
        return self

    def method(self, path: str | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        return self.registry.method(path)

    def unregister(self, path: str) -> bool:
        return self.registry.unregister(path)

    def contains(self, path: str) -> bool:
        return self.registry.contains(path)

    def resolve(self, path: str) -> CallableDescriptor:
        return self.registry.resolve(path)

    def list_methods(self) -> list[str]:
        return self.registry.list_methods()

    # -- hooks --------------------------------------------------------------

    def add_hook(self, phase: HookPhase | str, callback: Hook) -> "Server":
        """Append ``callback`` to ``phase``; it is called with this server."""
        self.hooks.add(phase, callback)
        return self

    def clear_hooks(self, phase: HookPhase | str | None = None) -> "Server":
        self.hooks.clear(phase)
        return self

    # -- output -------------------------------------------------------------

    def suppress_output(self, suppress: bool = True) -> "Server":
        """Stop writing replies; read them with get_output()/get_raw_output()."""
        self._suppress_output = bool(suppress)
        return self

    @property
    def output_suppressed(self) -> bool:
        return self._suppress_output

    def get_output(self) -> Any:
        """Structured reply of the last ``handle`` call (None for notifications)."""
        if not self._handled:
            raise InvalidStateError("Output requested before handle() was called")
        return self._output

    def get_raw_output(self) -> str:
        """Serialized reply of the last ``handle`` call ("" for notifications)."""
        if not self._handled:
            raise InvalidStateError("Output requested before handle() was called")
        return self._raw_output

    def is_error(self) -> bool:
        """True when the last ``handle`` call ended in a top-level error."""
        return self._is_error

    # -- cycle --------------------------------------------------------------

    def handle(self, raw: Any = None, *, query: Mapping[str, Any] | None = None) -> Any:
        """Process one inbound payload and return the structured reply.

        Args:
            raw: JSON text/bytes, or an already parsed request or batch. When
                omitted the payload comes from ``query`` or the reader.
            query: key-value query parameters of a GET-style call.

        Returns:
            The reply dict, a list for batches, or None when nothing is sent.
        """
        self.last = CallContext()
        self._is_error = False

        try:
            self.hooks.fire(HookPhase.BEFORE_CALL, self)
        except Exception as exc:
            logger.warning("before_call hook aborted the call: {}", exc)
            return self._fail(exc)

        try:
            normalized = self._normalize(raw, query)
            if not normalized.items:
                raise InvalidRequest()
            outcome = self._dispatcher.handle(normalized)
            output = response.build(outcome)
            raw_output = response.serialize(output)
        except Exception as exc:
            logger.warning("RPC call failed before a reply could be built: {}", exc)
            return self._fail(exc)

        self._set_output(output, raw_output)
        self.hooks.fire(HookPhase.ON_SUCCESS, self)
        return self._end()

    def _normalize(self, raw: Any, query: Mapping[str, Any] | None) -> NormalizedInput:
        if raw is None and query is not None and "method" in query:
            return normalize_query(query, allow_get_calls=self.config.allow_get_calls)
        if raw is None:
            raw = self._reader() if self._reader is not None else None
            if raw is None:
                raise ParseError("Null input")
        return normalize(raw)

    def _remember(self, context: CallContext) -> None:
        self.last = context

    def _fail(self, exc: BaseException) -> Any:
        error = response.build_error(top_level_error(exc))
        self._is_error = True
        self._set_output(error, response.serialize(error))
        self.hooks.fire(HookPhase.ON_ERROR, self)
        return self._end()

    def _set_output(self, output: Any, raw_output: str) -> None:
        self._output = output
        self._raw_output = raw_output
        self._handled = True

    def _end(self) -> Any:
        if not self._suppress_output and self._raw_output:
            self._writer(self._raw_output)
        return self._output
