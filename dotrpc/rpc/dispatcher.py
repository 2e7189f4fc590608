"""Per-item request dispatch against a HandlerRegistry."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable

from loguru import logger

from dotrpc.rpc.binder import CallableDescriptor, bind
from dotrpc.rpc.error_boundary import (
    call_boundary_result,
    is_call_boundary_error,
    rpc_error_result,
    unhandled_exception_result,
)
from dotrpc.rpc.normalizer import request_id, validate_request
from dotrpc.rpc.protocol import Entry, NormalizedInput, Request, Response, json_default
from dotrpc.rpc.registry import HandlerRegistry
from dotrpc.utils.exceptions import DotRpcError


@dataclass(slots=True)
class CallContext:
    """What the last dispatched item asked for; readable from hooks."""

    method: str = ""
    params: Any = None
    version: str | None = None
    request: Request | None = None


@dataclass(slots=True)
class DispatchOutcome:
    """Entries produced for one ``handle`` call plus the input shape."""

    entries: list[Entry] = field(default_factory=list)
    is_batch: bool = False


class Dispatcher:
    """Resolve, bind and invoke each request item in order."""

    def __init__(
        self,
        registry: HandlerRegistry,
        *,
        strict_version: bool = False,
        on_item: Callable[[CallContext], None] | None = None,
    ):
        self.registry = registry
        self.strict_version = strict_version
        self._on_item = on_item

    def handle(self, normalized: NormalizedInput) -> DispatchOutcome:
        """Dispatch every item; one item's failure never aborts the others."""
        outcome = DispatchOutcome(is_batch=normalized.is_batch)
        for item in normalized.items:
            entry = self.dispatch(item)
            if entry is not None:
                outcome.entries.append(entry)
        return outcome

    def dispatch(self, item: Any) -> Entry | None:
        """Process one item; return its entry or None for notifications."""
        try:
            request = validate_request(item, strict_version=self.strict_version)
        except DotRpcError as exc:
            method = item.get("method") if isinstance(item, dict) else None
            return rpc_error_result(
                method=method,
                req_id=request_id(item),
                exc=exc,
                log_warning=logger.warning,
            )

        if self._on_item is not None:
            self._on_item(
                CallContext(method=request.method, params=request.params, version=request.version, request=request)
            )

        entry = self._execute(request)
        if request.is_notification:
            if not isinstance(entry, Response):
                logger.debug("Dropping error of notification {}", request.method)
            return None
        return entry

    def _execute(self, request: Request) -> Entry:
        method = request.method
        try:
            descriptor = self.registry.resolve(method)
            bound = bind(descriptor, request.params)
        except DotRpcError as exc:
            return rpc_error_result(method=method, req_id=request.id, exc=exc, log_warning=logger.warning)

        try:
            result = descriptor.invoke(bound)
        except DotRpcError as exc:
            return rpc_error_result(method=method, req_id=request.id, exc=exc, log_warning=logger.warning)
        except TypeError as exc:
            if is_call_boundary_error(exc, descriptor.target) or _exceeds_arity(descriptor, request.params):
                return call_boundary_result(method=method, req_id=request.id, exc=exc, log_warning=logger.warning)
            return unhandled_exception_result(
                method=method, req_id=request.id, exc=exc, log_exception=logger.exception
            )
        except Exception as exc:
            return unhandled_exception_result(
                method=method, req_id=request.id, exc=exc, log_exception=logger.exception
            )

        if not request.is_notification:
            try:
                json.dumps(result, default=json_default)
            except (TypeError, ValueError) as exc:
                return unhandled_exception_result(
                    method=method, req_id=request.id, exc=exc, log_exception=logger.exception
                )

        logger.debug("RPC method {} completed (id={})", method, request.id)
        return Response(id=request.id, result=result)


def _exceeds_arity(descriptor: CallableDescriptor, params: Any) -> bool:
    """Positional params beyond what a fixed-arity handler declares."""
    return not descriptor.variadic and isinstance(params, list) and len(params) > descriptor.arity
