"""Argument binding for registered handlers.

A ``CallableDescriptor`` is computed once, when a handler is registered, and
``bind`` turns JSON-RPC params (list or mapping) into call arguments.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable

from dotrpc.utils.exceptions import InvalidParams

_POSITIONAL_KINDS = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(slots=True, frozen=True)
class ParameterSpec:
    """One declared handler parameter."""

    name: str
    optional: bool = False
    default: Any = None
    keyword_only: bool = False
    positional_only: bool = False


@dataclass(slots=True)
class CallableDescriptor:
    """Invocation target plus the parameter list it was registered with."""

    target: Callable[..., Any]
    parameters: tuple[ParameterSpec, ...] = ()
    variadic: bool = False
    accepts_kwargs: bool = False
    path: str = ""

    @property
    def required_count(self) -> int:
        """Number of positional parameters without a default."""
        return sum(1 for p in self.parameters if not p.optional and not p.keyword_only)

    @property
    def arity(self) -> int:
        return sum(1 for p in self.parameters if not p.keyword_only)

    def invoke(self, bound: "BoundArguments") -> Any:
        return self.target(*bound.args, **bound.kwargs)


@dataclass(slots=True)
class BoundArguments:
    """Ordered positional arguments plus keyword-only ones."""

    args: list[Any] = field(default_factory=list)
    kwargs: dict[str, Any] = field(default_factory=dict)


def describe(target: Callable[..., Any], *, path: str = "") -> CallableDescriptor:
    """Capture the parameter list of ``target``.

    Callables without an introspectable signature (some builtins) are treated
    as fully variadic.
    """
    if not callable(target):
        raise TypeError(f"handler for {path or target!r} is not callable")
    try:
        signature = inspect.signature(target)
    except (TypeError, ValueError):
        return CallableDescriptor(target=target, variadic=True, path=path)

    specs: list[ParameterSpec] = []
    variadic = False
    accepts_kwargs = False
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            variadic = True
            continue
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            accepts_kwargs = True
            continue
        has_default = param.default is not inspect.Parameter.empty
        specs.append(
            ParameterSpec(
                name=param.name,
                optional=has_default,
                default=param.default if has_default else None,
                keyword_only=param.kind is inspect.Parameter.KEYWORD_ONLY,
                positional_only=param.kind is inspect.Parameter.POSITIONAL_ONLY,
            )
        )
    return CallableDescriptor(
        target=target,
        parameters=tuple(specs),
        variadic=variadic,
        accepts_kwargs=accepts_kwargs,
        path=path,
    )


def bind(descriptor: CallableDescriptor, params: Any) -> BoundArguments:
    """Bind request params to the descriptor.

    Raises:
        InvalidParams: a required parameter is missing.
    """
    if isinstance(params, dict):
        return _bind_named(descriptor, params)
    if params is None:
        params = []
    return _bind_positional(descriptor, list(params))


def _bind_named(descriptor: CallableDescriptor, params: dict[str, Any]) -> BoundArguments:
    bound = BoundArguments()
    for spec in descriptor.parameters:
        if spec.name in params:
            value = params[spec.name]
        elif spec.optional:
            value = spec.default
        else:
            raise InvalidParams(f"Invalid params: missing required parameter '{spec.name}'.")
        if spec.keyword_only:
            bound.kwargs[spec.name] = value
        else:
            bound.args.append(value)
    if descriptor.accepts_kwargs:
        known = {spec.name for spec in descriptor.parameters}
        for name, value in params.items():
            if name not in known:
                bound.kwargs[name] = value
    return bound


def _bind_positional(descriptor: CallableDescriptor, params: list[Any]) -> BoundArguments:
    if len(params) < descriptor.required_count:
        raise InvalidParams(
            f"Invalid params: expected at least {descriptor.required_count} arguments, got {len(params)}."
        )
    missing_keyword = [s.name for s in descriptor.parameters if s.keyword_only and not s.optional]
    if missing_keyword:
        raise InvalidParams(f"Invalid params: '{missing_keyword[0]}' can only be passed by name.")
    # extra values are forwarded as-is for variadic handlers
    return BoundArguments(args=params)
