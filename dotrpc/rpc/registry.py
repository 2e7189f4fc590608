"""Hierarchical handler registry addressed by dotted method names.

Registering ``"math.sum"`` creates namespace ``math`` holding leaf ``sum``.
Leaves are ``CallableDescriptor`` objects computed at registration time.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterator, Mapping
from typing import Any, Callable, Union

from loguru import logger

from dotrpc.rpc.binder import CallableDescriptor, describe
from dotrpc.rpc.protocol import SEPARATOR
from dotrpc.utils.exceptions import MethodNotFound, RegistrationError

# values whose public methods must never become endpoints
_PLAIN_VALUES = (str, bytes, bytearray, int, float, complex, list, tuple, set, frozenset)


class Namespace:
    """Internal registry node mapping names to child nodes."""

    def __init__(self, name: str = ""):
        self.name = name
        self.children: dict[str, Node] = {}

    def get(self, name: str) -> "Node | None":
        return self.children.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.children

    def __len__(self) -> int:
        return len(self.children)

    def __repr__(self) -> str:
        return f"Namespace({self.name!r}, children={sorted(self.children)})"


Node = Union[Namespace, CallableDescriptor]


def split_path(path: str) -> list[str]:
    """Split a dotted path, rejecting empty segments."""
    if not isinstance(path, str) or not path:
        raise RegistrationError(f"invalid handler path: {path!r}")
    parts = path.split(SEPARATOR)
    if any(not part for part in parts):
        raise RegistrationError(f"invalid handler path: {path!r}")
    return parts


class HandlerRegistry:
    """
    Registry of RPC handlers.

    Usage:
        registry = HandlerRegistry()
        registry.register("math.sum", lambda *xs: sum(xs))
        registry.register("users", UserService())   # public methods -> users.*

        @registry.method("strings.upper")
        def upper(value):
            return value.upper()
    """

    def __init__(self) -> None:
        self._root = Namespace()

    @property
    def root(self) -> Namespace:
        return self._root

    def register(self, path: str, target: Any) -> None:
        """Register a callable, mapping, Namespace or object under ``path``."""
        parts = split_path(path)
        if target is None or isinstance(target, _PLAIN_VALUES):
            raise RegistrationError(f"cannot register {path!r}: {type(target).__name__} is not a handler")
        parent = self._ensure_namespace(parts[:-1], path)
        name = parts[-1]

        if isinstance(target, CallableDescriptor):
            self._attach_leaf(parent, name, target, path)
        elif isinstance(target, Namespace):
            for child_name, child in target.children.items():
                self.register(f"{path}{SEPARATOR}{child_name}", child)
            self._ensure_namespace(parts, path)
        elif isinstance(target, Mapping):
            self._ensure_namespace(parts, path)
            for child_name, child in target.items():
                self.register(f"{path}{SEPARATOR}{child_name}", child)
        elif callable(target):
            self._attach_leaf(parent, name, describe(target, path=path), path)
        else:
            self._ensure_namespace(parts, path)
            for member_name, member in inspect.getmembers(target, callable):
                if member_name.startswith("_"):
                    continue
                self.register(f"{path}{SEPARATOR}{member_name}", member)

    def method(self, path: str | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator to register a handler under ``path`` (defaults to its name)."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.register(path or func.__name__, func)
            return func

        return decorator

    def resolve(self, path: str) -> CallableDescriptor:
        """Resolve ``path`` to a leaf descriptor.

        Raises:
            MethodNotFound: a segment is missing or the final node is a namespace.
        """
        try:
            parts = split_path(path)
        except RegistrationError:
            raise MethodNotFound() from None
        node: Node = self._root
        for part in parts:
            if not isinstance(node, Namespace):
                raise MethodNotFound()
            child = node.get(part)
            if child is None:
                raise MethodNotFound()
            node = child
        if not isinstance(node, CallableDescriptor):
            raise MethodNotFound()
        return node

    def unregister(self, path: str) -> bool:
        """Remove the node at ``path``; return True if removed."""
        try:
            parts = split_path(path)
        except RegistrationError:
            return False
        node = self._find(parts[:-1])
        if not isinstance(node, Namespace) or parts[-1] not in node:
            return False
        del node.children[parts[-1]]
        logger.debug("Unregistered RPC node {}", path)
        return True

    def contains(self, path: str) -> bool:
        """Check if a leaf or namespace exists at ``path``."""
        try:
            parts = split_path(path)
        except RegistrationError:
            return False
        return self._find(parts) is not None

    def list_methods(self) -> list[str]:
        """List all registered leaf paths."""
        return sorted(self._walk(self._root, ""))

    def __contains__(self, path: str) -> bool:
        return self.contains(path)

    def __len__(self) -> int:
        return len(self.list_methods())

    def _find(self, parts: list[str]) -> Node | None:
        node: Node = self._root
        for part in parts:
            if not isinstance(node, Namespace):
                return None
            child = node.get(part)
            if child is None:
                return None
            node = child
        return node

    def _ensure_namespace(self, parts: list[str], path: str) -> Namespace:
        node = self._root
        for part in parts:
            child = node.get(part)
            if child is None:
                child = Namespace(part)
                node.children[part] = child
            elif not isinstance(child, Namespace):
                raise RegistrationError(f"cannot register {path!r}: {part!r} is already a handler")
            node = child
        return node

    def _attach_leaf(self, parent: Namespace, name: str, descriptor: CallableDescriptor, path: str) -> None:
        existing = parent.get(name)
        if isinstance(existing, Namespace):
            raise RegistrationError(f"cannot register {path!r}: name is already a namespace")
        if existing is not None:
            logger.debug("Replacing RPC handler {}", path)
        if descriptor.path != path:
            descriptor = CallableDescriptor(
                target=descriptor.target,
                parameters=descriptor.parameters,
                variadic=descriptor.variadic,
                accepts_kwargs=descriptor.accepts_kwargs,
                path=path,
            )
        parent.children[name] = descriptor
        logger.debug("Registered RPC handler {}", path)

    def _walk(self, node: Namespace, prefix: str) -> Iterator[str]:
        for name, child in node.children.items():
            path = f"{prefix}{SEPARATOR}{name}" if prefix else name
            if isinstance(child, Namespace):
                yield from self._walk(child, path)
            else:
                yield path
