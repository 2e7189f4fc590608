"""Helpers for the ``serve`` and ``methods`` commands."""

from __future__ import annotations

import errno
import importlib
import socket
from types import ModuleType

REGISTER_HOOK = "register_handlers"

_BUSY_ERRNOS = {errno.EADDRINUSE, errno.EACCES}


class HandlerModuleError(RuntimeError):
    """Handler module cannot be imported or has no registration hook."""


def load_handler_module(name: str) -> ModuleType:
    """Import ``name`` and check that it defines ``register_handlers(server)``."""
    try:
        module = importlib.import_module(name)
    except ImportError as e:
        raise HandlerModuleError(f"Cannot import handler module {name!r}: {e}") from e
    if not callable(getattr(module, REGISTER_HOOK, None)):
        raise HandlerModuleError(f"Module {name!r} does not define {REGISTER_HOOK}(server).")
    return module


def port_is_busy(host: str, port: int) -> bool:
    """True when binding ``host:port`` fails because it is taken or not permitted."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    probe = socket.socket(family, socket.SOCK_STREAM)
    try:
        probe.bind((host, port))
    except OSError as e:
        if e.errno in _BUSY_ERRNOS:
            return True
        raise
    finally:
        probe.close()
    return False


def endpoint_url(host: str, port: int, path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    shown = f"[{host}]" if ":" in host else host
    return f"http://{shown}:{port}{path}"
