"""Process-local config cache keyed by file path.

An entry is reloaded when the file's modification time changes, so a long
running ``serve`` picks up edits made with ``save_config`` or by hand on the
next ``get_config`` call.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path

from dotrpc.config.loader import get_config_path, load_config
from dotrpc.config.schema import Config

_lock = threading.RLock()
_cache: dict[Path, "_Entry"] = {}


@dataclass(slots=True)
class _Entry:
    config: Config
    mtime_ns: int | None


def _resolve(config_path: Path | str | None) -> Path:
    return Path(config_path or get_config_path()).expanduser().resolve()


def _mtime_ns(path: Path) -> int | None:
    try:
        return path.stat().st_mtime_ns
    except FileNotFoundError:
        return None


def get_config(*, config_path: Path | str | None = None, force_reload: bool = False) -> Config:
    """Return the cached config for ``config_path``, reloading it when stale."""
    path = _resolve(config_path)
    with _lock:
        entry = _cache.get(path)
        mtime = _mtime_ns(path)
        if force_reload or entry is None or entry.mtime_ns != mtime:
            entry = _Entry(config=load_config(path), mtime_ns=mtime)
            _cache[path] = entry
        return entry.config


def clear_config_cache(*, config_path: Path | str | None = None) -> None:
    """Drop one cached entry, or all of them when no path is given."""
    with _lock:
        if config_path is None:
            _cache.clear()
        else:
            _cache.pop(_resolve(config_path), None)
