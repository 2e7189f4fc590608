"""Lifecycle hooks fired around a whole ``Server.handle`` cycle."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Iterable

from loguru import logger

Hook = Callable[[Any], Any]


class HookPhase(str, Enum):
    """Points in the call cycle where hooks run."""
    BEFORE_CALL = "before_call"
    ON_SUCCESS = "on_success"
    ON_ERROR = "on_error"


_ALIASES = {
    "beforecall": HookPhase.BEFORE_CALL,
    "onbeforecall": HookPhase.BEFORE_CALL,
    "onsuccess": HookPhase.ON_SUCCESS,
    "success": HookPhase.ON_SUCCESS,
    "onerror": HookPhase.ON_ERROR,
    "error": HookPhase.ON_ERROR,
}


def to_phase(phase: HookPhase | str) -> HookPhase:
    """Accept enum members, their values, or camel/kebab spellings."""
    if isinstance(phase, HookPhase):
        return phase
    key = str(phase).strip().lower().replace("-", "").replace("_", "")
    for member in HookPhase:
        if member.value.replace("_", "") == key:
            return member
    if key in _ALIASES:
        return _ALIASES[key]
    raise ValueError(
        f'Hook phase "{phase}" is not valid. Use before_call, on_success or on_error.'
    )


class HookBus:
    """Ordered callback lists per phase.

    Adding always appends; only ``clear`` removes entries.
    """

    def __init__(self) -> None:
        self._hooks: dict[HookPhase, list[Hook]] = {phase: [] for phase in HookPhase}

    def add(self, phase: HookPhase | str, callback: Hook) -> "HookBus":
        if not callable(callback):
            raise TypeError(f"Hook {callback!r} is not callable")
        self._hooks[to_phase(phase)].append(callback)
        return self

    def extend(self, phase: HookPhase | str, callbacks: Iterable[Hook]) -> "HookBus":
        for callback in callbacks:
            self.add(phase, callback)
        return self

    def clear(self, phase: HookPhase | str | None = None) -> "HookBus":
        if phase is None:
            for hooks in self._hooks.values():
                hooks.clear()
        else:
            self._hooks[to_phase(phase)].clear()
        return self

    def hooks(self, phase: HookPhase | str) -> tuple[Hook, ...]:
        return tuple(self._hooks[to_phase(phase)])

    def fire(self, phase: HookPhase | str, context: Any) -> None:
        """Run hooks of ``phase`` in registration order; exceptions propagate."""
        resolved = to_phase(phase)
        hooks = tuple(self._hooks[resolved])
        if hooks:
            logger.debug("Firing {} {} hook(s)", len(hooks), resolved.value)
        for hook in hooks:
            hook(context)
