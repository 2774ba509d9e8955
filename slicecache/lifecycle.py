"""Lifecycle events the cache hooks into.

The cache only registers callbacks; hosts decide when documents close
and when the process exits.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Protocol

_LOGGER = logging.getLogger(__name__)

Hook = Callable[[], None]


class LifecycleEvents(Protocol):
    def add_close_hook(self, key: str, callback: Hook) -> None: ...

    def remove_close_hook(self, key: str, callback: Hook) -> None: ...

    def add_exit_hook(self, callback: Hook) -> None: ...


class HookRegistry:
    """Plain callback registry for hosts without an event framework."""

    def __init__(self) -> None:
        self._close_hooks: Dict[str, List[Hook]] = {}
        self._exit_hooks: List[Hook] = []

    # ----- Registration ------------------------------------------------
    def add_close_hook(self, key: str, callback: Hook) -> None:
        self._close_hooks.setdefault(key, []).append(callback)

    def remove_close_hook(self, key: str, callback: Hook) -> None:
        hooks = self._close_hooks.get(key)
        if not hooks:
            return
        try:
            hooks.remove(callback)
        except ValueError:
            return
        if not hooks:
            del self._close_hooks[key]

    def add_exit_hook(self, callback: Hook) -> None:
        self._exit_hooks.append(callback)

    def close_hooks(self, key: str) -> List[Hook]:
        return list(self._close_hooks.get(key, ()))

    def exit_hooks(self) -> List[Hook]:
        return list(self._exit_hooks)

    # ----- Dispatch ----------------------------------------------------
    def document_closing(self, key: str) -> None:
        # Hooks may unregister themselves, so iterate over a copy.
        self._run(self.close_hooks(key), f"close hook for {key}")

    def process_exiting(self) -> None:
        self._run(self.exit_hooks(), "exit hook")

    @staticmethod
    def _run(hooks: List[Hook], label: str) -> None:
        for hook in hooks:
            try:
                hook()
            except Exception:
                _LOGGER.exception("Unhandled error in %s", label)


__all__ = ["Hook", "HookRegistry", "LifecycleEvents"]
