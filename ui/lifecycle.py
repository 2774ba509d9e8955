"""Qt-backed lifecycle events for the slice cache."""
from __future__ import annotations

import logging
from typing import List, Optional

from PySide6 import QtCore

from slicecache.lifecycle import Hook, HookRegistry

LOGGER = logging.getLogger(__name__)


class QtLifecycleEvents(QtCore.QObject):
    """Lifecycle events driven by Qt signals.

    The host emits ``documentClosing`` with the document key before tearing
    a view down. Exit hooks run on ``QCoreApplication.aboutToQuit``.
    """

    documentClosing = QtCore.Signal(str)

    def __init__(
        self,
        app: Optional[QtCore.QCoreApplication] = None,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._hooks = HookRegistry()
        self.documentClosing.connect(self._hooks.document_closing)
        self._app = app if app is not None else QtCore.QCoreApplication.instance()
        if self._app is None:
            LOGGER.warning("No QCoreApplication running; exit hooks will not fire")
        else:
            self._app.aboutToQuit.connect(self._hooks.process_exiting)

    def add_close_hook(self, key: str, callback: Hook) -> None:
        self._hooks.add_close_hook(key, callback)

    def remove_close_hook(self, key: str, callback: Hook) -> None:
        self._hooks.remove_close_hook(key, callback)

    def add_exit_hook(self, callback: Hook) -> None:
        self._hooks.add_exit_hook(callback)

    def close_hooks(self, key: str) -> List[Hook]:
        return self._hooks.close_hooks(key)

    def exit_hooks(self) -> List[Hook]:
        return self._hooks.exit_hooks()

    @QtCore.Slot()
    def quit(self) -> None:
        """Run exit hooks directly, for hosts that shut down without a Qt quit."""
        self._hooks.process_exiting()


__all__ = ["QtLifecycleEvents"]
