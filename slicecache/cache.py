"""In-memory slice cache with lazy loading and hook-driven persistence."""
from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .config import CacheSettings
from .errors import StorageWriteFailed, ViewStateUnavailable
from .lifecycle import Hook, LifecycleEvents
from .models import Record, Store
from .store_file import StoreFile
from .view import DocumentViewSession, apply_record, capture_record

_LOGGER = logging.getLogger(__name__)

WarningHandler = Callable[[str], None]


class CacheState(enum.Enum):
    NOT_LOADED = "not-loaded"
    LOADED = "loaded"


class SliceCache:
    """Owns the process-wide store of per-document view configurations.

    The store is read from disk at most once, on the first operation that
    needs it. Document close events capture the live view into memory and
    process exit writes the whole store back. Persistence is best effort:
    none of the flush paths raise.
    """

    def __init__(
        self,
        store_file: StoreFile,
        lifecycle: Optional[LifecycleEvents] = None,
        *,
        interactive: bool = True,
        save_on_close: bool = False,
        on_warning: Optional[WarningHandler] = None,
    ):
        self.store_file = store_file
        self.lifecycle = lifecycle
        self.interactive = interactive
        self.save_on_close = save_on_close
        self._on_warning = on_warning
        self._state = CacheState.NOT_LOADED
        self._store: Store = {}
        self._exit_hook_installed = False
        self._active: Dict[str, Tuple[DocumentViewSession, Hook]] = {}

    @classmethod
    def from_settings(
        cls,
        settings: CacheSettings,
        lifecycle: Optional[LifecycleEvents] = None,
        on_warning: Optional[WarningHandler] = None,
    ) -> "SliceCache":
        return cls(
            StoreFile(settings.store_file),
            lifecycle,
            interactive=settings.interactive,
            save_on_close=settings.save_on_close,
            on_warning=on_warning,
        )

    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def path(self) -> Path:
        return self.store_file.path

    # ----- Loading -----------------------------------------------------
    def ensure_loaded(self) -> None:
        if self._state is CacheState.LOADED:
            return
        # A failed attempt still counts; the file is never read twice.
        self._state = CacheState.LOADED
        try:
            self._store = self.store_file.load()
        except Exception:
            _LOGGER.exception("Unexpected error loading %s; using an empty cache", self.path)
            self._store = {}
        self._install_exit_hook()

    def _install_exit_hook(self) -> None:
        if self._exit_hook_installed or self.lifecycle is None or not self.interactive:
            return
        self.lifecycle.add_exit_hook(self.flush_all)
        self._exit_hook_installed = True

    # ----- Access ------------------------------------------------------
    def get(self, key: str) -> Optional[Record]:
        self.ensure_loaded()
        return self._store.get(key)

    def put(self, key: str, record: Record) -> None:
        self.ensure_loaded()
        self._store[key] = record

    def forget(self, key: str) -> bool:
        self.ensure_loaded()
        return self._store.pop(key, None) is not None

    def keys(self) -> List[str]:
        self.ensure_loaded()
        return sorted(self._store)

    def snapshot(self) -> Store:
        self.ensure_loaded()
        return dict(self._store)

    def __contains__(self, key: object) -> bool:
        self.ensure_loaded()
        return key in self._store

    def __len__(self) -> int:
        self.ensure_loaded()
        return len(self._store)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    # ----- Persistence -------------------------------------------------
    def flush_one(self, key: str, view: DocumentViewSession) -> bool:
        """Capture the live view of ``key`` into the cache.

        Returns False, without raising, when the view state is unavailable.
        """
        try:
            record = capture_record(view)
        except ViewStateUnavailable as exc:
            _LOGGER.debug("Skipping slice cache update for %s: %s", key, exc)
            return False
        self.put(key, record)
        if self.save_on_close:
            return self.flush_all()
        return True

    def flush_all(self) -> bool:
        """Write the whole store to disk; report, never raise, on failure."""
        self.ensure_loaded()
        try:
            self.store_file.save(self.snapshot())
        except StorageWriteFailed as exc:
            self._warn(f"{exc}; cached slices were not saved")
            return False
        return True

    def _warn(self, message: str) -> None:
        if self._on_warning is None:
            _LOGGER.warning("%s", message)
            return
        try:
            self._on_warning(message)
        except Exception:
            _LOGGER.exception("Warning handler failed for: %s", message)

    # ----- Per-document activation ------------------------------------
    def is_active(self, key: str) -> bool:
        return key in self._active

    def activate(self, key: str, view: DocumentViewSession) -> bool:
        """Enable slice persistence for one open document.

        Restores a cached record onto ``view`` and arranges for the view
        to be captured when the document closes. Returns True if a cached
        record was applied.
        """
        if key in self._active:
            # Keep the registered hook; it captures the current view on close.
            self._active[key] = (view, self._active[key][1])
        else:
            hook = self._close_hook(key)
            self._active[key] = (view, hook)
            if self.lifecycle is not None:
                self.lifecycle.add_close_hook(key, hook)
        record = self.get(key)
        if record is None:
            return False
        apply_record(view, record)
        return True

    def deactivate(self, key: str) -> None:
        entry = self._active.pop(key, None)
        if entry is None:
            return
        _, hook = entry
        if self.lifecycle is not None:
            self.lifecycle.remove_close_hook(key, hook)

    def _close_hook(self, key: str) -> Hook:
        def on_close() -> None:
            entry = self._active.get(key)
            if entry is None:
                return
            try:
                self.flush_one(key, entry[0])
            finally:
                self.deactivate(key)

        return on_close


__all__ = ["CacheState", "SliceCache", "WarningHandler"]
