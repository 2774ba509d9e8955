"""Error taxonomy for the slice cache.

None of these is fatal to the host: unreadable and corrupt stores are
recovered as empty, unavailable view state is skipped, and failed writes
surface only as a warning.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class SliceCacheError(Exception):
    """Base class for slice cache errors."""


class StorageError(SliceCacheError):
    def __init__(self, path: Union[str, Path], reason: Optional[BaseException] = None) -> None:
        self.path = Path(path)
        self.reason = reason
        detail = f": {reason}" if reason is not None else ""
        super().__init__(f"{self.describe()} {self.path}{detail}")

    def describe(self) -> str:
        return "Storage error at"


class StorageUnreadable(StorageError):
    def describe(self) -> str:
        return "Cannot read slice cache"


class StorageCorrupt(StorageError):
    def describe(self) -> str:
        return "Corrupt slice cache"


class StorageWriteFailed(StorageError):
    def describe(self) -> str:
        return "Cannot write slice cache"


class ViewStateUnavailable(SliceCacheError):
    """The live document view has no readable slice/width/resolution."""
