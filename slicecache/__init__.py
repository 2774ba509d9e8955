"""Persistent per-document slice/view configuration cache."""
from __future__ import annotations

from .cache import CacheState, SliceCache
from .config import CacheSettings, default_store_path
from .errors import (
    SliceCacheError,
    StorageCorrupt,
    StorageError,
    StorageUnreadable,
    StorageWriteFailed,
    ViewStateUnavailable,
)
from .lifecycle import HookRegistry, LifecycleEvents
from .models import Record, Slice, Store
from .store_file import StoreFile
from .view import DocumentViewSession, apply_record, capture_record

__all__ = [
    "CacheSettings",
    "CacheState",
    "DocumentViewSession",
    "HookRegistry",
    "LifecycleEvents",
    "Record",
    "Slice",
    "SliceCache",
    "SliceCacheError",
    "Store",
    "StoreFile",
    "StorageCorrupt",
    "StorageError",
    "StorageUnreadable",
    "StorageWriteFailed",
    "ViewStateUnavailable",
    "apply_record",
    "capture_record",
    "default_store_path",
]
