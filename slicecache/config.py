"""Settings for locating and driving the slice cache."""
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

APP_NAME = "slicecache"
STORE_FILE = "slice-cache.eld"

ENV_STORE_FILE = "SLICECACHE_FILE"
ENV_BATCH = "SLICECACHE_BATCH"
ENV_SAVE_ON_CLOSE = "SLICECACHE_SAVE_ON_CLOSE"

_TRUTHY = {"1", "true", "yes", "on"}


def _data_home(environ: Mapping[str, str]) -> Path:
    if sys.platform.startswith("win") and environ.get("APPDATA"):
        return Path(environ["APPDATA"])
    if environ.get("XDG_DATA_HOME"):
        return Path(environ["XDG_DATA_HOME"])
    return Path.home() / ".local" / "share"


def default_store_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if environ is None else environ
    return _data_home(env) / APP_NAME / STORE_FILE


def default_log_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    return default_store_path(environ).parent / "logs"


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUTHY


class CacheSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    store_file: Path = Field(default_factory=default_store_path)
    # Batch runs never register the process-exit save.
    interactive: bool = True
    save_on_close: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CacheSettings":
        env = os.environ if environ is None else environ
        store_file = env.get(ENV_STORE_FILE)
        return cls(
            store_file=Path(store_file).expanduser() if store_file else default_store_path(env),
            interactive=not _flag(env.get(ENV_BATCH)),
            save_on_close=_flag(env.get(ENV_SAVE_ON_CLOSE)),
        )


__all__ = [
    "APP_NAME",
    "CacheSettings",
    "ENV_BATCH",
    "ENV_SAVE_ON_CLOSE",
    "ENV_STORE_FILE",
    "STORE_FILE",
    "default_log_dir",
    "default_store_path",
]
