"""Durable representation of the slice cache: one text file, one mapping."""
from __future__ import annotations

import codecs
import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from .errors import StorageCorrupt, StorageUnreadable, StorageWriteFailed
from .models import Record, Store

_LOGGER = logging.getLogger(__name__)

DEFAULT_CODING = "utf-8"
HEADER = f";;; -*- coding: {DEFAULT_CODING} -*-"

_CODING_RE = re.compile(r"-\*-.*?coding:\s*([A-Za-z0-9_.:-]+?)\s*(?:;|-\*-)")
# Editors append the end-of-line convention to the coding name.
_EOL_SUFFIXES = ("-unix", "-dos", "-mac")
# Emacs coding systems with no Python codec of the same name.
_CODING_ALIASES = {
    "utf-8-emacs": "utf-8",
    "utf-8-auto": "utf-8",
    "utf-8-with-signature": "utf-8-sig",
    "prefer-utf-8": "utf-8",
    "undecided": "utf-8",
    "emacs-internal": "utf-8",
    "iso-latin-1": "latin-1",
    "us-ascii": "ascii",
}


def detect_coding(first_line: str) -> Optional[str]:
    """Return the codec named in a ``-*- coding: ... -*-`` header line, if any."""
    match = _CODING_RE.search(first_line)
    if not match:
        return None
    name = match.group(1).lower()
    for suffix in _EOL_SUFFIXES:
        if name.endswith(suffix):
            name = name[: -len(suffix)]
            break
    return _CODING_ALIASES.get(name, name)


def decode_store_bytes(raw: bytes) -> str:
    """Decode file contents using the codec its header declares.

    Unknown codec names fall back to UTF-8. Raises ``UnicodeDecodeError``
    when the bytes do not match the codec.
    """
    first_line = raw.split(b"\n", 1)[0]
    if first_line.startswith(codecs.BOM_UTF8):
        first_line = first_line[len(codecs.BOM_UTF8):]
    first_line = first_line.decode("latin-1")
    has_header = first_line.lstrip().startswith(";")
    coding = detect_coding(first_line) if has_header else None
    try:
        codec = codecs.lookup(coding or DEFAULT_CODING)
    except LookupError:
        _LOGGER.warning("Unknown coding %r in slice cache header; reading as %s", coding, DEFAULT_CODING)
        codec = codecs.lookup(DEFAULT_CODING)
    text = raw.decode(codec.name)
    if has_header:
        text = text.split("\n", 1)[1] if "\n" in text else ""
    return text


def parse_store(text: str, source: Union[str, Path] = "<string>") -> Store:
    """Parse the serialized mapping.

    Raises ``StorageCorrupt`` when the text is not a mapping at all.
    Malformed entries inside a valid mapping are dropped and logged.
    """
    if not text.strip():
        return {}
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise StorageCorrupt(source, exc) from exc
    if not isinstance(data, dict):
        raise StorageCorrupt(source, ValueError(f"expected a mapping, got {type(data).__name__}"))

    store: Store = {}
    for key, entry in data.items():
        try:
            store[key] = Record.from_entry(entry)
        except (ValueError, ValidationError) as exc:
            _LOGGER.warning("Dropping malformed slice cache entry %r in %s: %s", key, source, exc)
    return store


def dump_store(store: Store) -> str:
    payload: Dict[str, Any] = {key: store[key].to_entry() for key in sorted(store)}
    body = json.dumps(payload, indent=1, ensure_ascii=True, allow_nan=False)
    return f"{HEADER}\n{body}\n"


class StoreFile:
    """Read and write the whole store as a single file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"StoreFile({str(self.path)!r})"

    # ----- Reading -----------------------------------------------------
    def read_text(self) -> str:
        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            raise StorageUnreadable(self.path, exc) from exc
        try:
            return decode_store_bytes(raw)
        except UnicodeDecodeError as exc:
            raise StorageCorrupt(self.path, exc) from exc

    def load(self) -> Store:
        """Return the stored mapping, or an empty one if it cannot be used."""
        try:
            store = parse_store(self.read_text(), self.path)
        except StorageUnreadable as exc:
            _LOGGER.debug("%s; starting with an empty cache", exc)
            return {}
        except StorageCorrupt as exc:
            _LOGGER.warning("%s; starting with an empty cache", exc)
            return {}
        _LOGGER.info("Loaded %d slice cache entries from %s", len(store), self.path)
        return store

    # ----- Writing -----------------------------------------------------
    def save(self, store: Store) -> None:
        """Atomically replace the file with ``store``.

        Raises ``StorageWriteFailed`` on any I/O failure; the previous file
        contents are left in place.
        """
        payload = dump_store(store).encode(DEFAULT_CODING)
        tmp_name: Optional[str] = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            raise StorageWriteFailed(self.path, exc) from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
        _LOGGER.info("Saved %d slice cache entries to %s", len(store), self.path)


__all__ = [
    "DEFAULT_CODING",
    "HEADER",
    "StoreFile",
    "decode_store_bytes",
    "detect_coding",
    "dump_store",
    "parse_store",
]
