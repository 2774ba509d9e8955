"""Bridge between cached records and a live document view."""
from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Sequence

from pydantic import ValidationError

from .errors import ViewStateUnavailable
from .models import Record

_LOGGER = logging.getLogger(__name__)


class DocumentViewSession(Protocol):
    """What the cache needs from the host's document view."""

    def get_current_slice(self) -> Optional[Sequence[int]]: ...

    def get_image_width(self) -> int: ...

    def get_resolution(self) -> float: ...

    def set_slice(self, rect: Sequence[int]) -> None: ...

    def set_image_width(self, width: int) -> None: ...

    def set_resolution(self, resolution: float) -> None: ...

    def reconvert(self) -> None: ...


def capture_record(view: DocumentViewSession) -> Record:
    """Read the view's current configuration into a ``Record``.

    Raises ``ViewStateUnavailable`` when the view cannot be queried or
    reports values of the wrong shape.
    """
    try:
        current: Any = view.get_current_slice()
        image_width = view.get_image_width()
        resolution = view.get_resolution()
    except Exception as exc:  # host collaborator; any failure means no state
        raise ViewStateUnavailable(f"view state cannot be read: {exc}") from exc
    try:
        return Record.from_values(current, image_width, resolution)
    except (TypeError, ValueError, ValidationError) as exc:
        raise ViewStateUnavailable(f"unexpected view state: {exc}") from exc


def apply_record(view: DocumentViewSession, record: Record) -> None:
    if record.slice is not None:
        view.set_slice(record.slice.as_tuple())
    rerender = False
    if record.image_width is not None:
        view.set_image_width(record.image_width)
        rerender = True
    if record.resolution is not None:
        view.set_resolution(record.resolution)
        rerender = True
    if rerender:
        view.reconvert()
    _LOGGER.debug("Applied cached view configuration %s", record)


__all__ = ["DocumentViewSession", "apply_record", "capture_record"]
