"""Data models for cached view configurations."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

SliceTuple = Tuple[int, int, int, int]


class Slice(BaseModel):
    """Rectangular region (offset + size) of a rendered page."""

    model_config = ConfigDict(frozen=True, strict=True)

    left: int = Field(ge=0)
    top: int = Field(ge=0)
    width: int = Field(gt=0)
    height: int = Field(gt=0)

    @classmethod
    def from_tuple(cls, value: Sequence[Any]) -> "Slice":
        if isinstance(value, (str, bytes)) or len(value) != 4:
            raise ValueError(f"slice must have exactly four components, got {value!r}")
        left, top, width, height = value
        return cls(left=left, top=top, width=width, height=height)

    def as_tuple(self) -> SliceTuple:
        return (self.left, self.top, self.width, self.height)


class Record(BaseModel):
    """One cached view configuration; every field may be absent."""

    model_config = ConfigDict(frozen=True)

    slice: Optional[Slice] = None
    image_width: Optional[int] = Field(default=None, gt=0, strict=True)
    resolution: Optional[float] = Field(default=None, gt=0, strict=True, allow_inf_nan=False)

    @classmethod
    def from_values(
        cls,
        slice: Optional[Sequence[Any]] = None,
        image_width: Optional[int] = None,
        resolution: Optional[float] = None,
    ) -> "Record":
        return cls(
            slice=Slice.from_tuple(slice) if slice is not None else None,
            image_width=image_width,
            resolution=resolution,
        )

    @classmethod
    def from_entry(cls, entry: Any) -> "Record":
        """Build a record from its serialized ``[slice, width, resolution]`` form."""
        if not isinstance(entry, (list, tuple)) or len(entry) != 3:
            raise ValueError(f"record entry must be a 3-element list, got {entry!r}")
        raw_slice, image_width, resolution = entry
        return cls.from_values(raw_slice, image_width, resolution)

    def to_entry(self) -> List[Any]:
        return [
            list(self.slice.as_tuple()) if self.slice is not None else None,
            self.image_width,
            self.resolution,
        ]


Store = Dict[str, Record]


__all__ = [
    "Record",
    "Slice",
    "SliceTuple",
    "Store",
]
