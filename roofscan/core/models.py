"""
Data model for roof scan geometry.

Geographic inputs arrive as JSON-shaped job results:

    {
        "buildingBoundingBox": {"sw": {"latitude": ..., "longitude": ...},
                                "ne": {"latitude": ..., "longitude": ...}},
        "roofSegments": [{"id": ..., "boundingBox": {"sw": ..., "ne": ...}}, ...]
    }

Pixel outputs use the {min_x, min_y, max_x, max_y} shape the renderer draws.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


# =============================================================================
# GEOGRAPHIC TYPES
# =============================================================================


@dataclass(frozen=True)
class GeoPoint:
    """WGS84-like point. Ranges are not validated."""

    latitude: float
    longitude: float

    @classmethod
    def from_dict(cls, data: Any) -> GeoPoint | None:
        if isinstance(data, GeoPoint):
            return data
        if not isinstance(data, Mapping):
            return None
        # Missing fields are projected as NaN, not rejected
        return cls(latitude=data.get("latitude"), longitude=data.get("longitude"))


@dataclass(frozen=True)
class GeoBox:
    """Geographic rectangle given by its south-west and north-east corners."""

    sw: GeoPoint
    ne: GeoPoint

    @classmethod
    def from_dict(cls, data: Any) -> GeoBox | None:
        """Build a GeoBox from a mapping; None if the box or a corner is missing."""
        if isinstance(data, GeoBox):
            return data
        if not isinstance(data, Mapping):
            return None
        sw = GeoPoint.from_dict(data.get("sw"))
        ne = GeoPoint.from_dict(data.get("ne"))
        if sw is None or ne is None:
            return None
        return cls(sw=sw, ne=ne)


@dataclass(frozen=True)
class RoofSegment:
    """Roof segment as returned by the scan job. bounding_box None means invalid."""

    id: Any
    bounding_box: GeoBox | None = None

    @classmethod
    def from_dict(cls, data: Any) -> RoofSegment:
        if isinstance(data, RoofSegment):
            return data
        if not isinstance(data, Mapping):
            return cls(id=None, bounding_box=None)
        return cls(
            id=data.get("id"),
            bounding_box=GeoBox.from_dict(data.get("boundingBox")),
        )


# =============================================================================
# PIXEL TYPES
# =============================================================================


@dataclass(frozen=True)
class PixelBox:
    """Axis-aligned rectangle in raster pixel coordinates."""

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @classmethod
    def from_corners(cls, a: tuple[int, int], b: tuple[int, int]) -> PixelBox:
        """Reconcile two projected corners so that min <= max on both axes."""
        return cls(
            min_x=min(a[0], b[0]),
            min_y=min(a[1], b[1]),
            max_x=max(a[0], b[0]),
            max_y=max(a[1], b[1]),
        )

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    def to_dict(self) -> dict[str, int]:
        return {
            "min_x": self.min_x,
            "min_y": self.min_y,
            "max_x": self.max_x,
            "max_y": self.max_y,
        }


@dataclass(frozen=True)
class PixelRoofSegment(PixelBox):
    """Pixel rectangle of a roof segment, keeping the segment's original id."""

    id: Any = None

    @classmethod
    def from_box(cls, segment_id: Any, box: PixelBox) -> PixelRoofSegment:
        return cls(
            min_x=box.min_x,
            min_y=box.min_y,
            max_x=box.max_x,
            max_y=box.max_y,
            id=segment_id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, **super().to_dict()}


@dataclass(frozen=True)
class ProjectionResult:
    """Output of CoordinateProjector.project."""

    building_box: PixelBox | None = None
    roof_segments: list[PixelRoofSegment] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.building_box is None and not self.roof_segments

    def to_dict(self) -> dict[str, Any]:
        return {
            "buildingBox": self.building_box.to_dict() if self.building_box else None,
            "roofSegments": [s.to_dict() for s in self.roof_segments],
        }
