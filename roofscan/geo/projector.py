"""
Geographic to pixel projection for roof scan results.

Maps the building's geographic bounding box onto the pixel frame of the
image it will be drawn over:

    x = (lng - sw.longitude) / (ne.longitude - sw.longitude) * width
    y = (ne.latitude - lat)  / (ne.latitude - sw.latitude)   * height

Pixel y grows downward while latitude grows upward, hence the inverted y.
Roof segments are projected through the building's frame, not their own,
so segments stay positioned consistently with the building outline and
with each other.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional, Sequence, Tuple

from ..core.exceptions import InvalidInputError
from ..core.models import GeoBox, PixelBox, PixelRoofSegment, ProjectionResult, RoofSegment

logger = logging.getLogger(__name__)


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _ratio(numerator: float, denominator: float) -> float:
    """Division that follows IEEE semantics instead of raising on a zero span."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def clamp_pixel(value: float, size: int) -> int:
    """
    Round half-up and clamp into [0, size - 1].

    NaN maps to 0 and infinities map to the nearest edge, so a degenerate
    bounding box never leaks non-finite values into a PixelBox.
    """
    if math.isnan(value):
        return 0
    if math.isinf(value):
        return size - 1 if value > 0 else 0
    return min(max(0, math.floor(value + 0.5)), size - 1)


def geo_to_pixel(
    latitude: float,
    longitude: float,
    bounds: GeoBox,
    img_width: int,
    img_height: int,
) -> Tuple[int, int]:
    """
    Project one geographic point into the pixel frame defined by bounds.

    Args:
        latitude, longitude: Point to project
        bounds: Reference frame (the building bounding box)
        img_width, img_height: Target raster size in pixels

    Returns:
        (x, y) pixel coordinates clamped into the raster
    """
    sw_lat, sw_lng = _as_float(bounds.sw.latitude), _as_float(bounds.sw.longitude)
    ne_lat, ne_lng = _as_float(bounds.ne.latitude), _as_float(bounds.ne.longitude)

    x = _ratio(_as_float(longitude) - sw_lng, ne_lng - sw_lng) * img_width
    y = _ratio(ne_lat - _as_float(latitude), ne_lat - sw_lat) * img_height

    return clamp_pixel(x, img_width), clamp_pixel(y, img_height)


def _validate_dimension(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInputError(f"{name} must be a positive integer, got {value!r}", field=name)
    return value


class CoordinateProjector:
    """
    Re-express a building box and its roof segments as pixel rectangles.

    Usage:
        projector = CoordinateProjector()
        result = projector.project(
            img_width=1000,
            img_height=800,
            building_bounding_box=results["buildingBoundingBox"],
            roof_segments=results["roofSegments"],
        )
        result.building_box   # PixelBox or None
        result.roof_segments  # list[PixelRoofSegment]
    """

    def project(
        self,
        img_width: int,
        img_height: int,
        building_bounding_box: Any,
        roof_segments: Optional[Sequence[Any]] = None,
    ) -> ProjectionResult:
        """
        Project the building box and every valid roof segment.

        Args:
            img_width, img_height: Target raster size in pixels (> 0)
            building_bounding_box: GeoBox or {"sw": ..., "ne": ...} mapping
            roof_segments: RoofSegment objects or {"id", "boundingBox"} mappings

        Returns:
            ProjectionResult. Empty (no building box, no segments) when the
            building box or one of its corners is missing.

        Raises:
            InvalidInputError: If the image dimensions are not positive integers
        """
        _validate_dimension(img_width, "img_width")
        _validate_dimension(img_height, "img_height")

        logger.debug(f"Converting geo coordinates for a {img_width}x{img_height} image")

        bounds = GeoBox.from_dict(building_bounding_box)
        if bounds is None:
            logger.error(f"Invalid building bounding box for conversion: {building_bounding_box!r}")
            return ProjectionResult(building_box=None, roof_segments=[])

        building_box = self._project_box(bounds, bounds, img_width, img_height)
        logger.debug(f"Converted building box: {building_box}")

        segments: list[PixelRoofSegment] = []
        if not isinstance(roof_segments, (list, tuple)):
            roof_segments = []

        for raw in roof_segments:
            segment = RoofSegment.from_dict(raw)
            if segment.bounding_box is None:
                logger.error(
                    f"Segment missing boundingBox: {raw!r}", extra={"segment_id": segment.id}
                )
                continue
            box = self._project_box(segment.bounding_box, bounds, img_width, img_height)
            segments.append(PixelRoofSegment.from_box(segment.id, box))

        logger.debug(f"Converted {len(segments)} roof segments")
        return ProjectionResult(building_box=building_box, roof_segments=segments)

    @staticmethod
    def _project_box(box: GeoBox, bounds: GeoBox, img_width: int, img_height: int) -> PixelBox:
        sw = geo_to_pixel(box.sw.latitude, box.sw.longitude, bounds, img_width, img_height)
        ne = geo_to_pixel(box.ne.latitude, box.ne.longitude, bounds, img_width, img_height)
        return PixelBox.from_corners(sw, ne)


def project(
    img_width: int,
    img_height: int,
    building_bounding_box: Any,
    roof_segments: Optional[Sequence[Any]] = None,
) -> ProjectionResult:
    """Convenience wrapper around CoordinateProjector().project()."""
    return CoordinateProjector().project(img_width, img_height, building_bounding_box, roof_segments)
