"""
Scan results to annotated image, in one call.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..core.exceptions import InvalidInputError
from ..geo.projector import CoordinateProjector
from .renderer import OverlayRenderer

logger = logging.getLogger(__name__)


async def visualize_scan(
    results: Mapping[str, Any],
    source: Any,
    width: int,
    height: int,
    renderer: Optional[OverlayRenderer] = None,
    projector: Optional[CoordinateProjector] = None,
) -> str:
    """
    Project scan results at width x height and draw them over source.

    Args:
        results: Job results with "buildingBoundingBox" and "roofSegments"
        source: Image source accepted by OverlayRenderer.render
        width, height: Output image size; also the projection frame

    Returns:
        data:image/png;base64 reference of the annotated image
    """
    if not isinstance(results, Mapping):
        raise InvalidInputError("Scan results must be a mapping", field="results")

    projector = projector or CoordinateProjector()
    renderer = renderer or OverlayRenderer()

    projection = projector.project(
        img_width=width,
        img_height=height,
        building_bounding_box=results.get("buildingBoundingBox"),
        roof_segments=results.get("roofSegments"),
    )
    if projection.building_box is None:
        logger.warning("Scan results have no usable building bounding box; rendering image only")

    return await renderer.render(
        source,
        building_box=projection.building_box,
        roof_segments=projection.roof_segments,
        width=width,
        height=height,
    )
