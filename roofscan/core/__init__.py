"""Core models, configuration and errors."""

from .config import RenderStyle, Settings, SEGMENT_PALETTE
from .exceptions import (
    ImageLoadError,
    InvalidInputError,
    MalformedGeometryWarning,
    RoofScanError,
    ScanJobError,
)
from .models import (
    GeoBox,
    GeoPoint,
    PixelBox,
    PixelRoofSegment,
    ProjectionResult,
    RoofSegment,
)

__all__ = [
    "RenderStyle",
    "Settings",
    "SEGMENT_PALETTE",
    "ImageLoadError",
    "InvalidInputError",
    "MalformedGeometryWarning",
    "RoofScanError",
    "ScanJobError",
    "GeoBox",
    "GeoPoint",
    "PixelBox",
    "PixelRoofSegment",
    "ProjectionResult",
    "RoofSegment",
]
