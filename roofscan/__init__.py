"""
RoofScan - solar roof scan visualization.

Projects a scan job's geographic building box and roof segments into image
pixel space and draws them over the satellite/aerial image.
"""

__version__ = "0.1.0"

from .core.exceptions import (
    ImageLoadError,
    InvalidInputError,
    MalformedGeometryWarning,
    RoofScanError,
)
from .geo.projector import CoordinateProjector, project
from .visual.renderer import OverlayRenderer, render_overlay

__all__ = [
    "__version__",
    "CoordinateProjector",
    "OverlayRenderer",
    "project",
    "render_overlay",
    "ImageLoadError",
    "InvalidInputError",
    "MalformedGeometryWarning",
    "RoofScanError",
]
