"""
Geo Module - Project geographic scan results into image pixel space.
"""

from .projector import CoordinateProjector, clamp_pixel, geo_to_pixel, project

__all__ = [
    "CoordinateProjector",
    "clamp_pixel",
    "geo_to_pixel",
    "project",
]
