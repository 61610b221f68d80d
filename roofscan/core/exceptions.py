"""
Error taxonomy for roof scan visualization.

Structural problems (bad image source, bad top-level input) abort the whole
operation. Per-shape geometry problems are reported as
MalformedGeometryWarning and the shape is skipped.
"""

from typing import Any, Optional


class RoofScanError(Exception):
    """Base class for all roofscan errors."""


class InvalidInputError(RoofScanError, ValueError):
    """Raised when an input is structurally invalid before any work is done."""

    def __init__(self, message: str, field: str = ""):
        super().__init__(message)
        self.field = field


class ImageLoadError(RoofScanError):
    """Raised when the source image cannot be fetched or decoded."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ScanJobError(RoofScanError):
    """Raised when a scan job fails, times out, or returns an unusable payload."""

    def __init__(self, message: str, job_id: Optional[str] = None, status: Optional[str] = None):
        super().__init__(message)
        self.job_id = job_id
        self.status = status


class MalformedGeometryWarning(UserWarning):
    """
    A building box or roof segment with missing or non-numeric fields.

    ``shape`` is "building" or "segment"; ``index`` is the segment's position
    in the input list.
    """

    LABELS = {"building": "building box"}

    def __init__(self, shape: str, value: Any, index: Optional[int] = None):
        label = self.LABELS.get(shape, shape)
        if index is None:
            message = f"Invalid {label} coordinates: {value!r}"
        else:
            message = f"Invalid coordinates for {label} {index}: {value!r}"
        super().__init__(message)
        self.shape = shape
        self.value = value
        self.index = index
