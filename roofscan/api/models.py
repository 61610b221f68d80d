"""
Pydantic models for the scan job API payloads.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


COMPLETED_STATUSES = {"completed", "complete", "done", "succeeded"}
FAILED_STATUSES = {"failed", "error", "cancelled"}


class ScanRequest(BaseModel):
    """Address submitted to start a roof scan."""

    model_config = ConfigDict(extra="allow")

    address: str = Field(..., min_length=1, description="Street address of the building")


class ScanJob(BaseModel):
    """Response of POST /customer."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    job_id: str = Field(..., validation_alias=AliasChoices("jobId", "job_id", "id"))
    status: Optional[str] = None


class ScanJobStatus(BaseModel):
    """Response of GET /customer/{job_id}/status."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    status: str
    progress: Optional[float] = None
    error: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status.lower() in COMPLETED_STATUSES

    @property
    def is_failed(self) -> bool:
        return self.status.lower() in FAILED_STATUSES


class ScanResults(BaseModel):
    """
    Response of GET /customer/{job_id}/results.

    Geometry is kept as raw JSON; CoordinateProjector decides what is usable.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    building_bounding_box: Optional[dict[str, Any]] = Field(default=None, alias="buildingBoundingBox")
    roof_segments: Optional[list[Any]] = Field(default_factory=list, alias="roofSegments")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    image_data: Optional[str] = Field(default=None, alias="imageData")

    @property
    def image_source(self) -> Optional[str]:
        return self.image_data or self.image_url

    def geometry(self) -> dict[str, Any]:
        """The geometry in the JSON shape visualize_scan expects."""
        return {
            "buildingBoundingBox": self.building_bounding_box,
            "roofSegments": self.roof_segments,
        }
