"""
Configuration management for RoofScan.

Settings are read from ROOFSCAN_* environment variables or a .env file.
Nothing here is instantiated at import time: callers build a Settings
object and pass what the components need explicitly.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


RGBA = Tuple[int, int, int, int]

# Segment stroke colors, cycled by segment index
SEGMENT_PALETTE: Tuple[RGBA, ...] = (
    (0, 255, 0, 255),    # Green
    (0, 0, 255, 255),    # Blue
    (255, 255, 0, 255),  # Yellow
    (255, 0, 255, 255),  # Magenta
    (0, 255, 255, 255),  # Cyan
)


@dataclass(frozen=True)
class RenderStyle:
    """Stroke colors and widths used by OverlayRenderer."""

    building_color: RGBA = (255, 0, 0, 255)
    building_width: int = 3
    segment_palette: Tuple[RGBA, ...] = SEGMENT_PALETTE
    segment_width: int = 2
    default_mime_type: str = "image/png"

    def segment_color(self, index: int) -> RGBA:
        return self.segment_palette[index % len(self.segment_palette)]


class Settings(BaseSettings):
    """
    Application settings.

    Can be configured via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="ROOFSCAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Scan job API
    api_base_url: str = Field(
        default="http://localhost:3000/api/v1", description="Base URL of the scan job API"
    )
    request_timeout: float = Field(default=30.0, description="Timeout for API calls (s)")
    poll_interval: float = Field(default=2.0, description="Delay between status polls (s)")
    poll_timeout: float = Field(default=300.0, description="Give up waiting for a job after (s)")
    max_retries: int = Field(default=3, description="Retries for transient API failures")

    # Rendering
    image_fetch_timeout: float = Field(default=30.0, description="Timeout for image URLs (s)")
    building_stroke_width: int = Field(default=3, ge=1)
    segment_stroke_width: int = Field(default=2, ge=1)

    # Paths
    output_dir: Path = Field(default=Path("output"))

    def render_style(self) -> RenderStyle:
        return RenderStyle(
            building_width=self.building_stroke_width,
            segment_width=self.segment_stroke_width,
        )

    def ensure_dirs(self) -> None:
        """Create the output directory."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
