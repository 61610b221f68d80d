"""
Pytest configuration and fixtures for RoofScan tests.

Provides reusable test fixtures for:
- Geographic bounding boxes and scan results
- Small in-memory images as PNG bytes and data references
"""

import base64
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))


# =============================================================================
# IMAGE HELPERS
# =============================================================================

def make_png_bytes(width: int, height: int, color=(255, 255, 255, 255), mode: str = "RGBA") -> bytes:
    """Encode a solid-color image as PNG bytes."""
    buffer = BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def to_data_url(data: bytes, mime_type: str = "image/png") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_url(data_url: str) -> Image.Image:
    """Decode a data:image/png;base64 reference back into an image."""
    header, _, payload = data_url.partition(",")
    assert header == "data:image/png;base64"
    image = Image.open(BytesIO(base64.b64decode(payload)))
    image.load()
    return image


# =============================================================================
# IMAGE FIXTURES
# =============================================================================

@pytest.fixture
def transparent_pixel_url() -> str:
    """1x1 fully transparent PNG as a data reference."""
    return to_data_url(make_png_bytes(1, 1, color=(0, 0, 0, 0)))


@pytest.fixture
def white_image_url() -> str:
    """30x30 opaque white PNG as a data reference."""
    return to_data_url(make_png_bytes(30, 30))


@pytest.fixture
def white_image_base64() -> str:
    """30x30 opaque white PNG as a raw base64 payload (no data: prefix)."""
    return base64.b64encode(make_png_bytes(30, 30)).decode("ascii")


# =============================================================================
# GEOMETRY FIXTURES
# =============================================================================

@pytest.fixture
def building_bounds() -> dict:
    """Building bounding box spanning 0.001 deg latitude and 0.002 deg longitude."""
    return {
        "sw": {"latitude": 10.0, "longitude": 20.0},
        "ne": {"latitude": 10.001, "longitude": 20.002},
    }


@pytest.fixture
def scan_results(building_bounds) -> dict:
    """Scan job results with one segment covering the whole building."""
    return {
        "buildingBoundingBox": building_bounds,
        "roofSegments": [
            {"id": "seg-1", "boundingBox": building_bounds},
        ],
        "imageUrl": "https://example.com/aerial.png",
    }
