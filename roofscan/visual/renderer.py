"""
Overlay renderer for roof scan results.

Draws the building rectangle and the roof segment rectangles over the
source satellite/aerial image and returns the composite as a
data:image/png;base64 reference, ready to show or download.

The source may be:
- a data reference ("data:image/jpeg;base64,...")
- an absolute URL ("https://...")
- a raw base64 payload (assumed PNG)
"""

from __future__ import annotations

import asyncio
import base64
import functools
import logging
import math
import numbers
import re
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple
from urllib.parse import unquote_to_bytes

import requests
from PIL import Image, ImageDraw

from ..core.config import RGBA, RenderStyle
from ..core.exceptions import ImageLoadError, InvalidInputError, MalformedGeometryWarning

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
NETWORK_PREFIX = "http"
OUTPUT_MIME_TYPE = "image/png"

BOX_FIELDS = ("min_x", "min_y", "max_x", "max_y")

_BASE64_PAYLOAD = re.compile(r"^[A-Za-z0-9+/_\-=\s]+$")


@dataclass(frozen=True)
class ResolvedSource:
    """A decodable image reference."""

    reference: str
    kind: str  # "data", "url" or "base64"
    cross_origin: bool = False


def resolve_source(source: Any, default_mime_type: str = "image/png") -> ResolvedSource:
    """
    Turn an image source into something the loader can decode.

    Raises:
        InvalidInputError: If source is not a string, is empty, or is a raw
            payload with characters outside the base64 alphabet
    """
    if not isinstance(source, str):
        raise InvalidInputError(
            f"imageData must be a string, got {type(source).__name__}", field="source"
        )

    if source.startswith(DATA_PREFIX):
        return ResolvedSource(reference=source, kind="data")

    if source.startswith(NETWORK_PREFIX):
        return ResolvedSource(reference=source, kind="url", cross_origin=True)

    if not source.strip() or not _BASE64_PAYLOAD.match(source):
        raise InvalidInputError("imageData is not a data reference, URL or base64 payload", field="source")

    return ResolvedSource(
        reference=f"data:{default_mime_type};base64,{source}",
        kind="base64",
    )


def data_reference_to_bytes(reference: str) -> bytes:
    """Extract the payload bytes of a data: reference."""
    header, sep, payload = reference.partition(",")
    if not header.startswith(DATA_PREFIX) or not sep:
        raise ValueError("Malformed data reference")
    if header.endswith(";base64"):
        payload = "".join(payload.split())
        # Tolerate missing padding and the URL-safe alphabet
        payload += "=" * (-len(payload) % 4)
        return base64.b64decode(payload.replace("-", "+").replace("_", "/"), validate=True)
    return unquote_to_bytes(payload)


def load_raster(resolved: ResolvedSource, timeout: float = 30.0) -> Image.Image:
    """
    Fetch and decode the source into a Pillow image.

    URLs are fetched without cookies or credentials.

    Raises:
        ImageLoadError: On network, HTTP, or decode failure
    """
    try:
        if resolved.kind == "url":
            logger.debug(f"Loading URL image: {resolved.reference}")
            response = requests.get(resolved.reference, timeout=timeout)
            response.raise_for_status()
            data = response.content
        else:
            logger.debug(f"Loading {resolved.kind} image")
            data = data_reference_to_bytes(resolved.reference)

        image = Image.open(BytesIO(data))
        image.load()
    except Exception as exc:
        logger.error(f"Image loading error: {exc}")
        raise ImageLoadError(f"Failed to load image for visualization: {exc}", cause=exc) from exc

    return image


def encode_png(image: Image.Image) -> str:
    """Serialize an image to a data:image/png;base64 reference."""
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:{OUTPUT_MIME_TYPE};base64,{encoded}"


def box_coordinates(shape: Any) -> Optional[Tuple[float, float, float, float]]:
    """Return (min_x, min_y, max_x, max_y) if all four are finite numbers, else None."""
    values = []
    for name in BOX_FIELDS:
        if isinstance(shape, Mapping):
            value = shape.get(name)
        else:
            value = getattr(shape, name, None)
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            return None
        if not math.isfinite(value):
            return None
        values.append(value)
    return tuple(values)


def _segment_id(segment: Any, index: Optional[int]) -> Any:
    """The segment's own id when it has one, else its list position."""
    if isinstance(segment, Mapping):
        return segment.get("id", index)
    return getattr(segment, "id", index)


def _validate_size(value: Any, name: str) -> Optional[int]:
    if value is None or value == 0:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInputError(f"{name} must be a positive integer, got {value!r}", field=name)
    return value


class OverlayRenderer:
    """
    Composite roof scan rectangles onto a source image.

    Usage:
        renderer = OverlayRenderer()
        data_url = await renderer.render(
            source="https://example.com/aerial.png",
            building_box=projection.building_box,
            roof_segments=projection.roof_segments,
        )

    The building box is stroked in style.building_color, segments cycle
    through style.segment_palette. Malformed shapes are skipped and passed
    to on_malformed (logged when no callback is given).
    """

    def __init__(
        self,
        style: Optional[RenderStyle] = None,
        fetch_timeout: float = 30.0,
        loader: Optional[Callable[[ResolvedSource], Image.Image]] = None,
        on_malformed: Optional[Callable[[MalformedGeometryWarning], None]] = None,
    ):
        self.style = style or RenderStyle()
        self.fetch_timeout = fetch_timeout
        self._loader = loader or functools.partial(load_raster, timeout=fetch_timeout)
        self._on_malformed = on_malformed

    async def render(
        self,
        source: Any,
        building_box: Any = None,
        roof_segments: Optional[Sequence[Any]] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> str:
        """
        Load the source, draw the boxes, and return a PNG data reference.

        Args:
            source: Data reference, http(s) URL, or raw base64 payload
            building_box: PixelBox or {min_x, min_y, max_x, max_y} mapping
            roof_segments: PixelRoofSegment objects or mappings
            width, height: Output size (defaults to the source's natural size)

        Raises:
            InvalidInputError: Before any decode, if source or size is invalid
            ImageLoadError: If the source cannot be fetched or decoded
        """
        resolved = resolve_source(source, self.style.default_mime_type)
        width = _validate_size(width, "width")
        height = _validate_size(height, "height")

        logger.debug(
            f"Visualization params: building_box={building_box!r}, "
            f"roof_segments={len(roof_segments) if isinstance(roof_segments, (list, tuple)) else 0}, "
            f"width={width}, height={height}"
        )

        loop = asyncio.get_running_loop()
        try:
            raster = await loop.run_in_executor(None, self._loader, resolved)
        except ImageLoadError:
            raise
        except Exception as exc:
            raise ImageLoadError(f"Failed to load image for visualization: {exc}", cause=exc) from exc

        return self.compose(raster, building_box, roof_segments, width, height)

    def compose(
        self,
        raster: Image.Image,
        building_box: Any = None,
        roof_segments: Optional[Sequence[Any]] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> str:
        """Draw onto a fresh canvas sized width x height. Synchronous."""
        logger.debug(f"Image loaded with dimensions: {raster.width} x {raster.height}")

        size = (width or raster.width, height or raster.height)
        logger.debug(f"Canvas dimensions: {size[0]} x {size[1]}")

        canvas = Image.new("RGBA", size, (0, 0, 0, 0))
        source = raster.convert("RGBA")
        if source.size != size:
            # Stretch to fill, no letterboxing
            source = source.resize(size, Image.Resampling.BILINEAR)
        canvas.alpha_composite(source)

        draw = ImageDraw.Draw(canvas)
        self._draw_building_box(draw, building_box)
        self._draw_roof_segments(draw, roof_segments)

        data_url = encode_png(canvas)
        logger.info(f"Visualization complete, data URL length: {len(data_url)}")
        return data_url

    def _draw_building_box(self, draw: ImageDraw.ImageDraw, building_box: Any) -> None:
        if building_box is None:
            logger.debug("No building box provided")
            return

        coords = box_coordinates(building_box)
        if coords is None:
            self._report(MalformedGeometryWarning("building", building_box))
            return

        logger.debug(f"Drawing building box: {coords}")
        self._stroke_rect(draw, coords, self.style.building_color, self.style.building_width)

    def _draw_roof_segments(self, draw: ImageDraw.ImageDraw, roof_segments: Any) -> None:
        if not isinstance(roof_segments, (list, tuple)) or not roof_segments:
            logger.debug(f"No roof segments provided: {roof_segments!r}")
            return

        logger.debug(f"Drawing {len(roof_segments)} roof segments")
        for index, segment in enumerate(roof_segments):
            coords = box_coordinates(segment)
            if coords is None:
                self._report(MalformedGeometryWarning("segment", segment, index=index))
                continue
            self._stroke_rect(
                draw, coords, self.style.segment_color(index), self.style.segment_width
            )

    @staticmethod
    def _stroke_rect(
        draw: ImageDraw.ImageDraw,
        coords: Tuple[float, float, float, float],
        color: RGBA,
        line_width: int,
    ) -> None:
        min_x, min_y, max_x, max_y = coords
        x0, x1 = sorted((min_x, max_x))
        y0, y1 = sorted((min_y, max_y))
        # Pillow strokes inward. A canvas stroke of width w covers w // 2 pixels
        # before the edge and the rest from the edge on.
        before = line_width // 2
        after = line_width - 1 - before
        draw.rectangle(
            [x0 - before, y0 - before, x1 + after, y1 + after],
            outline=color,
            width=line_width,
        )

    def _report(self, warning: MalformedGeometryWarning) -> None:
        if self._on_malformed is not None:
            self._on_malformed(warning)
        elif warning.shape == "segment":
            segment_id = _segment_id(warning.value, warning.index)
            logger.error(str(warning), extra={"segment_id": segment_id})
        else:
            logger.error(str(warning))


async def render_overlay(
    source: Any,
    building_box: Any = None,
    roof_segments: Optional[Sequence[Any]] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
    style: Optional[RenderStyle] = None,
) -> str:
    """Convenience wrapper around OverlayRenderer().render()."""
    renderer = OverlayRenderer(style=style)
    return await renderer.render(source, building_box, roof_segments, width, height)
