"""
RoofScan Visual Package - annotated roof scan images.

## Quick Start

```python
import asyncio
from roofscan.geo import project
from roofscan.visual import OverlayRenderer

projection = project(1000, 800, results["buildingBoundingBox"], results["roofSegments"])
data_url = asyncio.run(OverlayRenderer().render(
    image_url,
    projection.building_box,
    projection.roof_segments,
    width=1000,
    height=800,
))
```
"""

from .pipeline import visualize_scan
from .renderer import (
    OverlayRenderer,
    ResolvedSource,
    box_coordinates,
    data_reference_to_bytes,
    encode_png,
    load_raster,
    render_overlay,
    resolve_source,
)

__all__ = [
    "OverlayRenderer",
    "ResolvedSource",
    "box_coordinates",
    "data_reference_to_bytes",
    "encode_png",
    "load_raster",
    "render_overlay",
    "resolve_source",
    "visualize_scan",
]
