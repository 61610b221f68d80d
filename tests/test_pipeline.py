"""Tests for the scan results to image pipeline."""

import pytest
from unittest.mock import Mock

from conftest import decode_data_url, make_png_bytes, to_data_url
from roofscan.core.exceptions import InvalidInputError
from roofscan.visual.pipeline import visualize_scan
from roofscan.visual.renderer import OverlayRenderer


class TestVisualizeScan:
    """Tests for visualize_scan."""

    @pytest.mark.asyncio
    async def test_full_building_outline(self, scan_results):
        """Test that a full-frame building and segment are drawn on the border."""
        source = to_data_url(make_png_bytes(10, 10))
        data_url = await visualize_scan(scan_results, source, width=100, height=80)

        image = decode_data_url(data_url).convert("RGBA")
        assert image.size == (100, 80)
        # Segment equals the building box and is drawn last
        assert image.getpixel((0, 40)) == (0, 255, 0, 255)
        assert image.getpixel((50, 40)) == (255, 255, 255, 255)

    @pytest.mark.asyncio
    async def test_missing_building_box_renders_plain_image(self):
        reports = []
        renderer = OverlayRenderer(on_malformed=reports.append)
        source = to_data_url(make_png_bytes(10, 10))
        data_url = await visualize_scan({"roofSegments": []}, source, 20, 20, renderer=renderer)

        image = decode_data_url(data_url).convert("RGBA")
        assert image.getpixel((0, 0)) == (255, 255, 255, 255)
        assert reports == []

    @pytest.mark.asyncio
    async def test_non_mapping_results_rejected(self):
        loader = Mock()
        with pytest.raises(InvalidInputError):
            await visualize_scan(["not", "a", "dict"], "AAAA", 10, 10, renderer=OverlayRenderer(loader=loader))
        loader.assert_not_called()
