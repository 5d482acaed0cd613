"""Tests for RGBA buffers and PNG output."""

import io

import numpy as np
import pytest
from PIL import Image

from station_heatmap.models import Cell, Grid
from station_heatmap.render import grid_to_png, grid_to_rgba


@pytest.fixture
def three_row_grid():
    """1 col x 3 rows: south cold and opaque, middle hidden, north hot and half faded."""
    return Grid(
        cols=1, rows=3, west=0.0, south=0.0, east=1.0, north=3.0,
        cells=(
            Cell(35.0, 10.0, 0.0, 1.0),
            Cell(0.0, 0.0, 0.0, 0.0),
            Cell(75.0, 90.0, 30.0, 0.5),
        ),
    )


class TestGridToRgba:
    def test_north_is_image_top(self, three_row_grid):
        rgba = grid_to_rgba(three_row_grid, "temperature")
        assert rgba.shape == (3, 1, 4)
        assert rgba.dtype == np.uint8
        assert tuple(rgba[0, 0]) == (0xef, 0x23, 0x3c, 128)
        assert tuple(rgba[2, 0]) == (0x00, 0xcf, 0xff, 255)

    def test_hidden_cells_transparent(self, three_row_grid):
        rgba = grid_to_rgba(three_row_grid, "humidity")
        assert tuple(rgba[1, 0]) == (0, 0, 0, 0)

    def test_metric_selects_scale(self, three_row_grid):
        rgba = grid_to_rgba(three_row_grid, "wind_speed_mph")
        assert tuple(rgba[0, 0, :3]) == (0x7c, 0x3a, 0xed)

    def test_unknown_metric(self, three_row_grid):
        with pytest.raises(KeyError):
            grid_to_rgba(three_row_grid, "pressure")

    def test_real_grid(self, sf_stations, sf_bbox):
        from station_heatmap.interpolate import interpolate

        grid = interpolate(sf_stations, sf_bbox, 0.5)
        rgba = grid_to_rgba(grid, "temperature")
        assert rgba.shape == (grid.rows, grid.cols, 4)
        assert (rgba[..., 3] == 255).all()


class TestGridToPng:
    def test_png_roundtrip_size(self, three_row_grid):
        data = grid_to_png(three_row_grid, "temperature")
        assert data.startswith(b"\x89PNG")
        img = Image.open(io.BytesIO(data))
        assert img.size == (1, 3)
        assert img.mode == "RGBA"

    def test_upscaled(self, three_row_grid):
        img = Image.open(io.BytesIO(grid_to_png(three_row_grid, "temperature", scale=4)))
        assert img.size == (4, 12)
