# region Imports
import io
import numpy as np
from PIL import Image

from .colors import METRICS, color_map
from .models import Grid
# endregion

# region RGBA Buffer
def grid_to_rgba(grid: Grid, metric: str) -> np.ndarray:
    """
    One RGBA pixel per cell, shape (rows, cols, 4). Grid row 0 is south but
    image row 0 is north, so rows are flipped.
    """
    if metric not in METRICS:
        raise KeyError(f"unknown metric {metric!r}")
    scale = METRICS[metric].scale

    rgba = np.zeros((grid.rows, grid.cols, 4), dtype=np.uint8)
    if grid.rows == 0 or grid.cols == 0:
        return rgba

    alpha = grid.alphas()
    rgba[..., :3] = color_map(grid.values(metric), scale)
    rgba[..., 3] = np.floor(alpha * 255.0 + 0.5).astype(np.uint8)
    rgba[alpha <= 0.0] = 0
    return np.flipud(rgba).copy()
# endregion

# region PNG Encoding
def grid_to_png(grid: Grid, metric: str, scale: int = 1) -> bytes:
    """PNG of the grid; scale > 1 upsamples bilinearly for smooth gradients."""
    img = Image.fromarray(grid_to_rgba(grid, metric), "RGBA")
    if scale > 1 and grid.cols and grid.rows:
        img = img.resize((grid.cols * scale, grid.rows * scale), Image.BILINEAR)
    buf = io.BytesIO()
    img.save(buf, "PNG")
    buf.seek(0)
    return buf.read()
# endregion
