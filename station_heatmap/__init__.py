"""Station heatmap: IDW grid interpolation and color mapping for weather-station readings."""
from .models import BoundingBox, Cell, Grid, Station
from .interpolate import interpolate, idw_point, nearest_station, coverage_alpha
from .colors import ColorScale, METRICS, color_at

__version__ = "0.1.0"
