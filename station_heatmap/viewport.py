# region Imports
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import logging

from .config import BBOX_PADDING, BBOX_QUANTUM, CELL_SIZE_BUCKETS, COARSEST_CELL_KM, MIN_ZOOM
from .interpolate import interpolate
from .models import BoundingBox, Grid, Station
# endregion

_LOGGER = logging.getLogger(__name__)

# region Cell-size Policy
def cell_size_km(zoom: float) -> float:
    for min_zoom, size in CELL_SIZE_BUCKETS:
        if zoom >= min_zoom:
            return size
    return COARSEST_CELL_KM


def coarser_cell_size(size_km: float) -> Optional[float]:
    """Next bucket up from size_km, or None if already the coarsest."""
    sizes = sorted({s for _, s in CELL_SIZE_BUCKETS} | {COARSEST_CELL_KM})
    for s in sizes:
        if s > size_km:
            return s
    return None


def view_bbox(bounds: BoundingBox, padding: float = BBOX_PADDING) -> BoundingBox:
    """Visible bounds padded on every side so panning doesn't expose bare edges."""
    return bounds.padded(padding)
# endregion

# region Memo Key
@dataclass(frozen=True)
class GridKey:
    station_version: int
    bbox: Tuple[float, float, float, float]  # quantized
    cell_size_km: float

    @classmethod
    def build(cls, station_version: int, bbox: BoundingBox, size_km: float) -> "GridKey":
        return cls(station_version, bbox.quantized(BBOX_QUANTUM), size_km)
# endregion

# region View Controller
class HeatmapView:
    """
    Owns the latest station set and the last computed grid. update() is meant
    to run on viewport-settle; it only re-interpolates when the memo key
    (station version, quantized padded bbox, cell-size bucket) changes.
    """

    def __init__(self, stations: Sequence[Station] = ()):
        self.stations: Tuple[Station, ...] = tuple(stations)
        self.version = 0
        self.key: Optional[GridKey] = None
        self.grid: Optional[Grid] = None
        self.cell_size_km: Optional[float] = None
        self.computations = 0

    def set_stations(self, stations: Sequence[Station]) -> None:
        self.stations = tuple(stations)
        self.version += 1

    def update(self, bounds: BoundingBox, zoom: float) -> Optional[Grid]:
        if zoom < MIN_ZOOM:
            return None
        bbox = view_bbox(bounds)
        size = cell_size_km(zoom)
        key = GridKey.build(self.version, bbox, size)
        if key == self.key:
            return self.grid

        grid, used = self._compute(bbox, size)
        self.key, self.grid, self.cell_size_km = key, grid, used
        return grid

    def _compute(self, bbox: BoundingBox, size: float) -> Tuple[Optional[Grid], Optional[float]]:
        if not self.stations:
            return None, None
        while size is not None:
            _LOGGER.debug("Interpolating %d stations at %.1f km over %s",
                          len(self.stations), size, bbox.as_tuple())
            self.computations += 1
            grid = interpolate(self.stations, bbox, size)
            if grid is not None:
                return grid, size
            coarser = coarser_cell_size(size)
            if coarser is not None:
                _LOGGER.info("Cell budget exceeded at %.1f km; retrying at %.1f km", size, coarser)
            size = coarser
        _LOGGER.info("Cell budget exceeded at coarsest size; no grid for %s", bbox.as_tuple())
        return None, None
# endregion
