# region Imports
from __future__ import annotations
from typing import Optional, Sequence, Tuple
import logging
import math
import numpy as np

from .config import (
    EXACT_HIT_D2, FADE_END_KM, FADE_START_KM, IDW_POWER, KM_PER_DEG_LAT, MAX_CELLS,
)
from .geometry import haversine_km, km2deg_lat, km2deg_lon, km_per_deg_lon
from .models import BoundingBox, Cell, Grid, NearestStation, Reading, Station
# endregion

_LOGGER = logging.getLogger(__name__)

# region Coverage Fade
def coverage_alpha(dist_km: float) -> float:
    if dist_km <= FADE_START_KM:
        return 1.0
    if dist_km >= FADE_END_KM:
        return 0.0
    return 1.0 - (dist_km - FADE_START_KM) / (FADE_END_KM - FADE_START_KM)


def _coverage_alpha_array(dist_km: np.ndarray) -> np.ndarray:
    alpha = 1.0 - (dist_km - FADE_START_KM) / (FADE_END_KM - FADE_START_KM)
    alpha = np.where(dist_km <= FADE_START_KM, 1.0, alpha)
    return np.where(dist_km >= FADE_END_KM, 0.0, alpha)
# endregion

# region Axis Stepping
def _axis_steps(start: float, stop: float, step: float) -> int:
    """Count of centers start + step/2 + k*step that fall below stop."""
    n = max(0, math.ceil((stop - start) / step - 0.5))
    # float drift at the boundary
    while n > 0 and start + step / 2 + (n - 1) * step >= stop:
        n -= 1
    while start + step / 2 + n * step < stop:
        n += 1
    return n
# endregion

# region Station Arrays
def _station_arrays(stations: Sequence[Station]):
    lat = np.array([s.lat for s in stations], dtype=np.float64)
    lon = np.array([s.lon for s in stations], dtype=np.float64)
    vals = np.array(
        [(s.temp_f, s.humidity, s.wind_speed_mph) for s in stations], dtype=np.float64
    )
    return lat, lon, vals
# endregion

# region IDW Core
def _estimate(d2: np.ndarray, vals: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    IDW over a block of query points.
      d2:   (N, S) squared planar distances in km^2
      vals: (S, 3) station metrics
    Returns (estimates (N, 3), alpha (N,)). Faded-out rows are zeroed.
    """
    hit = d2 < EXACT_HIT_D2
    any_hit = hit.any(axis=1)
    first_hit = hit.argmax(axis=1)  # first station in iteration order

    dist_km = np.where(any_hit, 0.0, np.sqrt(d2.min(axis=1)))
    alpha = _coverage_alpha_array(dist_km)

    weighted = (~any_hit) & (alpha > 0.0)
    w = np.zeros_like(d2)
    np.divide(1.0, d2 ** (IDW_POWER / 2.0), out=w, where=weighted[:, None])
    w_sum = w.sum(axis=1, keepdims=True)
    np.divide(w, w_sum, out=w, where=weighted[:, None])
    est = w @ vals

    est[any_hit] = vals[first_hit[any_hit]]
    est[alpha <= 0.0] = 0.0
    return est, alpha
# endregion

# region Grid Interpolation
def grid_shape(bbox: BoundingBox, cell_size_km: float) -> Tuple[int, int, float, float]:
    """(cols, rows, d_lon, d_lat) for a bbox at the given cell size."""
    assert cell_size_km > 0, "cell_size_km must be positive"
    d_lat = km2deg_lat(cell_size_km)
    d_lon = km2deg_lon(cell_size_km, bbox.mid_lat)
    cols = _axis_steps(bbox.west, bbox.east, d_lon)
    rows = _axis_steps(bbox.south, bbox.north, d_lat)
    return cols, rows, d_lon, d_lat


def interpolate(
    stations: Sequence[Station],
    bbox: BoundingBox,
    cell_size_km: float,
) -> Optional[Grid]:
    """
    Inverse-distance-weighted grid (power 2, flat-earth km) with a coverage
    fade. Returns None for an empty station list or when the grid would
    exceed MAX_CELLS.
    """
    if not stations:
        return None

    cols, rows, d_lon, d_lat = grid_shape(bbox, cell_size_km)
    if cols * rows > MAX_CELLS:
        _LOGGER.debug("Grid %dx%d over budget (%d cells) at %.2f km", cols, rows, MAX_CELLS, cell_size_km)
        return None

    if cols == 0 or rows == 0:
        return Grid(cols=cols, rows=rows, west=bbox.west, south=bbox.south,
                    east=bbox.west + cols * d_lon, north=bbox.south + rows * d_lat, cells=())

    st_lat, st_lon, vals = _station_arrays(stations)
    kx = km_per_deg_lon(bbox.mid_lat)

    lons = bbox.west + (np.arange(cols) + 0.5) * d_lon
    dx2 = ((lons[:, None] - st_lon[None, :]) * kx) ** 2  # same for every row

    cells = []
    for r in range(rows):
        lat = bbox.south + (r + 0.5) * d_lat
        dy2 = ((lat - st_lat) * KM_PER_DEG_LAT) ** 2
        est, alpha = _estimate(dx2 + dy2[None, :], vals)
        for (t, h, w), a in zip(est.tolist(), alpha.tolist()):
            cells.append(Cell(temperature=t, humidity=h, wind_speed_mph=w, alpha=a))

    return Grid(
        cols=cols,
        rows=rows,
        west=bbox.west,
        south=bbox.south,
        east=bbox.west + cols * d_lon,
        north=bbox.south + rows * d_lat,
        cells=tuple(cells),
    )
# endregion

# region Point Queries
def idw_point(stations: Sequence[Station], lat: float, lon: float) -> Optional[Reading]:
    if not stations:
        return None
    st_lat, st_lon, vals = _station_arrays(stations)
    kx = km_per_deg_lon(lat)
    d2 = ((lon - st_lon) * kx) ** 2 + ((lat - st_lat) * KM_PER_DEG_LAT) ** 2
    est, alpha = _estimate(d2[None, :], vals)
    min_d2 = float(d2.min())
    t, h, w = est[0].tolist()
    return Reading(
        temperature=t,
        humidity=h,
        wind_speed_mph=w,
        alpha=float(alpha[0]),
        distance_km=0.0 if min_d2 < EXACT_HIT_D2 else float(math.sqrt(min_d2)),
    )


def nearest_station(stations: Sequence[Station], lat: float, lon: float) -> Optional[NearestStation]:
    best = None
    best_d = math.inf
    for s in stations:
        d = haversine_km(lat, lon, s.lat, s.lon)
        if d < best_d:
            best, best_d = s, d
    if best is None:
        return None
    return NearestStation(station=best, distance_km=best_d)
# endregion
