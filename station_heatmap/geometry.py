# region Imports
import math
from .config import KM_PER_DEG_LAT, EARTH_R_KM
# endregion

# region Degree‑to‑Kilometer Conversions
def km_per_deg_lon(lat: float) -> float:
    return KM_PER_DEG_LAT * math.cos(math.radians(lat))


def km2deg_lat(km: float) -> float:
    return km / KM_PER_DEG_LAT


def km2deg_lon(km: float, lat: float) -> float:
    return km / km_per_deg_lon(lat)
# endregion

# region Planar Distance
def planar_d2_km(lat, lon, lat0, lon0, kx: float) -> float:
    """Squared flat-earth distance in km^2; kx is km per degree of longitude."""
    dx = (lon - lon0) * kx
    dy = (lat - lat0) * KM_PER_DEG_LAT
    return dx * dx + dy * dy
# endregion

# region Great‑circle Distance
def haversine_km(lat1, lon1, lat2, lon2) -> float:
    to_rad = math.pi / 180.0
    dlat = (lat2 - lat1) * to_rad
    dlon = (lon2 - lon1) * to_rad
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1 * to_rad) * math.cos(lat2 * to_rad) * math.sin(dlon / 2) ** 2
    )
    return EARTH_R_KM * 2 * math.asin(math.sqrt(a))
# endregion
