# region Imports
from __future__ import annotations
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Union
import logging
import requests

from .config import FETCH_TIMEOUT_S
from .models import Station
# endregion

_LOGGER = logging.getLogger(__name__)


class StationRecordError(ValueError):
    """A provider record could not be turned into a Station."""


class StationFeedError(RuntimeError):
    """The station feed could not be fetched or decoded."""


# region Record Parsing
def _parse_time(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return None


def _opt_float(record: Mapping[str, Any], key: str) -> float:
    v = record.get(key)
    return 0.0 if v is None else float(v)


def station_from_record(record: Mapping[str, Any]) -> Station:
    """
    Provider record -> Station. Expected keys:
      stationID, lat, lon, tempF, humidity, windspeedmph, lastUpdateTime,
      neighborhood (optional)
    """
    if record.get("tempF") is None:
        raise StationRecordError(f"station {record.get('stationID')!r} has no temperature")
    try:
        lat = float(record["lat"])
        lon = float(record["lon"])
        temp_f = float(record["tempF"])
        humidity = _opt_float(record, "humidity")
        wind = _opt_float(record, "windspeedmph")
    except (KeyError, TypeError, ValueError) as e:
        raise StationRecordError(f"bad station record {record.get('stationID')!r}: {e}") from e

    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        raise StationRecordError(f"station {record.get('stationID')!r} out of range: {lat},{lon}")

    return Station(
        id=str(record.get("stationID", "")),
        lat=lat,
        lon=lon,
        temp_f=temp_f,
        humidity=humidity,
        wind_speed_mph=wind,
        last_update_time=_parse_time(record.get("lastUpdateTime")),
        name=str(record.get("neighborhood") or ""),
    )


def parse_stations(payload: Union[Mapping[str, Any], Iterable[Mapping[str, Any]]]) -> List[Station]:
    records = payload.get("stations", []) if isinstance(payload, Mapping) else payload
    out: List[Station] = []
    for rec in records:
        try:
            out.append(station_from_record(rec))
        except StationRecordError as e:
            _LOGGER.warning("Skipping station: %s", e)
    return out
# endregion

# region Feed
def fetch_stations(url: str, timeout: float = FETCH_TIMEOUT_S) -> List[Station]:
    try:
        r = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise StationFeedError(f"station feed request failed: {e}") from e
    if r.status_code != 200:
        raise StationFeedError(f"station feed returned HTTP {r.status_code}")
    try:
        payload = r.json()
    except ValueError as e:
        raise StationFeedError(f"station feed is not JSON: {e}") from e

    stations = parse_stations(payload)
    _LOGGER.debug("Fetched %d stations from %s", len(stations), url)
    return stations
# endregion
