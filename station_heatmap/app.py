# app.py: Flask API over the station heatmap core
# deps: pip install flask numpy pillow requests

from __future__ import annotations
from typing import Callable, List, Optional, Sequence, Tuple
import logging
import math
import threading
from flask import Flask, request, jsonify, make_response

from .config import HOST, LOG_LEVEL, MIN_ZOOM, PORT, STATIONS_URL
from .colors import METRICS, METRIC_ORDER, legend_ticks, rgb_to_hex
from .interpolate import idw_point, nearest_station
from .models import BoundingBox, Station
from .render import grid_to_png
from .stations import StationFeedError, fetch_stations
from .viewport import HeatmapView

_LOGGER = logging.getLogger(__name__)

StationSource = Callable[[], Sequence[Station]]


class RequestError(ValueError):
    pass


# ======= request parsing =======
def _parse_bbox(raw: str) -> BoundingBox:
    try:
        west, south, east, north = [float(x) for x in raw.split(",")]
    except ValueError:
        raise RequestError("bbox=west,south,east,north required")
    if not all(math.isfinite(v) for v in (west, south, east, north)):
        raise RequestError("bbox values must be finite")
    if not (-180.0 <= west <= 180.0 and -180.0 <= east <= 180.0
            and -90.0 <= south <= 90.0 and -90.0 <= north <= 90.0):
        raise RequestError("bbox outside lon [-180, 180] / lat [-90, 90]")
    try:
        return BoundingBox(west, south, east, north)
    except AssertionError as e:
        raise RequestError(f"invalid bbox: {e}")


def _float_arg(name: str, default: Optional[float] = None) -> float:
    raw = request.args.get(name)
    if raw is None:
        if default is None:
            raise RequestError(f"{name} required")
        return default
    try:
        value = float(raw)
    except ValueError:
        raise RequestError(f"{name} must be a number")
    if not math.isfinite(value):
        raise RequestError(f"{name} must be finite")
    return value


def _metric_arg() -> str:
    metric = request.args.get("metric", METRIC_ORDER[0])
    if metric not in METRICS:
        raise RequestError(f"metric must be one of {', '.join(METRIC_ORDER)}")
    return metric


def create_app(station_source: Optional[StationSource] = None) -> Flask:
    if station_source is None:
        def station_source() -> List[Station]:
            return fetch_stations(STATIONS_URL)

    app = Flask(__name__)
    view = HeatmapView()
    lock = threading.Lock()
    app.config["HEATMAP_VIEW"] = view

    def current_grid() -> Tuple[object, Optional[float], Optional[str]]:
        bounds = _parse_bbox(request.args.get("bbox", ""))
        zoom = _float_arg("zoom")
        stations = tuple(station_source())
        with lock:
            if stations != view.stations:
                view.set_stations(stations)
            grid = view.update(bounds, zoom)
            size = view.cell_size_km
        if grid is not None:
            return grid, size, None
        if zoom < MIN_ZOOM:
            return None, None, "below_min_zoom"
        if not stations:
            return None, None, "no_stations"
        return None, None, "over_budget"

    # ======= CORS =======
    @app.after_request
    def _cors(resp):
        resp.headers["Access-Control-Allow-Origin"]  = "*"
        resp.headers["Access-Control-Allow-Headers"] = "*"
        resp.headers["Access-Control-Allow-Methods"] = "GET,OPTIONS"
        return resp

    # ======= errors =======
    @app.errorhandler(RequestError)
    def _bad_request(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(StationFeedError)
    def _feed_error(e):
        _LOGGER.error("Failed to fetch stations: %s", e)
        return jsonify({"error": "Failed to fetch station data"}), 502

    # ======= endpoints =======
    @app.route("/", methods=["GET"])
    def root():
        return {"ok": True, "stations_url": STATIONS_URL,
                "grid": "/grid?bbox=w,s,e,n&zoom=z", "png": "/grid.png", "point": "/point", "legend": "/legend"}

    @app.route("/grid", methods=["GET"])
    def grid_json():
        grid, size, reason = current_grid()
        if grid is None:
            return jsonify({"grid": None, "reason": reason})
        body = grid.to_dict()
        body["cell_size_km"] = size
        return jsonify(body)

    @app.route("/grid.png", methods=["GET"])
    def grid_png():
        metric = _metric_arg()
        scale = int(_float_arg("scale", 1))
        if not 1 <= scale <= 16:
            raise RequestError("scale must be between 1 and 16")
        grid, _, _ = current_grid()
        if grid is None or not grid.cells:
            return "", 204
        resp = make_response(grid_to_png(grid, metric, scale=scale))
        resp.headers["Content-Type"] = "image/png"
        return resp

    @app.route("/point", methods=["GET"])
    def point():
        lat = _float_arg("lat")
        lon = _float_arg("lon")
        stations = station_source()
        reading = idw_point(stations, lat, lon)
        if reading is None:
            return jsonify({"coordinate": [lon, lat], "reading": None, "nearest": None})
        near = nearest_station(stations, lat, lon)
        return jsonify({
            "coordinate": [lon, lat],
            "reading": {
                "temperature": reading.temperature,
                "humidity": reading.humidity,
                "wind_speed_mph": reading.wind_speed_mph,
                "alpha": reading.alpha,
            },
            "nearest": {
                "id": near.station.id,
                "name": near.station.name,
                "distance_km": near.distance_km,
                "temp_f": near.station.temp_f,
                "last_update_time": (near.station.last_update_time.isoformat()
                                     if near.station.last_update_time else None),
            },
        })

    @app.route("/legend", methods=["GET"])
    def legend():
        metric = _metric_arg()
        cfg = METRICS[metric]
        return jsonify({
            "metric": metric,
            "label": cfg.label,
            "unit": cfg.unit,
            "stops": [{"value": s.value, "color": rgb_to_hex(s.color)} for s in cfg.scale],
            "ticks": legend_ticks(cfg.scale),
        })

    return app


def main():
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    create_app().run(host=HOST, port=PORT, threaded=True)


if __name__ == "__main__":
    main()
