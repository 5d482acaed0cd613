# config.py
import os

# Deployment knobs (environment overrides)
STATIONS_URL = os.environ.get("STATIONS_URL", "http://127.0.0.1:3000/api/stations")
FETCH_TIMEOUT_S = float(os.environ.get("FETCH_TIMEOUT_S", "10"))
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8081"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Flat-earth conversion (city-scale boxes only)
KM_PER_DEG_LAT = 111.32
EARTH_R_KM = 6371.0

# Interpolation
IDW_POWER = 2
EXACT_HIT_D2 = 1e-6  # km^2, ~1 m
MAX_CELLS = 20_000

# Coverage fade: opaque inside START, invisible beyond END
FADE_START_KM = 10.0
FADE_END_KM = 20.0

# Viewport policy
MIN_ZOOM = 7
BBOX_PADDING = 0.2
BBOX_QUANTUM = 0.001  # deg
CELL_SIZE_BUCKETS = ((12, 0.5), (10, 1.0), (8, 2.0))
COARSEST_CELL_KM = 4.0
