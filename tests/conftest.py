import pytest

from station_heatmap.models import BoundingBox, Station


def make_station(sid, lat, lon, temp_f, humidity=50.0, wind=5.0):
    return Station(id=sid, lat=lat, lon=lon, temp_f=temp_f, humidity=humidity, wind_speed_mph=wind)


@pytest.fixture
def sf_stations():
    return [
        make_station("A", 37.77, -122.43, 60.0, humidity=70.0, wind=4.0),
        make_station("B", 37.78, -122.42, 65.0, humidity=60.0, wind=8.0),
        make_station("C", 37.76, -122.44, 55.0, humidity=80.0, wind=2.0),
    ]


@pytest.fixture
def sf_bbox():
    return BoundingBox(-122.45, 37.75, -122.41, 37.79)
