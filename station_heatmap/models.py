# models.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional, Tuple
import numpy as np

METRIC_FIELDS = ("temperature", "humidity", "wind_speed_mph")


@dataclass(frozen=True)
class Station:
    id: str
    lat: float
    lon: float
    temp_f: float
    humidity: float
    wind_speed_mph: float
    last_update_time: Optional[datetime] = None
    name: str = ""


@dataclass(frozen=True)
class BoundingBox:
    west: float
    south: float
    east: float
    north: float

    def __post_init__(self):
        assert self.west < self.east, f"west ({self.west}) must be < east ({self.east})"
        assert self.south < self.north, f"south ({self.south}) must be < north ({self.north})"

    @property
    def mid_lat(self) -> float:
        return 0.5 * (self.south + self.north)

    def contains(self, lat: float, lon: float) -> bool:
        return self.west <= lon <= self.east and self.south <= lat <= self.north

    def padded(self, fraction: float) -> "BoundingBox":
        dlon = (self.east - self.west) * fraction
        dlat = (self.north - self.south) * fraction
        return BoundingBox(self.west - dlon, self.south - dlat, self.east + dlon, self.north + dlat)

    def quantized(self, step: float) -> Tuple[float, float, float, float]:
        return tuple(round(round(v / step) * step, 9) for v in self.as_tuple())

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.west, self.south, self.east, self.north)


@dataclass(frozen=True)
class Cell:
    temperature: float
    humidity: float
    wind_speed_mph: float
    alpha: float  # 0 => not drawn, values zeroed


@dataclass(frozen=True)
class Grid:
    """
    Row-major cells; row 0 is the southern edge, col 0 the western edge.
    west/south/east/north describe the box actually covered by the cells.
    """
    cols: int
    rows: int
    west: float
    south: float
    east: float
    north: float
    cells: Tuple[Cell, ...]

    @property
    def d_lon(self) -> float:
        return (self.east - self.west) / self.cols if self.cols else 0.0

    @property
    def d_lat(self) -> float:
        return (self.north - self.south) / self.rows if self.rows else 0.0

    def cell(self, row: int, col: int) -> Cell:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(f"cell ({row}, {col}) outside {self.rows}x{self.cols} grid")
        return self.cells[row * self.cols + col]

    def cell_center(self, row: int, col: int) -> Tuple[float, float]:
        """(lat, lon) of a cell center."""
        return (self.south + (row + 0.5) * self.d_lat, self.west + (col + 0.5) * self.d_lon)

    def values(self, metric: str) -> np.ndarray:
        if metric not in METRIC_FIELDS:
            raise KeyError(metric)
        flat = np.array([getattr(c, metric) for c in self.cells], dtype=np.float64)
        return flat.reshape(self.rows, self.cols)

    def alphas(self) -> np.ndarray:
        flat = np.array([c.alpha for c in self.cells], dtype=np.float64)
        return flat.reshape(self.rows, self.cols)

    def to_dict(self) -> dict:
        return {
            "cols": self.cols,
            "rows": self.rows,
            "west": self.west,
            "south": self.south,
            "east": self.east,
            "north": self.north,
            "cells": [asdict(c) for c in self.cells],
        }


@dataclass(frozen=True)
class Reading:
    """IDW estimate at a single point."""
    temperature: float
    humidity: float
    wind_speed_mph: float
    alpha: float
    distance_km: float  # flat-earth distance to closest station


@dataclass(frozen=True)
class NearestStation:
    station: Station
    distance_km: float
