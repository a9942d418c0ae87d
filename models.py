# models.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

# (min_lat, min_lon, max_lat, max_lon)
Bounds = Tuple[float, float, float, float]


@dataclass(frozen=True)
class Point:
    latitude: float
    longitude: float

    @classmethod
    def from_lonlat(cls, longitude: float, latitude: float) -> "Point":
        # ordre GeoJSON
        return cls(latitude, longitude)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)

    def isclose(self, other: "Point", precision: int) -> bool:
        """Égalité à la tolérance d'arrondi d'un aller-retour encode/decode."""
        tol = 0.5 * 10 ** -precision + 1e-9
        return (abs(self.latitude - other.latitude) <= tol
                and abs(self.longitude - other.longitude) <= tol)

    def in_range(self) -> bool:
        return -90 <= self.latitude <= 90 and -180 <= self.longitude <= 180


@dataclass
class PathStats:
    point_count: int
    encoded_length: int
    precision: int
    bounds: Optional[Bounds] = None
    span: float = 0.0
    chars_per_point: float = 0.0
    in_range: bool = False
