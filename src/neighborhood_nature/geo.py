"""Geographic helpers: bounding boxes, midpoints and planar distances."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, Optional, Sequence

from .models import Coordinate, StartEnd

MILES_PER_DEGREE = 69.0
# Observation coordinates are snapped to a 1/25000 degree grid
COORDINATE_GRID = 25000.0


@dataclass(frozen=True)
class BoundingBox:
    """Rectangular lon/lat filter sent to the observation API."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "BoundingBox":
        min_x, min_y, max_x, max_y = (float(v) for v in values)
        return cls(min(min_x, max_x), min(min_y, max_y), max(min_x, max_x), max(min_y, max_y))

    @property
    def center(self) -> Coordinate:
        return Coordinate((self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0, "center")

    def contains(self, point: Coordinate) -> bool:
        return self.min_x <= point.x <= self.max_x and self.min_y <= point.y <= self.max_y

    def to_query_params(self) -> Dict[str, float]:
        return {
            "swlat": self.min_y,
            "swlng": self.min_x,
            "nelat": self.max_y,
            "nelng": self.max_x,
        }

    def to_list(self) -> list:
        return [self.min_x, self.min_y, self.max_x, self.max_y]


def miles_to_degrees(miles: float) -> float:
    return miles / MILES_PER_DEGREE


def snap_to_grid(value: float) -> float:
    """Round half-up to the nearest 1/25000 of a degree."""
    return math.floor(value * COORDINATE_GRID + 0.5) / COORDINATE_GRID


def distance(a: Coordinate, b: Coordinate) -> float:
    """Planar Euclidean distance in degrees."""
    return math.hypot(a.x - b.x, a.y - b.y)


def center_of_mass(points: Iterable[Coordinate]) -> Optional[Coordinate]:
    """Average x/y of the given points, or None when there are none."""
    points = list(points)
    if not points:
        return None
    avg_x = sum(p.x for p in points) / len(points)
    avg_y = sum(p.y for p in points) / len(points)
    return Coordinate(avg_x, avg_y, "midpoint")


def bounding_box_for(trip: StartEnd, padding_miles: float = 0.0) -> BoundingBox:
    """Search area for a trip.

    A loop searches a square of half-width ``radius`` around the start; a
    point-to-point trip searches the rectangle spanned by both ends, padded.
    """
    if trip.is_loop:
        half = miles_to_degrees(float(trip.radius))
        return BoundingBox(trip.start.x - half, trip.start.y - half, trip.start.x + half, trip.start.y + half)
    pad = miles_to_degrees(padding_miles)
    return BoundingBox(
        min(trip.start.x, trip.end.x) - pad,
        min(trip.start.y, trip.end.y) - pad,
        max(trip.start.x, trip.end.x) + pad,
        max(trip.start.y, trip.end.y) + pad,
    )


def start_date(today: Optional[date] = None) -> str:
    """Earliest observation date searched: the same day one year back."""
    today = today or date.today()
    try:
        earlier = today.replace(year=today.year - 1)
    except ValueError:
        # Feb 29 has no counterpart in the previous year
        earlier = today.replace(year=today.year - 1, day=28)
    return earlier.isoformat()


__all__ = [
    "MILES_PER_DEGREE",
    "BoundingBox",
    "miles_to_degrees",
    "snap_to_grid",
    "distance",
    "center_of_mass",
    "bounding_box_for",
    "start_date",
]
