"""
Data models for Neighborhood Nature.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence


DEFAULT_AMOUNT = 5
MIN_AMOUNT = 1
MAX_AMOUNT = 10
DEFAULT_LABEL = "UNLABELED"


@dataclass(frozen=True)
class Coordinate:
    """A longitude/latitude point. Two coordinates are equal when x and y match."""
    x: float
    y: float
    label: str = field(default="", compare=False)
    species: str = field(default="", compare=False)
    url: str = field(default="", compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "label": self.label,
            "species": self.species,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Coordinate":
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            label=str(data.get("label") or ""),
            species=str(data.get("species") or ""),
            url=str(data.get("url") or ""),
        )

    def with_label(self, label: str) -> "Coordinate":
        return Coordinate(self.x, self.y, label, self.species, self.url)


def coordinates_to_json(coordinates: Iterable[Coordinate]) -> str:
    return json.dumps([c.to_dict() for c in coordinates])


def coordinates_from_json(raw: str) -> List[Coordinate]:
    return [Coordinate.from_dict(item) for item in json.loads(raw)]


def waypoint_lists_to_json(waypoints: Sequence[Sequence[Coordinate]]) -> str:
    return json.dumps([[c.to_dict() for c in group] for group in waypoints])


class WaypointDescription:
    """
    One stop requested by the user: how many waypoints and which features.

    Built incrementally by the query parser. The amount starts at
    ``DEFAULT_AMOUNT`` and may be overridden once; the label stays
    ``DEFAULT_LABEL`` until ``create_label`` runs with at least one feature.
    """

    def __init__(self, amount: Optional[int] = None, features: Optional[Iterable[str]] = None):
        self._amount = DEFAULT_AMOUNT if amount is None else int(amount)
        self._amount_was_set = amount is not None
        self._features: List[str] = []
        self._label = DEFAULT_LABEL
        for feature in features or ():
            self.add_feature(feature)

    @property
    def max_amount(self) -> int:
        return self._amount

    @property
    def amount_was_set(self) -> bool:
        return self._amount_was_set

    @property
    def features(self) -> List[str]:
        return list(self._features)

    @property
    def label(self) -> str:
        return self._label

    def has_features(self) -> bool:
        return bool(self._features)

    def has_label(self) -> bool:
        return self._label != DEFAULT_LABEL

    def set_max_amount(self, amount: int) -> None:
        if self._amount_was_set:
            raise ValueError("amount has already been set for this waypoint description")
        self._amount = int(amount)
        self._amount_was_set = True

    def add_feature(self, feature: str) -> None:
        feature = feature.strip()
        if feature and feature not in self._features:
            self._features.append(feature)

    def create_label(self) -> str:
        if not self._features:
            return self._label
        joined = ",".join(self._features)
        self._label = f"{self._amount} {joined}" if self._amount_was_set else joined
        return self._label

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WaypointDescription):
            return NotImplemented
        return self._amount == other._amount and self._features == other._features

    def __repr__(self) -> str:
        return f"WaypointDescription(amount={self._amount}, features={self._features!r})"


@dataclass(frozen=True)
class StoredRoute:
    """A finished route published for discovery by other users."""
    id: int
    text: str
    waypoints_json: str
    center: Optional[Coordinate] = None

    def to_dict(self) -> Dict[str, Any]:
        try:
            waypoints = json.loads(self.waypoints_json) if self.waypoints_json else []
        except json.JSONDecodeError:
            waypoints = []
        return {
            "id": self.id,
            "text": self.text,
            "waypoints": waypoints,
            "center": self.center.to_dict() if self.center else None,
        }


@dataclass(frozen=True)
class StartEnd:
    """Trip endpoints. A radius turns the trip into a loop around ``start``."""
    start: Coordinate
    end: Coordinate
    radius: Optional[float] = None

    @property
    def is_loop(self) -> bool:
        return self.radius is not None

    @property
    def midpoint(self) -> Coordinate:
        if self.is_loop:
            return Coordinate(self.start.x, self.start.y, "midpoint")
        return Coordinate((self.start.x + self.end.x) / 2.0, (self.start.y + self.end.y) / 2.0, "midpoint")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "midpoint": self.midpoint.to_dict(),
            "radius": self.radius,
        }


__all__ = [
    "DEFAULT_AMOUNT",
    "MIN_AMOUNT",
    "MAX_AMOUNT",
    "DEFAULT_LABEL",
    "Coordinate",
    "WaypointDescription",
    "StoredRoute",
    "StartEnd",
    "coordinates_to_json",
    "coordinates_from_json",
    "waypoint_lists_to_json",
]
