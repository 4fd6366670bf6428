"""Stand-in species-location lookup served at ``/database``."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from .autocorrect import load_species_data


class SpeciesLookup:
    """Map a feature name to a canned array of observations."""

    def __init__(self, locations: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> None:
        self._locations = {str(k).lower(): list(v) for k, v in (locations or {}).items()}

    @classmethod
    def from_data_file(cls, path: Optional[Path] = None) -> 'SpeciesLookup':
        return cls(load_species_data(path).get('locations', {}))

    def lookup(self, feature: Optional[str]) -> List[Dict[str, Any]]:
        if not feature:
            return []
        return [dict(item) for item in self._locations.get(feature.strip().lower(), [])]

    def names(self) -> List[str]:
        return sorted(self._locations)


__all__ = ['SpeciesLookup']
