"""
Client for the external species-observation API.

Each feature term becomes one GET against the configured observations
endpoint, filtered by bounding box and start date. The JSON array that comes
back is turned into :class:`Coordinate` objects snapped to a 1/25000 degree
grid so that nearby sightings of different species compare equal.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence, Union

import httpx

from .config import NatureConfig, get_config
from .errors import ObservationServiceUnavailable
from .geo import BoundingBox, snap_to_grid
from .logging import module_logger
from .models import Coordinate, WaypointDescription

logger = module_logger(service='nature', component='observations')


def _species_name(observation: Dict[str, Any]) -> str:
    if observation.get('species_guess'):
        return str(observation['species_guess'])
    common_name = observation.get('common_name')
    if isinstance(common_name, dict) and common_name.get('name'):
        return str(common_name['name'])
    taxon = observation.get('taxon')
    if isinstance(taxon, dict) and taxon.get('preferred_common_name'):
        return str(taxon['preferred_common_name'])
    return ''


def json_to_coordinates(raw: Union[str, bytes, Sequence[Any]], label: str) -> List[Coordinate]:
    """Convert an observation array into coordinates carrying ``label``.

    Raises ``ValueError`` when ``raw`` is not a JSON array. Elements without a
    usable latitude/longitude are skipped.
    """
    observations = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    if not isinstance(observations, list):
        raise ValueError(f'expected a JSON array of observations, got {type(observations).__name__}')

    coordinates: List[Coordinate] = []
    for observation in observations:
        if not isinstance(observation, dict):
            continue
        try:
            x = snap_to_grid(float(observation['longitude']))
            y = snap_to_grid(float(observation['latitude']))
        except (KeyError, TypeError, ValueError, OverflowError):
            logger.debug('observation_skipped', extra={'observation_id': observation.get('id')})
            continue
        coordinates.append(Coordinate(
            x=x,
            y=y,
            label=label,
            species=_species_name(observation),
            url=str(observation.get('uri') or ''),
        ))
    return coordinates


class ObservationClient:
    """Blocking observation lookups with a shared ``httpx.Client``."""

    def __init__(self, config: Optional[NatureConfig] = None, client: Optional[httpx.Client] = None) -> None:
        self._config = config or get_config()
        self._url = self._config.observation_api_url
        self._per_page = int(self._config.get('observation_per_page', 200))
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=self._config.observation_timeout,
            headers={'User-Agent': self._config.get('user_agent', 'neighborhood-nature')},
            follow_redirects=True,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> 'ObservationClient':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def fetch(self, feature: str, label: str, bounding_box: BoundingBox, start_date: str) -> List[Coordinate]:
        params: Dict[str, Any] = {'q': feature}
        params.update(bounding_box.to_query_params())
        params['d1'] = start_date
        params['per_page'] = self._per_page

        try:
            response = self._client.get(self._url, params=params)
        except httpx.RequestError as exc:
            logger.error('observation_request_failed', extra={'feature': feature, 'url': self._url, 'error': str(exc)})
            raise ObservationServiceUnavailable(
                'Observation service is unavailable',
                details={'feature': feature, 'reason': type(exc).__name__},
            ) from exc

        if response.status_code != 200:
            logger.warning('observation_bad_status', extra={'feature': feature, 'status_code': response.status_code})
            return []

        try:
            coordinates = json_to_coordinates(response.content, label)
        except ValueError as exc:
            logger.warning('observation_malformed_payload', extra={'feature': feature, 'error': str(exc)})
            return []

        logger.debug('observations_fetched', extra={'feature': feature, 'count': len(coordinates)})
        return coordinates

    def locate(self, description: WaypointDescription, bounding_box: BoundingBox, start_date: str) -> List[Coordinate]:
        """Coordinates where every feature of ``description`` was observed."""
        label = description.label if description.has_label() else description.create_label()
        candidates: Optional[List[Coordinate]] = None
        for feature in description.features:
            found = self.fetch(feature, label, bounding_box, start_date)
            if candidates is None:
                candidates = list(dict.fromkeys(found))
            else:
                present = set(found)
                candidates = [c for c in candidates if c in present]
            if not candidates:
                break
        return (candidates or [])[:description.max_amount]

    def resolve(
        self,
        descriptions: Sequence[WaypointDescription],
        bounding_box: BoundingBox,
        start_date: str,
    ) -> List[List[Coordinate]]:
        return [self.locate(description, bounding_box, start_date) for description in descriptions]


__all__ = ['ObservationClient', 'json_to_coordinates']
