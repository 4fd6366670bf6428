"""Zip-code geocoding via geopy's Nominatim geocoder."""

from __future__ import annotations

from typing import Optional

from geopy.exc import GeopyError
from geopy.geocoders import Nominatim

from .config import NatureConfig, get_config
from .geo import BoundingBox, miles_to_degrees
from .logging import module_logger

logger = module_logger(service='nature', component='geocoding')

# Half-width of the box used when the geocoder returns a point without bounds
ZIP_BOX_HALF_WIDTH = miles_to_degrees(5.0)


def format_zip_code(value) -> str:
    """Zero-pad a numeric zip code to five digits.

    Raises ``ValueError`` for values that are not a non-negative integer.
    """
    text = str(value).strip()
    if not text.isdigit():
        raise ValueError(f'invalid zip code: {value!r}')
    return f'{int(text):05d}'


class ZipCodeGeocoder:
    """Resolve a US zip code to the bounding box of its area."""

    def __init__(self, config: Optional[NatureConfig] = None, geocoder=None) -> None:
        self._config = config or get_config()
        self._timeout = float(self._config.get('geocoder_timeout', 10.0))
        self._geocoder = geocoder or Nominatim(
            user_agent=self._config.get('geocoder_user_agent', 'neighborhood-nature'),
            timeout=self._timeout,
        )

    def bounds(self, zip_code: str) -> Optional[BoundingBox]:
        """Bounding box for ``zip_code``, or None when it cannot be resolved."""
        try:
            location = self._geocoder.geocode(f'{zip_code}, USA', exactly_one=True, timeout=self._timeout)
        except GeopyError as exc:
            logger.warning('geocode_failed', extra={'zip_code': zip_code, 'error': str(exc)})
            return None
        if location is None:
            logger.info('geocode_no_match', extra={'zip_code': zip_code})
            return None

        raw = getattr(location, 'raw', None) or {}
        box = raw.get('boundingbox')
        if box and len(box) == 4:
            # Nominatim orders the box as [south, north, west, east]
            south, north, west, east = (float(v) for v in box)
            return BoundingBox.from_sequence([west, south, east, north])

        lon, lat = float(location.longitude), float(location.latitude)
        return BoundingBox(
            lon - ZIP_BOX_HALF_WIDTH,
            lat - ZIP_BOX_HALF_WIDTH,
            lon + ZIP_BOX_HALF_WIDTH,
            lat + ZIP_BOX_HALF_WIDTH,
        )


__all__ = ['ZipCodeGeocoder', 'format_zip_code', 'ZIP_BOX_HALF_WIDTH']
