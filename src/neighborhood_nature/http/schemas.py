"""Request schema definitions for Neighborhood Nature HTTP endpoints."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ValidationFailure
from ..models import Coordinate


def parse_location(value: Any) -> Dict[str, Any]:
    """Accept ``{"x", "y"}`` objects, JSON strings of them, or ``"lat,lng"`` strings."""
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.startswith('{'):
            return json.loads(text)
        parts = [p.strip() for p in text.split(',')]
        if len(parts) == 2:
            lat, lng = (float(p) for p in parts)
            return {'x': lng, 'y': lat}
    raise ValueError(f'location must be an {{"x", "y"}} object or a "lat,lng" string, got {value!r}')


class LocationPayload(BaseModel):
    x: float
    y: float
    label: str = ''
    species: str = ''
    url: str = ''

    def to_coordinate(self) -> Coordinate:
        return Coordinate(self.x, self.y, self.label, self.species, self.url)


class QueryPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text_input: str = Field(default='', alias='text-input')


class ChosenWaypointsPayload(BaseModel):
    waypoints: List[LocationPayload] = Field(default_factory=list)

    @field_validator('waypoints', mode='before')
    @classmethod
    def _decode_waypoints(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = json.loads(value)
        if isinstance(value, list):
            return [parse_location(item) for item in value]
        return value


class StartEndPayload(BaseModel):
    start: LocationPayload
    end: Optional[LocationPayload] = None
    radius: Optional[float] = Field(default=None, gt=0)

    @field_validator('start', 'end', mode='before')
    @classmethod
    def _decode_location(cls, value: Any) -> Any:
        if value is None or value == '':
            return None
        return parse_location(value)

    @field_validator('radius', mode='before')
    @classmethod
    def _blank_radius(cls, value: Any) -> Any:
        return None if value == '' else value


class GenRoutePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    selected: str = Field(alias='routes-drop-down', min_length=1)


class ZipCodePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    zip_code: str = Field(alias='zip-code', pattern=r'^\s*\d{1,5}\s*$')


class DatabaseQueryParams(BaseModel):
    q: Optional[str] = None


def validate_payload(model_cls, data: Dict[str, Any]):
    """Validate ``data`` with ``model_cls``; raise ``ValidationFailure`` on error."""
    try:
        return model_cls.model_validate(data)
    except (ValidationError, ValueError) as exc:
        errors = exc.errors(include_url=False) if isinstance(exc, ValidationError) else [{'msg': str(exc)}]
        raise ValidationFailure(
            f'Invalid {model_cls.__name__} request',
            details={'errors': json.loads(json.dumps(errors, default=str))},
        ) from exc


__all__ = [
    'LocationPayload',
    'QueryPayload',
    'ChosenWaypointsPayload',
    'StartEndPayload',
    'GenRoutePayload',
    'ZipCodePayload',
    'DatabaseQueryParams',
    'parse_location',
    'validate_payload',
]
