"""Per-session view over :class:`NatureDatabase`."""

from __future__ import annotations

import json
from typing import Iterable, Optional

from .database import NatureDatabase
from .logging import module_logger
from .models import Coordinate

logger = module_logger(service='nature', component='session_store')

EMPTY = "[]"

# Entity types
ROUTE = "Route"
START_END = "StartEnd"
ZIP_CODE = "ZipCode"
GEN_ROUTE = "GenRoute"

# Consume-once flags
WAYPOINTS_FETCHED = "waypoints-fetched"
TEXT_FETCHED = "text-fetched"
ROUTE_FETCHED = "route-fetched"
START_END_FETCHED = "start-end-fetched"
GEN_ROUTE_FETCHED = "gen-route-fetched"


class SessionDataStore:
    """Read and write named properties of the entities owned by one session."""

    def __init__(self, database: NatureDatabase, session_id: str) -> None:
        self._db = database
        self._session_id = session_id

    @property
    def session_id(self) -> str:
        return self._session_id

    def store_property(self, entity_type: str, name: str, value: Optional[str]) -> None:
        self._db.put_property(entity_type, self._session_id, name, value)

    def fetch_entity(self, entity_type: str, name: str) -> str:
        """The stored property value, or ``EMPTY`` when there is none."""
        value = self._db.get_property(entity_type, self._session_id, name)
        return EMPTY if value is None else value

    def reset_fetch_flags(self, names: Iterable[str]) -> None:
        self._db.reset_flags(self._session_id, list(names))

    def query_only_if_first_fetch(self, flag: str, entity_type: str, name: str) -> str:
        """Serve a property once per reset of ``flag``; ``EMPTY`` afterwards."""
        value = self._db.consume_property(self._session_id, flag, entity_type, name)
        return EMPTY if value is None else value

    def store_stored_route(self) -> Optional[int]:
        """Publish the session's current route; no-op without one."""
        route = self._db.get_entity(ROUTE, self._session_id)
        if not route.get("text") and not route.get("actual-route"):
            logger.debug('stored_route_skipped', extra={'session_id': self._session_id})
            return None

        center = None
        raw_center = route.get("center-of-mass")
        if raw_center and raw_center != EMPTY:
            try:
                center = Coordinate.from_dict(json.loads(raw_center))
            except (ValueError, KeyError, TypeError):
                logger.warning('center_of_mass_unreadable', extra={'session_id': self._session_id})

        route_id = self._db.create_stored_route(
            route.get("text") or "",
            route.get("actual-route") or EMPTY,
            center,
        )
        logger.info('stored_route_created', extra={'session_id': self._session_id, 'route_id': route_id})
        return route_id


__all__ = [
    "SessionDataStore",
    "EMPTY",
    "ROUTE",
    "START_END",
    "ZIP_CODE",
    "GEN_ROUTE",
    "WAYPOINTS_FETCHED",
    "TEXT_FETCHED",
    "ROUTE_FETCHED",
    "START_END_FETCHED",
    "GEN_ROUTE_FETCHED",
]
