"""Service layer for Neighborhood Nature operations."""

from __future__ import annotations

import json
import time
from typing import Any, Dict, List, Optional

from ..config import NatureConfig
from ..database import NatureDatabase
from ..errors import ValidationFailure
from ..geo import BoundingBox, bounding_box_for, center_of_mass, miles_to_degrees, start_date
from ..geocoding import ZipCodeGeocoder, format_zip_code
from ..http.schemas import (
    ChosenWaypointsPayload,
    DatabaseQueryParams,
    GenRoutePayload,
    QueryPayload,
    StartEndPayload,
    ZipCodePayload,
    validate_payload,
)
from ..logging import module_logger
from ..models import Coordinate, StartEnd, coordinates_to_json, waypoint_lists_to_json
from ..observations import ObservationClient
from ..query_parser import QueryParser
from ..ranking import rank_routes
from ..session_store import (
    EMPTY,
    GEN_ROUTE,
    GEN_ROUTE_FETCHED,
    ROUTE,
    ROUTE_FETCHED,
    START_END,
    START_END_FETCHED,
    TEXT_FETCHED,
    WAYPOINTS_FETCHED,
    ZIP_CODE,
    SessionDataStore,
)
from ..species_lookup import SpeciesLookup

logger = module_logger(service='nature', component='service')

SERVICE_NAME = "Neighborhood Nature"
SERVICE_VERSION = "0.1.0"


def _json_body(body: Any) -> Dict[str, Any]:
    """Response whose body is sent verbatim as JSON (arrays included)."""
    text = body if isinstance(body, str) else json.dumps(body)
    return {"success": True, "_raw_text": text, "_content_type": "application/json"}


def _redirect(location: str, **extra: Any) -> Dict[str, Any]:
    response: Dict[str, Any] = {"success": True, "_redirect": location}
    response.update(extra)
    return response


class NatureService:
    """Implement each HTTP operation against the session store and external lookups."""

    def __init__(
        self,
        config: NatureConfig,
        database: NatureDatabase,
        observations: ObservationClient,
        parser: QueryParser,
        geocoder: Optional[ZipCodeGeocoder] = None,
        lookup: Optional[SpeciesLookup] = None,
    ) -> None:
        self._config = config
        self._db = database
        self._observations = observations
        self._parser = parser
        self._geocoder = geocoder
        self._lookup = lookup or SpeciesLookup()
        self._started = time.time()

    def _store(self, session_id: str) -> SessionDataStore:
        if not session_id:
            raise ValidationFailure("session id is required", details={"parameter": "session_id"})
        return SessionDataStore(self._db, session_id)

    # ------------------------------------------------------------------
    # Health
    def get_health(self) -> Dict[str, Any]:
        stats = self._db.get_statistics()
        return {
            "success": True,
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "url": self._config.get_server_url(),
            "uptime_seconds": round(time.time() - self._started, 3),
            "stored_routes": stats["stored_routes"],
        }

    # ------------------------------------------------------------------
    # Waypoint query
    def submit_query(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        request = validate_payload(QueryPayload, payload)
        store = self._store(session_id)

        descriptions = self._parser.parse(request.text_input)
        area = self._search_area(store)
        waypoints = self._observations.resolve(descriptions, area, start_date())

        store.store_property(ROUTE, "text", request.text_input)
        store.store_property(ROUTE, "waypoints", waypoint_lists_to_json(waypoints))
        store.store_property(ROUTE, "timestamp", str(int(time.time() * 1000)))
        store.store_property(ROUTE, "status-code", "200")
        store.reset_fetch_flags([WAYPOINTS_FETCHED, TEXT_FETCHED])

        logger.info('query_resolved', extra={
            'session_id': session_id,
            'descriptions': len(descriptions),
            'found': [len(group) for group in waypoints],
        })
        return _redirect(
            "/create-route.html",
            labels=[d.label for d in descriptions],
            waypoints=[[c.to_dict() for c in group] for group in waypoints],
        )

    def get_waypoints(self, session_id: str) -> Dict[str, Any]:
        store = self._store(session_id)
        return _json_body(store.query_only_if_first_fetch(WAYPOINTS_FETCHED, ROUTE, "waypoints"))

    def get_query_text(self, session_id: str) -> Dict[str, Any]:
        store = self._store(session_id)
        text = store.query_only_if_first_fetch(TEXT_FETCHED, ROUTE, "text")
        return {"success": True, "_raw_text": text, "_content_type": "text/plain; charset=utf-8"}

    # ------------------------------------------------------------------
    # Chosen waypoints
    def choose_waypoints(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        request = validate_payload(ChosenWaypointsPayload, {"waypoints": self._extract_waypoints(payload)})
        chosen = [item.to_coordinate() for item in request.waypoints]
        if not chosen:
            raise ValidationFailure("at least one waypoint must be chosen", details={"parameter": "waypoints"})

        store = self._store(session_id)
        store.store_property(ROUTE, "actual-route", coordinates_to_json(chosen))
        center = center_of_mass(chosen)
        store.store_property(ROUTE, "center-of-mass", json.dumps(center.to_dict()) if center else EMPTY)
        store.store_property(ROUTE, "timestamp", str(int(time.time() * 1000)))
        store.reset_fetch_flags([ROUTE_FETCHED])
        route_id = store.store_stored_route()
        return _redirect("/index.html", route_id=route_id, count=len(chosen))

    def get_chosen_waypoints(self, session_id: str) -> Dict[str, Any]:
        store = self._store(session_id)
        return _json_body(store.query_only_if_first_fetch(ROUTE_FETCHED, ROUTE, "actual-route"))

    def _extract_waypoints(self, payload: Dict[str, Any]) -> Any:
        if "waypoints" in payload:
            return payload["waypoints"]
        # Browser forms submit each checked box with its JSON coordinate as the name
        return [key for key in payload if isinstance(key, str) and key.lstrip().startswith("{")]

    # ------------------------------------------------------------------
    # Trip endpoints
    def set_start_end(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        request = validate_payload(StartEndPayload, payload)
        start = request.start.to_coordinate().with_label("start")
        if request.end is not None:
            end = request.end.to_coordinate().with_label("end")
        elif request.radius is not None:
            end = start.with_label("end")
        else:
            raise ValidationFailure("end is required unless a loop radius is given", details={"parameter": "end"})

        trip = StartEnd(start, end, request.radius)
        store = self._store(session_id)
        store.store_property(START_END, "start", json.dumps(trip.start.to_dict()))
        store.store_property(START_END, "end", json.dumps(trip.end.to_dict()))
        store.store_property(START_END, "midpoint", json.dumps(trip.midpoint.to_dict()))
        store.store_property(START_END, "radius", EMPTY if trip.radius is None else str(trip.radius))
        store.reset_fetch_flags([START_END_FETCHED])
        return _redirect("/create-route.html", trip=trip.to_dict())

    def get_start_end(self, session_id: str) -> Dict[str, Any]:
        store = self._store(session_id)
        if store.query_only_if_first_fetch(START_END_FETCHED, START_END, "start") == EMPTY:
            return _json_body(EMPTY)
        trip = self._load_trip(store)
        return _json_body(trip.to_dict() if trip else EMPTY)

    def _load_trip(self, store: SessionDataStore) -> Optional[StartEnd]:
        raw_start = store.fetch_entity(START_END, "start")
        raw_end = store.fetch_entity(START_END, "end")
        if raw_start == EMPTY or raw_end == EMPTY:
            return None
        raw_radius = store.fetch_entity(START_END, "radius")
        try:
            return StartEnd(
                Coordinate.from_dict(json.loads(raw_start)),
                Coordinate.from_dict(json.loads(raw_end)),
                None if raw_radius == EMPTY else float(raw_radius),
            )
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning('trip_unreadable', extra={'session_id': store.session_id, 'error': str(exc)})
            return None

    def _search_area(self, store: SessionDataStore) -> BoundingBox:
        trip = self._load_trip(store)
        if trip is not None:
            return bounding_box_for(trip, float(self._config.get('loop_padding_miles', 0.5)))
        bounds = self._load_zip_bounds(store)
        if bounds is not None:
            return bounds
        return BoundingBox.from_sequence(self._config.default_bounding_box)

    # ------------------------------------------------------------------
    # Stored routes
    def list_stored_routes(self, session_id: str) -> Dict[str, Any]:
        store = self._store(session_id)
        reference = self._reference_point(store)
        max_distance = miles_to_degrees(self._config.route_search_radius_miles) if reference else None
        routes = rank_routes(
            self._db.list_stored_routes(),
            reference,
            self._config.route_result_limit,
            max_distance=max_distance,
        )
        return _json_body([route.to_dict() for route in routes])

    def _reference_point(self, store: SessionDataStore) -> Optional[Coordinate]:
        trip = self._load_trip(store)
        if trip is not None:
            return trip.midpoint
        bounds = self._load_zip_bounds(store)
        return bounds.center if bounds else None

    # ------------------------------------------------------------------
    # Generated route selection
    def select_generated_route(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        request = validate_payload(GenRoutePayload, payload)
        store = self._store(session_id)
        store.store_property(GEN_ROUTE, "selected", request.selected)
        store.reset_fetch_flags([GEN_ROUTE_FETCHED])
        return _redirect("/generated-routes.html")

    def get_generated_route(self, session_id: str) -> Dict[str, Any]:
        store = self._store(session_id)
        selected = store.query_only_if_first_fetch(GEN_ROUTE_FETCHED, GEN_ROUTE, "selected")
        if selected.strip().isdigit():
            route = self._db.get_stored_route(int(selected))
            if route is not None:
                return _json_body(route.to_dict())
        # The drop-down may carry a serialized route; anything else is quoted
        try:
            json.loads(selected)
        except ValueError:
            selected = json.dumps(selected)
        return _json_body(selected)

    # ------------------------------------------------------------------
    # Mock species lookup
    def lookup_species(self, params: Dict[str, Any]) -> Dict[str, Any]:
        request = validate_payload(DatabaseQueryParams, params)
        return _json_body(self._lookup.lookup(request.q))

    # ------------------------------------------------------------------
    # Zip code
    def set_zip_code(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        request = validate_payload(ZipCodePayload, payload)
        zip_code = format_zip_code(request.zip_code)
        store = self._store(session_id)
        store.store_property(ZIP_CODE, "zip-code", zip_code)
        store.store_property(ZIP_CODE, "bounds", EMPTY)
        return _redirect("/generated-routes.html", zip_code=zip_code)

    def get_zip_code(self, session_id: str) -> Dict[str, Any]:
        store = self._store(session_id)
        zip_code = store.fetch_entity(ZIP_CODE, "zip-code")
        if zip_code == EMPTY:
            return {"success": True, "zip_code": None, "bounds": None}

        bounds = self._load_zip_bounds(store)
        if bounds is None and self._geocoder is not None:
            bounds = self._geocoder.bounds(zip_code)
            if bounds is not None:
                store.store_property(ZIP_CODE, "bounds", json.dumps(bounds.to_list()))
        return {"success": True, "zip_code": zip_code, "bounds": bounds.to_list() if bounds else None}

    def _load_zip_bounds(self, store: SessionDataStore) -> Optional[BoundingBox]:
        raw = store.fetch_entity(ZIP_CODE, "bounds")
        if raw == EMPTY:
            return None
        try:
            values: List[float] = json.loads(raw)
            return BoundingBox.from_sequence(values)
        except (ValueError, TypeError):
            return None


__all__ = ["NatureService", "SERVICE_NAME", "SERVICE_VERSION"]
