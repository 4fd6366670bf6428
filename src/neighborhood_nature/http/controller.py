"""Controller functions for Neighborhood Nature HTTP routes."""

from __future__ import annotations

from typing import Any, Callable, Dict

from ..errors import MethodNotAllowed, NatureError, ValidationFailure, error_response
from ..logging import module_logger
from ..transport import normalize_transport_response

logger = module_logger(service='nature', component='controller')


class NatureController:
    """Coordinate request validation and service execution."""

    def __init__(self, service) -> None:
        self._service = service

    # Basic endpoints ---------------------------------------------------------
    def get_health(self) -> Dict[str, Any]:
        return self._safe_call('get_health', self._service.get_health, 'HEALTH_FAILED')

    def lookup_species(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._safe_call('lookup_species', lambda: self._service.lookup_species(payload), 'LOOKUP_SPECIES_FAILED')

    # Waypoint query ----------------------------------------------------------
    def submit_query(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._safe_call('submit_query', lambda: self._service.submit_query(session_id, payload), 'SUBMIT_QUERY_FAILED')

    def get_waypoints(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._safe_call('get_waypoints', lambda: self._service.get_waypoints(session_id), 'GET_WAYPOINTS_FAILED')

    def get_query_text(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._safe_call('get_query_text', lambda: self._service.get_query_text(session_id), 'GET_QUERY_TEXT_FAILED')

    # Chosen waypoints --------------------------------------------------------
    def choose_waypoints(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._safe_call('choose_waypoints', lambda: self._service.choose_waypoints(session_id, payload), 'CHOOSE_WAYPOINTS_FAILED')

    def get_chosen_waypoints(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._safe_call('get_chosen_waypoints', lambda: self._service.get_chosen_waypoints(session_id), 'GET_CHOSEN_WAYPOINTS_FAILED')

    # Trip endpoints ----------------------------------------------------------
    def set_start_end(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._safe_call('set_start_end', lambda: self._service.set_start_end(session_id, payload), 'SET_START_END_FAILED')

    def get_start_end(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._safe_call('get_start_end', lambda: self._service.get_start_end(session_id), 'GET_START_END_FAILED')

    # Stored routes -----------------------------------------------------------
    def list_stored_routes(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._safe_call('list_stored_routes', lambda: self._service.list_stored_routes(session_id), 'LIST_STORED_ROUTES_FAILED')

    def select_generated_route(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._safe_call('select_generated_route', lambda: self._service.select_generated_route(session_id, payload), 'SELECT_GENERATED_ROUTE_FAILED')

    def get_generated_route(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._safe_call('get_generated_route', lambda: self._service.get_generated_route(session_id), 'GET_GENERATED_ROUTE_FAILED')

    # Zip code ----------------------------------------------------------------
    def set_zip_code(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._safe_call('set_zip_code', lambda: self._service.set_zip_code(session_id, payload), 'SET_ZIP_CODE_FAILED')

    def get_zip_code(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._safe_call('get_zip_code', lambda: self._service.get_zip_code(session_id), 'GET_ZIP_CODE_FAILED')

    # ------------------------------------------------------------------
    def _safe_call(self, operation: str, func: Callable[[], Dict[str, Any]], default_error_code: str) -> Dict[str, Any]:
        try:
            response = func()
        except MethodNotAllowed as exc:
            return error_response(exc.code, exc.message, details=exc.details)
        except ValidationFailure as exc:
            logger.warning('validation_failed', extra={'operation': operation, 'error': exc.message})
            return error_response(exc.code, exc.message, details=exc.details)
        except NatureError as exc:
            logger.error('nature_error', extra={'operation': operation, 'error': exc.message})
            return error_response(exc.code, exc.message, details=exc.details)
        except Exception as exc:  # pragma: no cover - unexpected failure
            logger.exception('controller_unhandled', extra={'operation': operation, 'error': str(exc)})
            response = error_response(default_error_code, str(exc))

        return normalize_transport_response(operation, response, default_error_code=default_error_code)


__all__ = ["NatureController"]
