"""Route contract: which controller operation serves each path and verb."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class RouteContract:
    operation: str
    http_route: str
    http_method: str
    session_scoped: bool = True


OPERATION_CONTRACTS: List[RouteContract] = [
    RouteContract("get_health", "health", "GET", session_scoped=False),
    RouteContract("get_waypoints", "query", "GET"),
    RouteContract("submit_query", "query", "POST"),
    RouteContract("get_query_text", "text-store", "GET"),
    RouteContract("get_chosen_waypoints", "chosen-waypoints", "GET"),
    RouteContract("choose_waypoints", "chosen-waypoints", "POST"),
    RouteContract("get_start_end", "start-end", "GET"),
    RouteContract("set_start_end", "start-end", "POST"),
    RouteContract("list_stored_routes", "route-store", "GET"),
    RouteContract("get_generated_route", "gen-route", "GET"),
    RouteContract("select_generated_route", "gen-route", "POST"),
    RouteContract("lookup_species", "database", "GET", session_scoped=False),
    RouteContract("get_zip_code", "zip-code", "GET"),
    RouteContract("set_zip_code", "zip-code", "POST"),
]

HTTP_OPERATIONS: Dict[Tuple[str, str], RouteContract] = {
    (contract.http_route, contract.http_method): contract for contract in OPERATION_CONTRACTS
}

__all__ = ["RouteContract", "OPERATION_CONTRACTS", "HTTP_OPERATIONS"]
