"""Transport helpers shared by the HTTP layer."""

from .contract import HTTP_OPERATIONS, OPERATION_CONTRACTS, RouteContract
from .normalize import normalize_transport_response

__all__ = ["HTTP_OPERATIONS", "OPERATION_CONTRACTS", "RouteContract", "normalize_transport_response"]
