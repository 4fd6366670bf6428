"""Nearest-route ranking over stored routes."""

from __future__ import annotations

import heapq
from typing import Iterable, List, Optional, Tuple

from .geo import distance
from .models import Coordinate, StoredRoute


def rank_routes(
    routes: Iterable[StoredRoute],
    reference: Optional[Coordinate],
    limit: int,
    max_distance: Optional[float] = None,
) -> List[StoredRoute]:
    """Up to ``limit`` routes, nearest centre to ``reference`` first.

    Equal distances are ordered by ascending route id. Routes without a centre,
    or farther than ``max_distance`` degrees, are dropped. Without a reference
    the first ``limit`` routes by id are returned.
    """
    if limit <= 0:
        return []
    if reference is None:
        return sorted(routes, key=lambda route: route.id)[:limit]

    # Max-heap of the best ``limit`` candidates, keyed on (-distance, -id)
    heap: List[Tuple[float, int, StoredRoute]] = []
    for route in routes:
        if route.center is None:
            continue
        dist = distance(route.center, reference)
        if max_distance is not None and dist > max_distance:
            continue
        entry = (-dist, -route.id, route)
        if len(heap) < limit:
            heapq.heappush(heap, entry)
        elif (entry[0], entry[1]) > (heap[0][0], heap[0][1]):
            heapq.heapreplace(heap, entry)

    return [route for _, _, route in sorted(heap, key=lambda e: (-e[0], -e[1]))]


__all__ = ['rank_routes']
