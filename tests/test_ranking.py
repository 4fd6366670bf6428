from neighborhood_nature.models import Coordinate, StoredRoute
from neighborhood_nature.ranking import rank_routes


def _route(route_id, x=None, y=None):
    center = Coordinate(x, y) if x is not None else None
    return StoredRoute(route_id, f'route {route_id}', '[]', center)


ORIGIN = Coordinate(0.0, 0.0)


def test_nearest_first():
    routes = [_route(1, 3.0, 0.0), _route(2, 1.0, 0.0), _route(3, 0.0, 2.0)]
    assert [r.id for r in rank_routes(routes, ORIGIN, 10)] == [2, 3, 1]


def test_limit_keeps_closest():
    routes = [_route(i, float(i), 0.0) for i in range(1, 21)]
    assert [r.id for r in rank_routes(routes, ORIGIN, 3)] == [1, 2, 3]


def test_ties_break_on_lower_id():
    routes = [_route(5, 1.0, 0.0), _route(2, 0.0, 1.0), _route(9, -1.0, 0.0), _route(7, 0.0, 0.5)]
    assert [r.id for r in rank_routes(routes, ORIGIN, 3)] == [7, 2, 5]


def test_max_distance_filters():
    routes = [_route(1, 0.1, 0.0), _route(2, 0.5, 0.0)]
    assert [r.id for r in rank_routes(routes, ORIGIN, 10, max_distance=0.2)] == [1]


def test_routes_without_center_are_skipped():
    routes = [_route(1), _route(2, 1.0, 1.0)]
    assert [r.id for r in rank_routes(routes, ORIGIN, 10)] == [2]


def test_without_reference_returns_by_id():
    routes = [_route(3), _route(1, 5.0, 5.0), _route(2)]
    assert [r.id for r in rank_routes(routes, None, 2)] == [1, 2]


def test_non_positive_limit():
    assert rank_routes([_route(1, 0.0, 0.0)], ORIGIN, 0) == []
