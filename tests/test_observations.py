import json

import httpx
import pytest

from neighborhood_nature.errors import ObservationServiceUnavailable
from neighborhood_nature.geo import BoundingBox
from neighborhood_nature.models import Coordinate, WaypointDescription
from neighborhood_nature.observations import ObservationClient, json_to_coordinates

BBOX = BoundingBox(-87.7, 41.8, -87.55, 41.95)
START = '2024-01-01'

TREE_LICHEN_SPOT = {'latitude': 41.897219, 'longitude': -87.622235, 'uri': 'https://example.org/1'}


def _observation(lat, lng, species='', uri=''):
    return {'latitude': lat, 'longitude': lng, 'species_guess': species, 'uri': uri}


def _client(config, handler):
    return ObservationClient(config, client=httpx.Client(transport=httpx.MockTransport(handler)))


def _serve(payloads):
    """Transport that answers each ``q`` with the given JSON payload."""
    requests = []

    def handler(request):
        requests.append(request)
        feature = request.url.params['q']
        return httpx.Response(200, json=payloads.get(feature, []))

    return handler, requests


def test_json_to_coordinates_snaps_and_labels():
    raw = json.dumps([_observation(41.848653, -87.629454, 'Oxeye Daisy', 'https://example.org/7')])
    (coordinate,) = json_to_coordinates(raw, '3 daisy')
    assert (coordinate.x, coordinate.y) == pytest.approx((-87.62944, 41.84864))
    assert coordinate.label == '3 daisy'
    assert coordinate.species == 'Oxeye Daisy'
    assert coordinate.url == 'https://example.org/7'


def test_json_to_coordinates_falls_back_through_name_fields():
    raw = [
        {'latitude': 1, 'longitude': 2, 'common_name': {'name': 'Clover'}},
        {'latitude': 1, 'longitude': 3, 'taxon': {'preferred_common_name': 'White Clover'}},
    ]
    assert [c.species for c in json_to_coordinates(raw, 'clover')] == ['Clover', 'White Clover']


def test_json_to_coordinates_skips_points_without_location():
    raw = [{'latitude': None, 'longitude': None}, {'id': 4}, _observation('41.85', '-87.63')]
    assert json_to_coordinates(raw, 'x') == [Coordinate(-87.63, 41.85)]


def test_json_to_coordinates_skips_infinite_positions(config):
    payload = '[{"latitude": 1e400, "longitude": -87.6}, {"latitude": 41.85, "longitude": "-Infinity"}, {"latitude": 41.85, "longitude": -87.63}]'
    client = _client(config, lambda request: httpx.Response(200, text=payload))
    assert client.fetch('daisy', 'daisy', BBOX, START) == [Coordinate(-87.63, 41.85)]


def test_json_to_coordinates_rejects_non_arrays():
    with pytest.raises(ValueError):
        json_to_coordinates('{"results": []}', 'x')


def test_fetch_sends_area_and_date(config):
    handler, requests = _serve({'daisy': [_observation(41.848653, -87.629454)]})
    client = _client(config, handler)

    client.fetch('daisy', 'daisy', BBOX, START)

    params = requests[0].url.params
    assert params['q'] == 'daisy'
    assert params['d1'] == START
    assert float(params['swlat']) == 41.8
    assert float(params['swlng']) == -87.7
    assert float(params['nelat']) == 41.95
    assert float(params['nelng']) == -87.55


def test_locate_intersects_features(config):
    handler, _ = _serve({
        'tree': [TREE_LICHEN_SPOT, _observation(41.9, -87.6)],
        'lichen': [TREE_LICHEN_SPOT],
    })
    client = _client(config, handler)

    result = client.locate(WaypointDescription(features=['tree', 'lichen']), BBOX, START)

    assert len(result) == 1
    assert (result[0].x, result[0].y) == pytest.approx((-87.62224, 41.8972))
    assert result[0].label == 'tree,lichen'


def test_locate_without_common_point_is_empty(config):
    handler, requests = _serve({
        'tree': [TREE_LICHEN_SPOT],
        'raspberry': [_observation(41.85, -87.63), _observation(41.86, -87.64)],
        'moss': [TREE_LICHEN_SPOT],
    })
    client = _client(config, handler)

    assert client.locate(WaypointDescription(features=['tree', 'raspberry', 'moss']), BBOX, START) == []
    # Stops asking once the intersection is empty
    assert [r.url.params['q'] for r in requests] == ['tree', 'raspberry']


def test_locate_truncates_and_deduplicates(config):
    points = [_observation(41.8 + i / 100.0, -87.6) for i in range(6)]
    handler, _ = _serve({'oak': points + points[:2]})
    client = _client(config, handler)

    result = client.locate(WaypointDescription(amount=3, features=['oak']), BBOX, START)

    assert len(result) == 3
    assert len(set(result)) == 3
    assert result[0].label == '3 oak'


def test_resolve_keeps_description_order(config):
    handler, _ = _serve({
        'daisy': [_observation(41.848653, -87.629454)],
        'clover': [_observation(41.855967, -87.635604)],
    })
    client = _client(config, handler)

    groups = client.resolve(
        [WaypointDescription(features=['daisy']), WaypointDescription(features=['clover'])], BBOX, START,
    )

    assert [[c.label for c in group] for group in groups] == [['daisy'], ['clover']]


def test_bad_status_yields_no_coordinates(config):
    client = _client(config, lambda request: httpx.Response(503, text='busy'))
    assert client.fetch('daisy', 'daisy', BBOX, START) == []


def test_malformed_payload_yields_no_coordinates(config):
    client = _client(config, lambda request: httpx.Response(200, text='<html>nope</html>'))
    assert client.fetch('daisy', 'daisy', BBOX, START) == []


def test_transport_failure_raises(config):
    def handler(request):
        raise httpx.ConnectError('connection refused', request=request)

    client = _client(config, handler)
    with pytest.raises(ObservationServiceUnavailable) as exc_info:
        client.fetch('daisy', 'daisy', BBOX, START)
    assert exc_info.value.status == 502
