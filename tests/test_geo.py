from datetime import date

import pytest

from neighborhood_nature.geo import (
    BoundingBox,
    bounding_box_for,
    center_of_mass,
    distance,
    miles_to_degrees,
    snap_to_grid,
    start_date,
)
from neighborhood_nature.models import Coordinate, StartEnd


@pytest.mark.parametrize('value, expected', [
    (-87.629454, -87.62944),
    (41.848653, 41.84864),
    (41.897219, 41.8972),
    (0.0, 0.0),
])
def test_snap_to_grid(value, expected):
    assert snap_to_grid(value) == pytest.approx(expected, abs=1e-9)


def test_start_date_is_one_year_back():
    assert start_date(date(2020, 8, 1)) == '2019-08-01'


def test_start_date_on_leap_day():
    assert start_date(date(2020, 2, 29)) == '2019-02-28'


def test_center_of_mass():
    center = center_of_mass([Coordinate(0.0, 0.0), Coordinate(2.0, 4.0)])
    assert center == Coordinate(1.0, 2.0)
    assert center_of_mass([]) is None


def test_distance_is_planar_degrees():
    assert distance(Coordinate(0.0, 0.0), Coordinate(3.0, 4.0)) == pytest.approx(5.0)


def test_bounding_box_for_loop_uses_radius():
    trip = StartEnd(Coordinate(-87.6, 41.8), Coordinate(-87.6, 41.8), radius=6.9)
    box = bounding_box_for(trip)
    assert box.min_x == pytest.approx(-87.7)
    assert box.max_y == pytest.approx(41.9)


def test_bounding_box_for_trip_spans_both_ends():
    trip = StartEnd(Coordinate(-87.6, 41.9), Coordinate(-87.7, 41.8))
    box = bounding_box_for(trip, padding_miles=0.0)
    assert box == BoundingBox(-87.7, 41.8, -87.6, 41.9)
    assert box.contains(trip.midpoint)


def test_bounding_box_query_params():
    params = BoundingBox.from_sequence([-87.5, 41.9, -87.7, 41.8]).to_query_params()
    assert params == {'swlat': 41.8, 'swlng': -87.7, 'nelat': 41.9, 'nelng': -87.5}


def test_miles_to_degrees():
    assert miles_to_degrees(69.0) == pytest.approx(1.0)
