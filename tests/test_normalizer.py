"""Tests for coordinate validation and grid rounding."""
import math

import pytest

from basin_service.basin.models import Coordinate
from basin_service.basin.normalizer import (
    ARCGIS_ROUND_MODEL, BASIN_DATA_SPACING, normalize, round_to
)
from basin_service.exceptions import InvalidCoordinate


class TestRounding:

    @pytest.mark.parametrize("value,granularity,expected", [
        (47.6049, 0.01, 47.60),
        (-122.3321, 0.01, -122.33),
        (47.605, 0.01, 47.61),
        (-122.335, 0.01, -122.34),
        (47.61, 0.02, 47.62),
        (47.609, 0.02, 47.6),
        (0.0, 0.01, 0.0),
    ])
    def test_round_to_nearest_multiple(self, value, granularity, expected):
        assert round_to(value, granularity) == pytest.approx(expected, abs=1e-12)

    def test_ties_round_away_from_zero(self):
        assert round_to(0.125, 0.25) == 0.25
        assert round_to(-0.125, 0.25) == -0.25

    def test_normalize_returns_coordinate(self):
        coordinate = normalize(47.60486, -122.33207, BASIN_DATA_SPACING)
        assert coordinate == Coordinate(47.6, -122.33)

    @pytest.mark.parametrize("latitude,longitude", [
        (47.60486, -122.33207),
        (-33.86785, 151.20732),
        (89.999, -179.999),
        (0.005, -0.005),
        (37.774929, -122.419416),
    ])
    @pytest.mark.parametrize("granularity", [BASIN_DATA_SPACING, ARCGIS_ROUND_MODEL, 0.1])
    def test_normalize_is_idempotent(self, latitude, longitude, granularity):
        once = normalize(latitude, longitude, granularity)
        twice = normalize(once.latitude, once.longitude, granularity)
        assert once == twice

    @pytest.mark.parametrize("latitude,longitude,granularity,expected", [
        (89.99, 0.0, 0.7, Coordinate(89.6, 0.0)),
        (89.99, -179.9, 1.1, Coordinate(89.1, -179.3)),
        (-89.99, 179.9, 1.1, Coordinate(-89.1, 179.3)),
    ])
    def test_coarse_grid_stays_in_range(self, latitude, longitude, granularity, expected):
        coordinate = normalize(latitude, longitude, granularity)
        assert coordinate == expected
        assert -90 <= coordinate.latitude <= 90
        assert -180 <= coordinate.longitude <= 180
        assert normalize(coordinate.latitude, coordinate.longitude, granularity) == coordinate

    def test_rounded_values_have_no_float_noise(self):
        coordinate = normalize(34.0522, -118.2437, BASIN_DATA_SPACING)
        assert repr(coordinate.latitude) == "34.05"
        assert repr(coordinate.longitude) == "-118.24"


class TestValidation:

    @pytest.mark.parametrize("latitude,longitude", [
        (90.01, 0.0),
        (-90.5, 0.0),
        (0.0, 180.1),
        (0.0, -181.0),
    ])
    def test_out_of_range_raises(self, latitude, longitude):
        with pytest.raises(InvalidCoordinate) as exc_info:
            normalize(latitude, longitude, BASIN_DATA_SPACING)
        assert exc_info.value.latitude == latitude
        assert exc_info.value.longitude == longitude

    @pytest.mark.parametrize("latitude,longitude", [
        (math.nan, 0.0),
        (0.0, math.nan),
        (math.inf, 0.0),
        (0.0, -math.inf),
    ])
    def test_non_finite_raises(self, latitude, longitude):
        with pytest.raises(InvalidCoordinate, match="finite"):
            normalize(latitude, longitude, BASIN_DATA_SPACING)

    def test_non_numeric_raises(self):
        with pytest.raises(InvalidCoordinate):
            normalize("47.6", -122.3, BASIN_DATA_SPACING)

    @pytest.mark.parametrize("granularity", [0, -0.01, math.nan])
    def test_invalid_granularity_raises(self, granularity):
        with pytest.raises(InvalidCoordinate, match="granularity"):
            normalize(47.6, -122.3, granularity)

    def test_range_bounds_are_valid(self):
        assert normalize(90.0, 180.0, BASIN_DATA_SPACING) == Coordinate(90.0, 180.0)
        assert normalize(-90.0, -180.0, BASIN_DATA_SPACING) == Coordinate(-90.0, -180.0)
