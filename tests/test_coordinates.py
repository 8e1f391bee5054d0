"""
Tests for coordinate validation and geodesy helpers.
"""
import math
from types import SimpleNamespace

import pytest

from delivery_tracking.schemas.tracking import Coordinate
from delivery_tracking.services.geo.coordinates import (
    haversine_distance,
    is_valid_coordinate,
    parse_coordinate_string,
    to_coordinate,
)


class TestIsValidCoordinate:
    """Tests for is_valid_coordinate."""

    def test_valid_mapping(self):
        assert is_valid_coordinate({"latitude": 12.9, "longitude": 77.5}) is True

    def test_latitude_out_of_range(self):
        assert is_valid_coordinate({"latitude": 91, "longitude": 0}) is False

    def test_longitude_out_of_range(self):
        assert is_valid_coordinate({"latitude": 0, "longitude": -180.5}) is False

    def test_boundaries_are_valid(self):
        assert is_valid_coordinate({"latitude": -90, "longitude": 180}) is True

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite(self, value):
        assert is_valid_coordinate({"latitude": value, "longitude": 0}) is False

    @pytest.mark.parametrize("value", [None, "12.9", True, [12.9]])
    def test_non_numeric(self, value):
        assert is_valid_coordinate({"latitude": value, "longitude": 77.5}) is False

    def test_missing_keys(self):
        assert is_valid_coordinate({"lat": 12.9, "lng": 77.5}) is False

    def test_none(self):
        assert is_valid_coordinate(None) is False

    def test_object_attributes(self):
        """Test objects exposing latitude/longitude attributes are accepted."""
        position = SimpleNamespace(latitude=12.9, longitude=77.5, accuracy=5.0)
        assert is_valid_coordinate(position) is True

    def test_coordinate_model(self):
        assert is_valid_coordinate(Coordinate(latitude=1.0, longitude=2.0)) is True


class TestToCoordinate:
    """Tests for to_coordinate."""

    def test_converts_mapping(self):
        coordinate = to_coordinate({"latitude": 12.9, "longitude": 77.5})
        assert coordinate == Coordinate(latitude=12.9, longitude=77.5)

    def test_invalid_returns_none(self):
        assert to_coordinate({"latitude": 95, "longitude": 0}) is None


class TestHaversine:
    """Tests for haversine_distance."""

    def test_same_point(self):
        point = Coordinate(latitude=12.9716, longitude=77.5946)
        assert haversine_distance(point, point) == 0

    def test_one_degree_on_equator(self):
        """Test one degree of longitude on the equator is ~111.2 km."""
        a = Coordinate(latitude=0, longitude=0)
        b = Coordinate(latitude=0, longitude=1)
        assert haversine_distance(a, b) == pytest.approx(111.195, rel=1e-3)

    def test_symmetric(self):
        a = Coordinate(latitude=12.9716, longitude=77.5946)
        b = Coordinate(latitude=12.9352, longitude=77.6101)
        assert haversine_distance(a, b) == pytest.approx(haversine_distance(b, a))


class TestParseCoordinateString:
    """Tests for parse_coordinate_string."""

    def test_parses_literal(self):
        coordinate = parse_coordinate_string("12.9716, 77.5946")
        assert coordinate == Coordinate(latitude=12.9716, longitude=77.5946)

    @pytest.mark.parametrize("text", [
        "",
        None,
        "12.9716",
        "80 Feet Road, Koramangala",
        "91,0",
    ])
    def test_rejects_non_literal(self, text):
        assert parse_coordinate_string(text) is None
