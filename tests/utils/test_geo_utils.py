# tests/utils/test_geo_utils.py
"""
Тесты для геоутилит (Haversine, резервная оценка).
"""

import pytest

from ev_routing.core.routing.models import Coordinate
from ev_routing.utils.geo_utils import (
    calculate_distance,
    fallback_estimate,
    haversine_km,
    straight_line_geometry,
)


class TestCalculateDistance:
    """Тесты для calculate_distance."""

    def test_same_point(self) -> None:
        assert calculate_distance(10.7769, 106.7009, 10.7769, 106.7009) == 0.0

    def test_one_degree_on_equator(self) -> None:
        """Один градус долготы на экваторе ~ 111.195 км при R = 6371 км."""
        assert calculate_distance(0.0, 0.0, 0.0, 1.0) == pytest.approx(111.19492664455873)

    def test_symmetric(self) -> None:
        there = calculate_distance(10.7769, 106.7009, 21.0285, 105.8542)
        back = calculate_distance(21.0285, 105.8542, 10.7769, 106.7009)
        assert there == pytest.approx(back)

    def test_hcmc_to_hanoi(self) -> None:
        """Хошимин -> Ханой по прямой около 1140 км."""
        distance = calculate_distance(10.7769, 106.7009, 21.0285, 105.8542)
        assert 1130 < distance < 1150


class TestHaversineKm:
    def test_matches_calculate_distance(self) -> None:
        a = Coordinate(latitude=10.7769, longitude=106.7009)
        b = Coordinate(latitude=10.7626, longitude=106.6602)
        assert haversine_km(a, b) == calculate_distance(10.7769, 106.7009, 10.7626, 106.6602)


class TestFallbackEstimate:
    """Тесты для fallback_estimate."""

    def test_default_speed(self) -> None:
        estimate = fallback_estimate(Coordinate(0.0, 0.0), Coordinate(0.0, 1.0))
        assert estimate.distance_km == pytest.approx(111.19492664455873)
        assert estimate.duration_minutes == pytest.approx(111.19492664455873 / 40 * 60)

    def test_custom_speed(self) -> None:
        estimate = fallback_estimate(Coordinate(0.0, 0.0), Coordinate(0.0, 1.0), average_speed_kmh=60.0)
        assert estimate.duration_minutes == pytest.approx(111.19492664455873)


def test_straight_line_geometry() -> None:
    geometry = straight_line_geometry(Coordinate(10.0, 106.0), Coordinate(11.0, 107.0))
    assert geometry == {
        "type": "LineString",
        "coordinates": [[106.0, 10.0], [107.0, 11.0]],
    }
