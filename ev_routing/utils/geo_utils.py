# ev_routing/utils/geo_utils.py
import math
from typing import Any

from ev_routing.common.constants import DEFAULT_AVERAGE_SPEED_KMH, EARTH_RADIUS_KM
from ev_routing.core.routing.models import Coordinate, FallbackEstimate


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Вычисляет расстояние между двумя точками (в км) по формуле Haversine.
    """
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(dlon / 2) ** 2)

    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def haversine_km(origin: Coordinate, destination: Coordinate) -> float:
    """Расстояние по прямой между двумя координатами (км)."""
    return calculate_distance(
        origin.latitude, origin.longitude,
        destination.latitude, destination.longitude,
    )


def fallback_estimate(
    origin: Coordinate,
    destination: Coordinate,
    average_speed_kmh: float = DEFAULT_AVERAGE_SPEED_KMH,
) -> FallbackEstimate:
    """
    Резервная оценка, когда маршрут по дорогам недоступен.
    Время считается из расстояния по прямой при постоянной средней скорости.
    """
    distance_km = haversine_km(origin, destination)
    return FallbackEstimate(
        distance_km=distance_km,
        duration_minutes=(distance_km / average_speed_kmh) * 60,
    )


def straight_line_geometry(origin: Coordinate, destination: Coordinate) -> dict[str, Any]:
    """GeoJSON LineString из двух точек (порядок lon, lat)."""
    return {
        "type": "LineString",
        "coordinates": [
            [origin.longitude, origin.latitude],
            [destination.longitude, destination.latitude],
        ],
    }
