# ev_routing/core/routing/__init__.py
"""
Маршрутизация.
Оценка расстояния и времени до зарядных станций через OSRM.
"""

from ev_routing.core.routing.models import (
    Coordinate,
    FallbackEstimate,
    RouteDestination,
    RouteQuery,
    RouteResult,
)
from ev_routing.core.routing.cache import RouteCache
from ev_routing.core.routing.formatting import format_distance, format_duration
from ev_routing.core.routing.service import RouteEstimationService, RouteProviderError

__all__ = [
    "Coordinate",
    "FallbackEstimate",
    "RouteDestination",
    "RouteQuery",
    "RouteResult",
    "RouteCache",
    "format_distance",
    "format_duration",
    "RouteEstimationService",
    "RouteProviderError",
]
