# ev_routing/core/stations/__init__.py
"""
Станции.
Расстояние и время в пути до зарядных станций.
"""

from ev_routing.core.stations.service import StationDistance, StationDistanceService

__all__ = [
    "StationDistance",
    "StationDistanceService",
]
