# ev_routing/core/stations/service.py
"""
Расстояние и время в пути до зарядных станций.
Используется списком и картой станций для сортировки и подписей.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Hashable, Iterable, Optional

from ev_routing.common.constants import RouteSource
from ev_routing.common.logger import log_info, log_warning
from ev_routing.core.routing.formatting import format_distance, format_duration
from ev_routing.core.routing.models import Coordinate, RouteDestination
from ev_routing.core.routing.service import RouteEstimationService


@dataclass(frozen=True)
class StationDistance:
    """Станция с расстоянием и временем в пути от пользователя."""
    station_id: Hashable
    name: str
    distance_km: float
    duration_minutes: float
    distance_text: str
    duration_text: str
    source: RouteSource


def _field(station: Any, name: str) -> Any:
    if isinstance(station, dict):
        return station.get(name)
    return getattr(station, name, None)


def station_coordinate(station: Any) -> Optional[Coordinate]:
    """
    Извлекает координату станции.

    Широта и долгота могут прийти строками; пустые или нечисловые
    значения дают None.
    """
    latitude = _field(station, "latitude")
    longitude = _field(station, "longitude")
    if latitude in (None, "") or longitude in (None, ""):
        return None
    try:
        return Coordinate(latitude=float(latitude), longitude=float(longitude))
    except (TypeError, ValueError):
        return None


class StationDistanceService:
    """
    Сервис подписей расстояния для станций.

    Маршруты запрашиваются пакетно через RouteEstimationService; для
    станций без маршрута используется оценка по прямой.
    """

    def __init__(self, routes: RouteEstimationService) -> None:
        self._routes = routes

    async def annotate(self, origin: Coordinate, stations: Iterable[Any]) -> list[StationDistance]:
        """
        Рассчитывает расстояние и время до каждой станции.

        Args:
            origin: Местоположение пользователя
            stations: Станции (dict или объект с id, latitude, longitude, name)

        Returns:
            Список StationDistance в порядке входных станций
            (станции без координат пропускаются)
        """
        # Ключ пакета - позиция станции: id станций могут повторяться
        destinations: list[RouteDestination] = []
        entries: list[tuple[Hashable, str]] = []

        for station in stations:
            station_id = _field(station, "id")
            coordinate = station_coordinate(station)
            if station_id is None or coordinate is None:
                await log_warning(
                    "Станция пропущена: нет id или координат",
                    extra={"station_id": station_id},
                )
                continue
            destinations.append(RouteDestination(id=len(destinations), coordinate=coordinate))
            entries.append((station_id, _field(station, "name") or ""))

        routes = await self._routes.get_routes_for_many(origin, destinations)

        annotated: list[StationDistance] = []
        for destination, (station_id, name) in zip(destinations, entries):
            route = routes[destination.id]
            if route.success:
                distance_km = route.distance_km
                duration_minutes = route.duration_minutes
                source = route.source
            else:
                estimate = self._routes.fallback_estimate(origin, destination.coordinate)
                distance_km = estimate.distance_km
                duration_minutes = estimate.duration_minutes
                source = RouteSource.HAVERSINE

            annotated.append(
                StationDistance(
                    station_id=station_id,
                    name=name,
                    distance_km=distance_km,
                    duration_minutes=duration_minutes,
                    distance_text=format_distance(distance_km),
                    duration_text=format_duration(duration_minutes),
                    source=source,
                )
            )

        await log_info(
            "Расстояния до станций рассчитаны",
            extra={
                "stations": len(annotated),
                "fallback": sum(1 for item in annotated if item.source is RouteSource.HAVERSINE),
            },
        )
        return annotated

    async def nearest(
        self,
        origin: Coordinate,
        stations: Iterable[Any],
        limit: Optional[int] = None,
    ) -> list[StationDistance]:
        """Станции по возрастанию расстояния (при равенстве — по времени)."""
        annotated = await self.annotate(origin, stations)
        annotated.sort(key=lambda item: (item.distance_km, item.duration_minutes))
        if limit is not None:
            return annotated[:limit]
        return annotated
