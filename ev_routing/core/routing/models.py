# ev_routing/core/routing/models.py
"""
Модели маршрутизации.
Координаты, запрос маршрута, результат и резервная оценка.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Hashable, Optional

from ev_routing.common.constants import DEFAULT_CACHE_PRECISION, RouteSource


@dataclass(frozen=True)
class Coordinate:
    """Географическая точка (широта, долгота)."""
    latitude: float
    longitude: float

    def rounded(self, precision: int = DEFAULT_CACHE_PRECISION) -> "Coordinate":
        """Возвращает координату, округлённую до precision знаков."""
        return Coordinate(
            latitude=round(self.latitude, precision),
            longitude=round(self.longitude, precision),
        )

    def to_osrm(self) -> str:
        """Формат OSRM: 'lon,lat'."""
        return f"{self.longitude},{self.latitude}"


@dataclass(frozen=True)
class RouteQuery:
    """
    Упорядоченная пара (откуда, куда).

    Ключ кэша не симметричен: маршрут A -> B и B -> A кэшируются отдельно.
    """
    origin: Coordinate
    destination: Coordinate

    def cache_key(self, precision: int = DEFAULT_CACHE_PRECISION) -> str:
        """
        Строит ключ кэша из координат, округлённых до precision знаков.

        Пример: '106.7009,10.7769-106.6602,10.7626'
        """
        o, d = self.origin, self.destination
        return (
            f"{o.longitude:.{precision}f},{o.latitude:.{precision}f}"
            f"-{d.longitude:.{precision}f},{d.latitude:.{precision}f}"
        )


@dataclass(frozen=True)
class RouteResult:
    """
    Результат запроса маршрута.

    При success=False поля расстояния и времени равны нулю,
    а error_reason содержит причину ошибки.
    """
    distance_meters: float = 0.0
    duration_seconds: float = 0.0
    geometry: Optional[dict[str, Any]] = None  # GeoJSON LineString
    legs: Optional[list[dict[str, Any]]] = None  # участки маршрута OSRM
    success: bool = False
    error_reason: Optional[str] = None
    source: RouteSource = RouteSource.OSRM

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000

    @property
    def duration_minutes(self) -> float:
        return self.duration_seconds / 60

    @classmethod
    def failure(cls, reason: str) -> "RouteResult":
        """Неудачный результат с диагностикой."""
        return cls(success=False, error_reason=reason)

    @classmethod
    def straight_line(
        cls,
        distance_km: float,
        duration_minutes: float,
        geometry: Optional[dict[str, Any]] = None,
        reason: Optional[str] = None,
    ) -> "RouteResult":
        """Результат, построенный по прямой (Haversine)."""
        return cls(
            distance_meters=distance_km * 1000,
            duration_seconds=duration_minutes * 60,
            geometry=geometry,
            success=True,
            error_reason=reason,
            source=RouteSource.HAVERSINE,
        )


@dataclass(frozen=True)
class RouteDestination:
    """Пункт назначения с идентификатором вызывающей стороны."""
    id: Hashable
    coordinate: Coordinate


@dataclass(frozen=True)
class FallbackEstimate:
    """Оценка расстояния и времени по прямой."""
    distance_km: float
    duration_minutes: float

