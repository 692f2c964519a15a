# ev_routing/core/routing/cache.py
"""
Кэш маршрутов в памяти.

Живёт столько же, сколько владеющий им сервис. Записи не устаревают
автоматически и удаляются только через clear().
"""

from __future__ import annotations

from typing import Iterator, Optional

from ev_routing.common.constants import DEFAULT_CACHE_PRECISION
from ev_routing.core.routing.models import Coordinate, RouteQuery, RouteResult


class RouteCache:
    """Отображение ключ запроса -> RouteResult (только успешные маршруты)."""

    def __init__(self, precision: int = DEFAULT_CACHE_PRECISION) -> None:
        self._precision = precision
        self._entries: dict[str, RouteResult] = {}

    @property
    def precision(self) -> int:
        return self._precision

    def key_for(self, origin: Coordinate, destination: Coordinate) -> str:
        """Ключ кэша для пары координат."""
        return RouteQuery(origin, destination).cache_key(self._precision)

    def get(self, key: str) -> Optional[RouteResult]:
        return self._entries.get(key)

    def put(self, key: str, result: RouteResult) -> None:
        """Сохраняет результат. Неудачные результаты не кэшируются."""
        if not result.success:
            return
        self._entries[key] = result

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
