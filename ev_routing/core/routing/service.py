# ev_routing/core/routing/service.py
"""
Сервис оценки маршрутов через OSRM.

Строит маршрут по дорожной сети между двумя точками, кэширует успешные
ответы и при недоступности провайдера переходит на оценку по прямой.
"""

from __future__ import annotations

import asyncio
from collections.abc import Hashable, Iterable, Mapping
from typing import Any

import httpx

from ev_routing.common.constants import OSRM_OK_CODE, RETRYABLE_STATUS_CODES, TypeMsg
from ev_routing.common.logger import (
    get_logger,
    log_debug,
    log_error,
    log_info,
    log_warning,
    setup_logging,
)
from ev_routing.core.routing.cache import RouteCache
from ev_routing.core.routing.models import (
    Coordinate,
    FallbackEstimate,
    RouteDestination,
    RouteResult,
)
from ev_routing.utils import geo_utils


class RouteProviderError(Exception):
    """Ошибка получения маршрута от провайдера."""

    def __init__(self, reason: str, *, retryable: bool = False) -> None:
        super().__init__(reason)
        self.reason = reason
        self.retryable = retryable


class RouteEstimationService:
    """
    Сервис маршрутов поверх публичного OSRM API.

    Реализует:
    - Получение маршрута (расстояние, время, геометрия) с кэшированием
    - Оценку расстояния и времени с резервным расчётом по Haversine
    - Пакетное получение маршрутов с ограничением параллельных запросов
    - Повтор запросов с экспоненциальной задержкой (по настройке)

    Кэш принадлежит экземпляру: два сервиса не делят маршруты между собой.
    """

    ROUTE_PATH = "/route/v1/{profile}/{coordinates}"

    def __init__(
        self,
        base_url: str | None = None,
        *,
        profile: str | None = None,
        timeout: float | None = None,
        cache_precision: int | None = None,
        batch_size: int | None = None,
        batch_delay: float | None = None,
        average_speed_kmh: float | None = None,
        retry_attempts: int | None = None,
        retry_backoff: float | None = None,
    ) -> None:
        """
        Инициализация сервиса.

        Все параметры необязательны: пропущенные берутся из секции
        routing конфигурации.

        Args:
            base_url: Базовый URL OSRM
            profile: Профиль маршрута OSRM (driving, cycling, foot)
            timeout: Таймаут HTTP запроса, сек
            cache_precision: Число знаков при построении ключа кэша
            batch_size: Размер группы одновременных запросов
            batch_delay: Пауза между группами, сек
            average_speed_kmh: Средняя скорость для резервной оценки времени
            retry_attempts: Число попыток запроса (1 = без повторов)
            retry_backoff: Начальная задержка перед повтором, сек
        """
        setup_logging()

        explicit = (
            base_url, profile, timeout, cache_precision, batch_size,
            batch_delay, average_speed_kmh, retry_attempts, retry_backoff,
        )
        routing = None
        if any(value is None for value in explicit):
            # Конфигурация нужна только для пропущенных параметров
            from ev_routing.config import settings
            routing = settings.routing

        self._base_url = (base_url if base_url is not None else routing.OSRM_BASE_URL).rstrip("/")
        self._profile = profile if profile is not None else routing.OSRM_PROFILE
        self._timeout = timeout if timeout is not None else routing.REQUEST_TIMEOUT
        self._batch_size = batch_size if batch_size is not None else routing.BATCH_SIZE
        self._batch_delay = batch_delay if batch_delay is not None else routing.BATCH_DELAY_SECONDS
        self._average_speed_kmh = (
            average_speed_kmh if average_speed_kmh is not None else routing.AVERAGE_SPEED_KMH
        )
        self._retry_attempts = retry_attempts if retry_attempts is not None else routing.RETRY_ATTEMPTS
        self._retry_backoff = retry_backoff if retry_backoff is not None else routing.RETRY_BACKOFF_SECONDS

        if self._batch_size < 1:
            raise ValueError("batch_size должен быть >= 1")
        if self._retry_attempts < 1:
            raise ValueError("retry_attempts должен быть >= 1")

        self._cache = RouteCache(
            cache_precision if cache_precision is not None else routing.CACHE_PRECISION
        )
        self._client = httpx.AsyncClient(timeout=self._timeout)

    async def close(self) -> None:
        """Закрывает HTTP клиент."""
        await self._client.aclose()

    async def __aenter__(self) -> "RouteEstimationService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    # -------------------------------------------------------------------------
    # Запрос к OSRM
    # -------------------------------------------------------------------------

    def _route_url(self, origin: Coordinate, destination: Coordinate) -> str:
        coordinates = f"{origin.to_osrm()};{destination.to_osrm()}"
        return self._base_url + self.ROUTE_PATH.format(
            profile=self._profile,
            coordinates=coordinates,
        )

    async def _request_route(self, origin: Coordinate, destination: Coordinate) -> RouteResult:
        """
        Один запрос к OSRM /route.

        Raises:
            RouteProviderError: сетевая ошибка, HTTP ошибка, статус не Ok,
                пустой список маршрутов или некорректный ответ
        """
        url = self._route_url(origin, destination)
        await log_debug("Запрос маршрута OSRM", extra={"url": url})

        try:
            response = await self._client.get(
                url,
                params={"overview": "full", "geometries": "geojson"},
            )
        except httpx.TransportError as e:
            raise RouteProviderError(f"Сетевая ошибка OSRM: {e}", retryable=True) from e

        if not response.is_success:
            raise RouteProviderError(
                f"OSRM API error: {response.status_code}",
                retryable=response.status_code in RETRYABLE_STATUS_CODES,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise RouteProviderError("OSRM вернул некорректный JSON") from e

        if not isinstance(data, dict):
            raise RouteProviderError("OSRM вернул некорректный ответ")

        routes = data.get("routes") or []
        if data.get("code") != OSRM_OK_CODE or not routes:
            message = data.get("message") or "No route found"
            raise RouteProviderError(f"{message} (code={data.get('code')})")

        route = routes[0]
        try:
            distance = float(route["distance"])
            duration = float(route["duration"])
        except (KeyError, TypeError, ValueError) as e:
            raise RouteProviderError(f"В ответе OSRM нет расстояния или времени: {e}") from e

        return RouteResult(
            distance_meters=distance,
            duration_seconds=duration,
            geometry=route.get("geometry"),
            legs=route.get("legs"),
            success=True,
        )

    async def _request_with_retry(self, origin: Coordinate, destination: Coordinate) -> RouteResult:
        """Запрос с повторами: задержка удваивается после каждой неудачи."""
        attempt = 0
        while True:
            attempt += 1
            try:
                return await self._request_route(origin, destination)
            except RouteProviderError as e:
                if not e.retryable or attempt >= self._retry_attempts:
                    raise
                delay = self._retry_backoff * (2 ** (attempt - 1))
                await log_warning(
                    "Повтор запроса маршрута",
                    extra={"attempt": attempt, "delay": delay, "reason": e.reason},
                )
                await asyncio.sleep(delay)

    # -------------------------------------------------------------------------
    # Публичные методы
    # -------------------------------------------------------------------------

    async def get_route(self, origin: Coordinate, destination: Coordinate) -> RouteResult:
        """
        Возвращает маршрут между двумя точками.

        Кэшированный маршрут возвращается без обращения к сети. Ошибки
        провайдера не выбрасываются: возвращается RouteResult(success=False)
        с причиной, такой результат не кэшируется.

        Args:
            origin: Точка отправления
            destination: Точка назначения

        Returns:
            Результат маршрута
        """
        key = self._cache.key_for(origin, destination)
        cached = self._cache.get(key)
        if cached is not None:
            await log_debug("Маршрут взят из кэша", extra={"key": key})
            return cached

        try:
            result = await self._request_with_retry(origin, destination)
        except RouteProviderError as e:
            await log_warning("Маршрут не получен", extra={"key": key, "reason": e.reason})
            return RouteResult.failure(e.reason)
        except Exception as e:  # noqa: BLE001
            await log_error(f"Ошибка запроса маршрута: {e}", extra={"key": key}, exc_info=True)
            return RouteResult.failure(str(e) or type(e).__name__)

        self._cache.put(key, result)
        await log_debug(
            "Маршрут получен",
            extra={
                "key": key,
                "distance_km": round(result.distance_km, 2),
                "duration_min": round(result.duration_minutes, 1),
            },
        )
        return result

    def fallback_estimate(self, origin: Coordinate, destination: Coordinate) -> FallbackEstimate:
        """Оценка по прямой с настроенной средней скоростью."""
        return geo_utils.fallback_estimate(origin, destination, self._average_speed_kmh)

    async def estimate_distance_km(self, origin: Coordinate, destination: Coordinate) -> float:
        """Расстояние по дорогам (км), при ошибке OSRM — по прямой."""
        route = await self.get_route(origin, destination)
        if route.success:
            return route.distance_km

        await log_info("OSRM недоступен, расстояние по Haversine", type_msg=TypeMsg.WARNING)
        return self.fallback_estimate(origin, destination).distance_km

    async def estimate_duration_minutes(self, origin: Coordinate, destination: Coordinate) -> float:
        """Время в пути (мин), при ошибке OSRM — из расстояния по прямой."""
        route = await self.get_route(origin, destination)
        if route.success:
            return route.duration_minutes

        await log_info("OSRM недоступен, время по средней скорости", type_msg=TypeMsg.WARNING)
        return self.fallback_estimate(origin, destination).duration_minutes

    async def get_route_or_estimate(self, origin: Coordinate, destination: Coordinate) -> RouteResult:
        """
        Маршрут по дорогам или прямая линия между точками.

        Всегда возвращает success=True; источник данных указан в поле source.
        При переходе на прямую линию error_reason хранит причину отказа OSRM.
        """
        route = await self.get_route(origin, destination)
        if route.success:
            return route

        estimate = self.fallback_estimate(origin, destination)
        return RouteResult.straight_line(
            distance_km=estimate.distance_km,
            duration_minutes=estimate.duration_minutes,
            geometry=geo_utils.straight_line_geometry(origin, destination),
            reason=route.error_reason,
        )

    def clear_cache(self) -> None:
        """Очищает кэш маршрутов (например, после заметной смены местоположения)."""
        size = len(self._cache)
        self._cache.clear()
        get_logger().info("Кэш маршрутов очищен", extra={"extra_data": {"removed": size}})

    async def get_routes_for_many(
        self,
        origin: Coordinate,
        destinations: Iterable[RouteDestination] | Mapping[Hashable, Coordinate],
    ) -> dict[Hashable, RouteResult]:
        """
        Получает маршруты от одной точки до многих.

        Запросы идут группами по batch_size: внутри группы одновременно,
        между группами пауза batch_delay. Неудачный маршрут попадает в
        результат как success=False и не прерывает обработку.

        Args:
            origin: Точка отправления
            destinations: Список RouteDestination или словарь id -> Coordinate

        Returns:
            Словарь id назначения -> RouteResult
        """
        if isinstance(destinations, Mapping):
            items = [RouteDestination(id=k, coordinate=v) for k, v in destinations.items()]
        else:
            items = list(destinations)

        results: dict[Hashable, RouteResult] = {}

        for start in range(0, len(items), self._batch_size):
            batch = items[start:start + self._batch_size]

            routes = await asyncio.gather(
                *(self.get_route(origin, item.coordinate) for item in batch)
            )
            for item, route in zip(batch, routes):
                results[item.id] = route

            # Пауза между группами, чтобы не упереться в лимиты OSRM
            if start + self._batch_size < len(items):
                await asyncio.sleep(self._batch_delay)

        failed = sum(1 for route in results.values() if not route.success)
        await log_info(
            "Маршруты получены",
            extra={"total": len(results), "failed": failed},
        )
        return results
