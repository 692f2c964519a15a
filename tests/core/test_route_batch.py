# tests/core/test_route_batch.py
"""
Тесты пакетного получения маршрутов (get_routes_for_many).
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from ev_routing.core.routing.models import Coordinate, RouteDestination
from ev_routing.core.routing.service import RouteEstimationService


def _destinations(count: int) -> list[RouteDestination]:
    return [
        RouteDestination(
            id=f"station-{i}",
            coordinate=Coordinate(latitude=10.70 + i * 0.01, longitude=106.60 + i * 0.01),
        )
        for i in range(1, count + 1)
    ]


class TestGetRoutesForMany:
    """Тесты для get_routes_for_many."""

    @pytest.mark.asyncio
    async def test_waves_separated_by_delay(self, route_service, user_location, ok_response) -> None:
        """Первая волна из трёх запросов, пауза, затем вторая волна."""
        events: list[tuple[str, object]] = []

        async def fake_get(url, params=None):
            events.append(("get", url))
            return ok_response

        async def fake_sleep(delay):
            events.append(("sleep", delay))

        with patch.object(
            route_service._client, "get",
            new_callable=AsyncMock,
            side_effect=fake_get,
        ), patch(
            "ev_routing.core.routing.service.asyncio.sleep",
            new_callable=AsyncMock,
            side_effect=fake_sleep,
        ):
            results = await route_service.get_routes_for_many(user_location, _destinations(4))

        assert [kind for kind, _ in events] == ["get", "get", "get", "sleep", "get"]
        assert events[3] == ("sleep", 0.5)
        assert list(results) == ["station-1", "station-2", "station-3", "station-4"]
        assert all(route.success for route in results.values())

    @pytest.mark.asyncio
    async def test_no_delay_after_last_batch(self, route_service, user_location, ok_response) -> None:
        with patch.object(
            route_service._client, "get",
            new_callable=AsyncMock,
            return_value=ok_response,
        ) as mock_get, patch(
            "ev_routing.core.routing.service.asyncio.sleep",
            new_callable=AsyncMock,
        ) as mock_sleep:
            results = await route_service.get_routes_for_many(user_location, _destinations(3))

        assert len(results) == 3
        assert mock_get.call_count == 3
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_partial_failures_keep_slots(self, route_service, user_location, ok_response) -> None:
        """Неудачные маршруты остаются в результате и не прерывают обработку."""
        responses = [
            ok_response,
            httpx.ConnectError("down"),
            httpx.Response(200, json={"code": "NoRoute", "routes": []}),
            ok_response,
        ]

        with patch.object(
            route_service._client, "get",
            new_callable=AsyncMock,
            side_effect=responses,
        ), patch(
            "ev_routing.core.routing.service.asyncio.sleep",
            new_callable=AsyncMock,
        ):
            results = await route_service.get_routes_for_many(user_location, _destinations(4))

        assert len(results) == 4
        assert results["station-1"].success is True
        assert results["station-2"].success is False
        assert results["station-3"].success is False
        assert results["station-4"].success is True

    @pytest.mark.asyncio
    async def test_mapping_input(self, route_service, user_location, ok_response) -> None:
        destinations = {
            101: Coordinate(latitude=10.80, longitude=106.70),
            102: Coordinate(latitude=10.81, longitude=106.71),
        }
        with patch.object(
            route_service._client, "get",
            new_callable=AsyncMock,
            return_value=ok_response,
        ):
            results = await route_service.get_routes_for_many(user_location, destinations)

        assert set(results) == {101, 102}

    @pytest.mark.asyncio
    async def test_empty_destinations(self, route_service, user_location) -> None:
        with patch.object(route_service._client, "get", new_callable=AsyncMock) as mock_get:
            results = await route_service.get_routes_for_many(user_location, [])

        assert results == {}
        mock_get.assert_not_called()

    @pytest.mark.asyncio
    async def test_cached_routes_skip_network(self, route_service, user_location, ok_response) -> None:
        destinations = _destinations(2)
        with patch.object(
            route_service._client, "get",
            new_callable=AsyncMock,
            return_value=ok_response,
        ) as mock_get:
            await route_service.get_route(user_location, destinations[0].coordinate)
            await route_service.get_routes_for_many(user_location, destinations)

        assert mock_get.call_count == 2

    @pytest.mark.asyncio
    async def test_custom_batch_size(self, user_location, ok_response) -> None:
        service = RouteEstimationService(
            base_url="https://osrm.test",
            batch_size=2,
            batch_delay=0.25,
        )
        try:
            with patch.object(
                service._client, "get",
                new_callable=AsyncMock,
                return_value=ok_response,
            ), patch(
                "ev_routing.core.routing.service.asyncio.sleep",
                new_callable=AsyncMock,
            ) as mock_sleep:
                results = await service.get_routes_for_many(user_location, _destinations(5))
        finally:
            await service.close()

        assert len(results) == 5
        # 5 назначений по 2 -> три группы, две паузы
        assert mock_sleep.await_count == 2
        mock_sleep.assert_awaited_with(0.25)
