# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from ev_routing.core.routing.models import Coordinate
from ev_routing.core.routing.service import RouteEstimationService


TEST_OSRM_URL = "https://osrm.test"


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок конфигурации для тестов."""
    return {
        "_comment_routing": "комментарий",
        "PROJECT_NAME": "ev_routing_test",
        "VERSION": "1.0.0-test",
        "DEBUG": True,
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "DEBUG",
        "LOG_FORMAT": "json",
        "LOG_TO_FILE": False,
        "LOG_FILE_PATH": "logs/test.log",
        "OSRM_BASE_URL": "https://osrm.example.com/",
        "OSRM_PROFILE": "driving",
        "REQUEST_TIMEOUT": 5.0,
        "CACHE_PRECISION": 4,
        "BATCH_SIZE": 2,
        "BATCH_DELAY_SECONDS": 0.25,
        "AVERAGE_SPEED_KMH": 30.0,
        "RETRY_ATTEMPTS": 3,
        "RETRY_BACKOFF_SECONDS": 0.1,
    }


@pytest.fixture
def temp_config_file(tmp_path: Path, mock_config: dict[str, Any]) -> Path:
    """Создаёт временный файл конфигурации."""
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(mock_config, ensure_ascii=False, indent=2), encoding="utf-8")
    return config_file


# =============================================================================
# ФИКСТУРЫ КООРДИНАТ
# =============================================================================

@pytest.fixture
def user_location() -> Coordinate:
    """Местоположение водителя (центр Хошимина)."""
    return Coordinate(latitude=10.7769, longitude=106.7009)


@pytest.fixture
def station_location() -> Coordinate:
    """Координата зарядной станции."""
    return Coordinate(latitude=10.7626, longitude=106.6602)


# =============================================================================
# ОТВЕТЫ OSRM
# =============================================================================

def osrm_payload(distance: float = 5640.0, duration: float = 504.0) -> dict[str, Any]:
    """Тело успешного ответа OSRM /route."""
    return {
        "code": "Ok",
        "routes": [
            {
                "distance": distance,
                "duration": duration,
                "geometry": {
                    "type": "LineString",
                    "coordinates": [[106.7009, 10.7769], [106.6801, 10.7700], [106.6602, 10.7626]],
                },
                "legs": [],
            }
        ],
        "waypoints": [],
    }


def make_response(status_code: int = 200, payload: Any = None) -> httpx.Response:
    """Настоящий httpx.Response с JSON телом."""
    return httpx.Response(status_code, json=payload if payload is not None else osrm_payload())


@pytest.fixture
def response_factory():
    """Фабрика ответов OSRM: response_factory(status_code, payload)."""
    return make_response


@pytest.fixture
def payload_factory():
    """Фабрика тел ответа OSRM: payload_factory(distance, duration)."""
    return osrm_payload


@pytest.fixture
def ok_response() -> httpx.Response:
    return make_response()


# =============================================================================
# СЕРВИСЫ
# =============================================================================

@pytest_asyncio.fixture
async def route_service() -> AsyncGenerator[RouteEstimationService, None]:
    """Сервис маршрутов с тестовым URL и параметрами по умолчанию."""
    service = RouteEstimationService(
        base_url=TEST_OSRM_URL,
        profile="driving",
        timeout=5.0,
        cache_precision=4,
        batch_size=3,
        batch_delay=0.5,
        average_speed_kmh=40.0,
        retry_attempts=1,
        retry_backoff=0.5,
    )
    yield service
    await service.close()
