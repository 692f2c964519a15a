# ev_routing/config/loader.py
"""
Загрузчик конфигурации проекта.
Единственный источник значений по умолчанию — config/config.json.
Отдельные параметры переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ev_routing.common.constants import (
    DEFAULT_AVERAGE_SPEED_KMH,
    DEFAULT_CACHE_PRECISION,
    DEFAULT_OSRM_BASE_URL,
    DEFAULT_OSRM_PROFILE,
)


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации."""
    env_path = os.getenv("EV_ROUTING_CONFIG")
    if env_path:
        return Path(env_path)
    return get_project_root() / "config" / "config.json"


def load_config_json(path: Path | None = None) -> dict[str, Any]:
    """Загружает config.json и возвращает словарь без ключей-комментариев."""
    config_path = path or get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return {k: v for k, v in data.items() if not k.startswith("_comment_")}


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "ev_routing"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "colored"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/ev_routing.log"
    LOG_MAX_BYTES: int = 10485760
    LOG_BACKUP_COUNT: int = 5

    @field_validator("LOG_FORMAT")
    @classmethod
    def check_format(cls, v: str) -> str:
        """Допускает только colored и json."""
        if v not in ("colored", "json"):
            raise ValueError(f"Неизвестный формат логов: {v}")
        return v


class RoutingSettings(BaseModel):
    """Настройки OSRM и оценки маршрутов."""
    OSRM_BASE_URL: str = DEFAULT_OSRM_BASE_URL
    OSRM_PROFILE: str = DEFAULT_OSRM_PROFILE
    REQUEST_TIMEOUT: float = 10.0
    CACHE_PRECISION: int = DEFAULT_CACHE_PRECISION
    BATCH_SIZE: int = 3
    BATCH_DELAY_SECONDS: float = 0.5
    AVERAGE_SPEED_KMH: float = DEFAULT_AVERAGE_SPEED_KMH
    RETRY_ATTEMPTS: int = 1
    RETRY_BACKOFF_SECONDS: float = 0.5

    @field_validator("OSRM_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Убирает завершающий слэш из базового URL."""
        return v.rstrip("/")

    @field_validator("BATCH_SIZE", "RETRY_ATTEMPTS")
    @classmethod
    def check_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Значение должно быть >= 1")
        return v

    @field_validator(
        "REQUEST_TIMEOUT",
        "BATCH_DELAY_SECONDS",
        "RETRY_BACKOFF_SECONDS",
        "CACHE_PRECISION",
    )
    @classmethod
    def check_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Значение не может быть отрицательным")
        return v

    @field_validator("AVERAGE_SPEED_KMH")
    @classmethod
    def check_speed(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Средняя скорость должна быть > 0")
        return v


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """
    system: SystemSettings = Field(default_factory=SystemSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    routing: RoutingSettings = Field(default_factory=RoutingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        """
        Собирает Settings из плоского словаря config.json.
        Переменные окружения имеют приоритет для URL провайдера и уровня логов.
        """
        return cls(
            system=SystemSettings(
                PROJECT_NAME=data.get("PROJECT_NAME", "ev_routing"),
                VERSION=data.get("VERSION", "1.0.0"),
                DEBUG=data.get("DEBUG", False),
                ENVIRONMENT=os.getenv("ENVIRONMENT", data.get("ENVIRONMENT", "development")),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=os.getenv("LOG_LEVEL", data.get("LOG_LEVEL", "INFO")),
                LOG_FORMAT=data.get("LOG_FORMAT", "colored"),
                LOG_TO_FILE=data.get("LOG_TO_FILE", False),
                LOG_FILE_PATH=data.get("LOG_FILE_PATH", "logs/ev_routing.log"),
                LOG_MAX_BYTES=data.get("LOG_MAX_BYTES", 10485760),
                LOG_BACKUP_COUNT=data.get("LOG_BACKUP_COUNT", 5),
            ),
            routing=RoutingSettings(
                OSRM_BASE_URL=os.getenv("OSRM_BASE_URL", data.get("OSRM_BASE_URL", DEFAULT_OSRM_BASE_URL)),
                OSRM_PROFILE=data.get("OSRM_PROFILE", DEFAULT_OSRM_PROFILE),
                REQUEST_TIMEOUT=data.get("REQUEST_TIMEOUT", 10.0),
                CACHE_PRECISION=data.get("CACHE_PRECISION", DEFAULT_CACHE_PRECISION),
                BATCH_SIZE=data.get("BATCH_SIZE", 3),
                BATCH_DELAY_SECONDS=data.get("BATCH_DELAY_SECONDS", 0.5),
                AVERAGE_SPEED_KMH=data.get("AVERAGE_SPEED_KMH", DEFAULT_AVERAGE_SPEED_KMH),
                RETRY_ATTEMPTS=data.get("RETRY_ATTEMPTS", 1),
                RETRY_BACKOFF_SECONDS=data.get("RETRY_BACKOFF_SECONDS", 0.5),
            ),
        )

    @classmethod
    def from_config_json(cls, path: Path | None = None) -> "Settings":
        """Создаёт объект Settings из config.json."""
        return cls.from_dict(load_config_json(path))


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Перед чтением конфигурации подгружает .env, если он есть.
    """
    from dotenv import load_dotenv

    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


settings = get_settings()
