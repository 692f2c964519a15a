# ev_routing/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class RouteSource(str, Enum):
    """Происхождение данных маршрута."""
    OSRM = "osrm"              # Дорожная сеть (OSRM)
    HAVERSINE = "haversine"    # Прямая линия (резервная оценка)


# =============================================================================
# ГЕОГРАФИЧЕСКИЕ КОНСТАНТЫ
# =============================================================================

EARTH_RADIUS_KM: float = 6371.0

# Средняя скорость в городе для резервной оценки времени
DEFAULT_AVERAGE_SPEED_KMH: float = 40.0

# 4 знака после запятой ~ 11 м
DEFAULT_CACHE_PRECISION: int = 4


# =============================================================================
# OSRM
# =============================================================================

DEFAULT_OSRM_BASE_URL: str = "https://router.project-osrm.org"
DEFAULT_OSRM_PROFILE: str = "driving"
OSRM_OK_CODE: str = "Ok"

# HTTP статусы, при которых имеет смысл повторить запрос
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})
