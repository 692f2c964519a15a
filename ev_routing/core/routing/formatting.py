# ev_routing/core/routing/formatting.py
"""
Форматирование расстояния и времени для отображения.
"""

from __future__ import annotations

import math


def _round_half_up(value: float) -> int:
    # Округление как в интерфейсе (0.5 -> 1), а не банковское round()
    return int(math.floor(value + 0.5))


def format_distance(distance_km: float) -> str:
    """
    Форматирует расстояние.

    Меньше 1 км выводится в метрах, иначе в километрах с одним знаком.

    Examples:
        >>> format_distance(0.5)
        '500 m'
        >>> format_distance(5.64)
        '5.6 km'
    """
    if distance_km < 1:
        return f"{_round_half_up(distance_km * 1000)} m"
    return f"{distance_km:.1f} km"


def format_duration(duration_minutes: float) -> str:
    """
    Форматирует длительность.

    Меньше часа выводится в минутах, иначе часы и оставшиеся минуты
    (минуты опускаются, если их ноль).

    Examples:
        >>> format_duration(8.4)
        '8 phút'
        >>> format_duration(75)
        '1h 15m'
        >>> format_duration(120)
        '2h'
    """
    # Округляем общее число минут, чтобы 59.6 и 119.7 перешли в следующий час
    total = _round_half_up(duration_minutes)
    if total < 60:
        return f"{total} phút"

    hours, minutes = divmod(total, 60)
    if minutes > 0:
        return f"{hours}h {minutes}m"
    return f"{hours}h"
