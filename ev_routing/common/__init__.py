# ev_routing/common/__init__.py
"""
Общие утилиты: константы и логирование.
"""

from ev_routing.common.constants import RouteSource, TypeMsg

__all__ = ["RouteSource", "TypeMsg"]
