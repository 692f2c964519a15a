# ev_routing/__init__.py
"""
Оценка маршрутов до зарядных станций электромобилей.
"""

__version__ = "1.0.0"
