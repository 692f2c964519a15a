# ev_routing/core/__init__.py
"""
Доменный слой.
Маршруты и расстояния до станций, без привязки к интерфейсу.
"""
