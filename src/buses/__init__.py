"""
Fleet Management Module

Bus types, buses and the per-bus seat inventory.

Key Components:
- layout.py: seat grid validation (dimensions, seat count, unique numbers)
- service.py: BusTypeService and BusService, plus JSON serializers
- router.py: admin endpoints for /bus-types and /buses
- schemas.py: Pydantic request models
"""

from .router import router, bus_types_router
from .service import BusTypeService, BusService, serialize_bus, serialize_seat
from .layout import validate_seat_layout

__all__ = [
    "router",
    "bus_types_router",
    "BusTypeService",
    "BusService",
    "serialize_bus",
    "serialize_seat",
    "validate_seat_layout"
]
