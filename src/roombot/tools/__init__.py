from __future__ import annotations
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from langchain_core.tools import StructuredTool

from roombot.adapters.base import RoomStoreAdapter
from roombot.config import get_config
from roombot.exceptions import BookingError, StoreUnavailableError
from roombot.services import BulkBookingService, OccupancySweeper, ReservationService, RoomService

# Global adapter instance
_adapter: Optional[RoomStoreAdapter] = None

# Optional clock override (tests)
_clock: Optional[Callable[[], datetime]] = None

# Services built on top of the adapter, created lazily
_services: Dict[str, Any] = {}


# ------------------------------------
# Interface utilities
# ------------------------------------
def tool(func: Callable) -> Callable:
    """Marks functions exposed on the request/response surface."""
    func._is_tool = True
    func._tool_name = func.__name__
    func._tool_description = func.__doc__ or ""
    return func


def get_adapter() -> RoomStoreAdapter:
    """
    Returns the global record store adapter, creating it from the active
    config when needed.
    """
    global _adapter
    if _adapter is None:
        _adapter = get_config().create_adapter()
    return _adapter


def set_adapter(adapter: Optional[RoomStoreAdapter]) -> None:
    """Installs a specific adapter (useful for tests). Cached services are rebuilt."""
    global _adapter
    _adapter = adapter
    _services.clear()


def set_clock(clock: Optional[Callable[[], datetime]]) -> None:
    """Overrides the services' clock (useful for tests). Cached services are rebuilt."""
    global _clock
    _clock = clock
    _services.clear()


def get_reservation_service() -> ReservationService:
    if "reservations" not in _services:
        settings = get_config().get_lifecycle_settings()
        _services["reservations"] = ReservationService(get_adapter(), settings, clock=_clock)
    return _services["reservations"]


def get_room_service() -> RoomService:
    if "rooms" not in _services:
        reservations = get_reservation_service()
        _services["rooms"] = RoomService(reservations.adapter, reservations.settings, clock=reservations.clock)
    return _services["rooms"]


def get_bulk_service() -> BulkBookingService:
    if "bulk" not in _services:
        _services["bulk"] = BulkBookingService(get_reservation_service())
    return _services["bulk"]


def get_sweeper() -> OccupancySweeper:
    if "sweeper" not in _services:
        _services["sweeper"] = OccupancySweeper(get_reservation_service())
    return _services["sweeper"]


def error_response(exc: Exception) -> Dict[str, Any]:
    """Maps a raised error to the failure shape returned by every tool."""
    if isinstance(exc, BookingError):
        status = exc.status_code
    elif isinstance(exc, StoreUnavailableError):
        status = 503
    else:
        status = 500
    return {"success": False, "error": str(exc), "status": status}


# ------------------------------------
# Tool functions
# ------------------------------------
from .room_tools import (
    list_rooms,
    get_room_status_board,
    check_availability,
)
from .booking_tools import (
    create_booking,
    get_booking,
    list_bookings,
    update_booking_status,
)
from .occupancy_tools import (
    check_in_booking,
    check_out_booking,
    extend_booking,
)
from .bulk_tools import (
    bulk_create_bookings,
    bulk_cancel_bookings,
    bulk_update_bookings,
)
from .schemas import BulkCreateInput, CreateBookingInput, ExtendBookingInput


_tools: Optional[List[StructuredTool]] = None
_tool_map: Dict[str, StructuredTool] = {}


def get_tools() -> List[StructuredTool]:
    """LangChain `StructuredTool` list (lazy init)."""
    global _tools, _tool_map
    if _tools is None:
        _tools = [
            StructuredTool.from_function(func=list_rooms, name="list_rooms", description="Lists meeting rooms with capacity, location and equipment."),
            StructuredTool.from_function(func=get_room_status_board, name="get_room_status_board", description="Shows every active room with its current and next booking for today."),
            StructuredTool.from_function(func=check_availability, name="check_availability", description="Checks whether a room is free on a date between two HH:MM times."),
            StructuredTool.from_function(func=create_booking, name="create_booking", description="Books a room for a date and time range.", args_schema=CreateBookingInput),
            StructuredTool.from_function(func=get_booking, name="get_booking", description="Returns a booking by id."),
            StructuredTool.from_function(func=list_bookings, name="list_bookings", description="Lists bookings, optionally filtered by date, room and status."),
            StructuredTool.from_function(func=update_booking_status, name="update_booking_status", description="Confirms, marks pending or cancels a booking."),
            StructuredTool.from_function(func=check_in_booking, name="check_in_booking", description="Checks in to a booked room, from 15 minutes before the start."),
            StructuredTool.from_function(func=check_out_booking, name="check_out_booking", description="Checks out of a booked room."),
            StructuredTool.from_function(func=extend_booking, name="extend_booking", description="Extends a checked-in booking by 30 or 60 minutes.", args_schema=ExtendBookingInput),
            StructuredTool.from_function(func=bulk_create_bookings, name="bulk_create_bookings", description="Books the same room and time on several dates.", args_schema=BulkCreateInput),
            StructuredTool.from_function(func=bulk_cancel_bookings, name="bulk_cancel_bookings", description="Cancels several bookings by id."),
            StructuredTool.from_function(func=bulk_update_bookings, name="bulk_update_bookings", description="Changes time, title, purpose or participants on several bookings."),
        ]
        _tool_map = {t.name: t for t in _tools}

    return _tools


def get_tool_map() -> Dict[str, StructuredTool]:
    """Tool name -> `StructuredTool`."""
    if not _tool_map:
        get_tools()
    return _tool_map


__all__ = [
    # Utilities
    "tool",
    "get_adapter",
    "set_adapter",
    "set_clock",
    "get_reservation_service",
    "get_room_service",
    "get_bulk_service",
    "get_sweeper",
    "error_response",

    # Tools
    "list_rooms",
    "get_room_status_board",
    "check_availability",
    "create_booking",
    "get_booking",
    "list_bookings",
    "update_booking_status",
    "check_in_booking",
    "check_out_booking",
    "extend_booking",
    "bulk_create_bookings",
    "bulk_cancel_bookings",
    "bulk_update_bookings",

    # LangChain helpers
    "get_tools",
    "get_tool_map",
]
