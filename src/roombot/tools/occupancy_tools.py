from __future__ import annotations
from typing import Any, Dict
import logging

from roombot.tools import tool, error_response, get_reservation_service
from roombot.exceptions import RoomBotError

logger = logging.getLogger(__name__)


@tool
def check_in_booking(booking_id: str, booker_id: str) -> Dict[str, Any]:
    """Checks in to a booking. Allowed from 15 minutes before the scheduled start."""
    try:
        booking = get_reservation_service().check_in(booking_id, booker_id)
    except RoomBotError as e:
        return error_response(e)
    return {"success": True, "message": "Checked in.", "booking": booking.to_dict()}


@tool
def check_out_booking(booking_id: str, booker_id: str) -> Dict[str, Any]:
    """Checks out of a checked-in booking."""
    try:
        booking = get_reservation_service().check_out(booking_id, booker_id)
    except RoomBotError as e:
        return error_response(e)
    return {"success": True, "message": "Checked out.", "booking": booking.to_dict()}


@tool
def extend_booking(booking_id: str, booker_id: str, extend_minutes: int = 30) -> Dict[str, Any]:
    """Extends a checked-in booking by 30 or 60 minutes when the room stays free."""
    try:
        booking = get_reservation_service().extend(booking_id, booker_id, extend_minutes)
    except RoomBotError as e:
        return error_response(e)
    return {
        "success": True,
        "message": f"Extended by {extend_minutes} minutes.",
        "new_end_time": booking.end_time,
        "extend_minutes": extend_minutes,
        "booking": booking.to_dict(),
    }
