from __future__ import annotations
from typing import Any, Dict, Optional
import logging

from roombot.tools import tool, error_response, get_reservation_service
from roombot.exceptions import BookingError, RoomBotError

logger = logging.getLogger(__name__)


@tool
def create_booking(
    room_id: str,
    title: str,
    booker_name: str,
    booker_id: str,
    date: str,
    start_time: str,
    end_time: str,
    purpose: Optional[str] = "",
    participants: int = 1,
) -> Dict[str, Any]:
    """Books a room for a date and time range. The booking starts out confirmed."""
    request = {
        "room_id": room_id,
        "title": title,
        "booker_name": booker_name,
        "booker_id": booker_id,
        "date": date,
        "start_time": start_time,
        "end_time": end_time,
        "purpose": purpose,
        "participants": participants,
    }
    try:
        booking = get_reservation_service().create_booking(request)
    except BookingError as e:
        logger.info(f"Booking request rejected: {e}")
        return error_response(e)
    except RoomBotError as e:
        logger.error(f"Booking could not be created: {e}")
        return error_response(e)

    return {
        "success": True,
        "message": "Booking created.",
        "booking": booking.to_dict(),
    }


@tool
def get_booking(booking_id: str) -> Dict[str, Any]:
    """Returns a booking by id."""
    try:
        booking = get_reservation_service().get_booking(booking_id)
    except RoomBotError as e:
        return error_response(e)
    return {"success": True, "booking": booking.to_dict()}


@tool
def list_bookings(
    date: Optional[str] = None,
    room_id: Optional[str] = None,
    status: Optional[str] = None,
) -> Dict[str, Any]:
    """Lists bookings sorted by date and start time, optionally filtered."""
    try:
        bookings = get_reservation_service().list_bookings(date=date, room_id=room_id, status=status)
    except RoomBotError as e:
        logger.error(f"Booking listing failed: {e}")
        return error_response(e)
    return {
        "success": True,
        "bookings": [b.to_dict() for b in bookings],
        "count": len(bookings),
        "filters": {"date": date, "room_id": room_id, "status": status},
    }


@tool
def update_booking_status(booking_id: str, status: str, booker_id: str) -> Dict[str, Any]:
    """
    Sets a booking's status to confirmed, pending or cancelled. Only the booker
    (or the admin code) may do this.
    """
    try:
        booking = get_reservation_service().set_status(booking_id, status, requesting_identifier=booker_id)
    except RoomBotError as e:
        return error_response(e)
    return {
        "success": True,
        "message": f"Booking status changed to {booking.status}.",
        "booking": booking.to_dict(),
    }
