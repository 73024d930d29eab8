from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging

from roombot.tools import tool, error_response, get_bulk_service
from roombot.exceptions import RoomBotError

logger = logging.getLogger(__name__)


@tool
def bulk_create_bookings(
    dates: List[str],
    room_id: str,
    title: str,
    booker_name: str,
    booker_id: str,
    start_time: str,
    end_time: str,
    purpose: Optional[str] = "",
    participants: int = 1,
) -> Dict[str, Any]:
    """Books the same room and time on every date given; failures carry a suggestion when one exists."""
    common = {
        "room_id": room_id,
        "title": title,
        "booker_name": booker_name,
        "booker_id": booker_id,
        "start_time": start_time,
        "end_time": end_time,
        "purpose": purpose,
        "participants": participants,
    }
    try:
        result = get_bulk_service().bulk_create(dates, common)
    except RoomBotError as e:
        return error_response(e)

    data = result.to_dict()
    if result.created:
        message = f"{len(result.created)} bookings created."
    else:
        message = "No bookings could be created."
    # success mirrors "anything created"; the per-date outcome is in data
    return {"success": bool(result.created), "message": message, "data": data}


@tool
def bulk_cancel_bookings(booking_ids: List[str]) -> Dict[str, Any]:
    """Cancels every booking id given; returns how many succeeded and which failed."""
    if not booking_ids:
        return {"success": False, "error": "No booking ids given.", "status": 400}
    try:
        outcome = get_bulk_service().bulk_cancel(booking_ids)
    except RoomBotError as e:
        return error_response(e)
    return {
        "success": outcome["success"] > 0,
        "message": f"{outcome['success']} bookings cancelled.",
        "data": outcome,
    }


@tool
def bulk_update_bookings(
    booking_ids: List[str],
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
    title: Optional[str] = None,
    purpose: Optional[str] = None,
    participants: Optional[int] = None,
) -> Dict[str, Any]:
    """Applies the given field changes to every booking id."""
    if not booking_ids:
        return {"success": False, "error": "No booking ids given.", "status": 400}
    fields = {
        name: value
        for name, value in (
            ("start_time", start_time),
            ("end_time", end_time),
            ("title", title),
            ("purpose", purpose),
            ("participants", participants),
        )
        if value is not None
    }
    try:
        outcome = get_bulk_service().bulk_update(booking_ids, fields)
    except RoomBotError as e:
        return error_response(e)
    return {
        "success": outcome["success"] > 0,
        "message": f"{outcome['success']} bookings updated.",
        "data": outcome,
    }
