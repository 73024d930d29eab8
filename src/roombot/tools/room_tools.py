from __future__ import annotations
from typing import Any, Dict
import logging

from roombot.tools import tool, error_response, get_reservation_service, get_room_service
from roombot.exceptions import RoomBotError, ValidationError
from roombot.models import Room
from roombot.timeutils import is_valid_date, normalize_time

logger = logging.getLogger(__name__)


@tool
def list_rooms(include_inactive: bool = False) -> Dict[str, Any]:
    """Lists meeting rooms. Only active rooms unless `include_inactive` is set."""
    service = get_room_service()
    try:
        if include_inactive:
            rooms = [Room.from_dict(r) for r in service.adapter.list_rooms()]
        else:
            rooms = service.list_active_rooms()
    except RoomBotError as e:
        logger.error(f"Room listing failed: {e}")
        return error_response(e)
    return {"success": True, "rooms": [r.to_dict() for r in rooms], "count": len(rooms)}


@tool
def get_room_status_board(include_bookings: bool = False) -> Dict[str, Any]:
    """Active rooms with availability now, current/next booking and today's count."""
    try:
        board = get_room_service().status_board(include_bookings=include_bookings)
    except RoomBotError as e:
        logger.error(f"Status board failed: {e}")
        return error_response(e)
    return {"success": True, "rooms": board, "count": len(board)}


@tool
def check_availability(room_id: str, date: str, start_time: str, end_time: str) -> Dict[str, Any]:
    """
    Checks whether a room is free on `date` between `start_time` and `end_time`.

    Args:
        room_id: Room to check.
        date: YYYY-MM-DD.
        start_time: HH:MM.
        end_time: HH:MM.

    Returns:
        `available` plus the blocking bookings and, when blocked, a suggestion.
    """
    service = get_reservation_service()
    try:
        if not is_valid_date(date):
            raise ValidationError("Date must be in YYYY-MM-DD format.")
        service.validate_time_range(start_time, end_time)
        start_time, end_time = normalize_time(start_time), normalize_time(end_time)

        conflicts = service.conflict_checker.find_conflicts(room_id, date, start_time, end_time)
    except RoomBotError as e:
        return error_response(e)

    result: Dict[str, Any] = {
        "success": True,
        "room_id": room_id,
        "date": date,
        "start_time": start_time,
        "end_time": end_time,
        "available": not conflicts,
        "conflicts": [
            {"id": b.id, "title": b.title, "start_time": b.start_time, "end_time": b.end_time}
            for b in conflicts
        ],
    }
    if conflicts:
        result["suggestion"] = service.conflict_checker.suggest_alternative(room_id, date, start_time, end_time)
    return result
