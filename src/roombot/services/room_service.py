from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from roombot.adapters.base import RoomStoreAdapter
from roombot.base_config import LifecycleSettings
from roombot.exceptions import StoreUnavailableError
from roombot.models import Booking, Room
from roombot.timeutils import DATE_FORMAT, is_valid_time, normalize_time, now_in

logger = logging.getLogger(__name__)


def _summary(booking: Optional[Booking]) -> Optional[Dict[str, Any]]:
    if booking is None:
        return None
    return {
        "id": booking.id,
        "title": booking.title,
        "booker_name": booking.booker_name,
        "start_time": booking.start_time,
        "end_time": booking.end_time,
    }


class RoomService:
    """Room listing and today's per-room status board."""

    def __init__(
        self,
        adapter: RoomStoreAdapter,
        settings: LifecycleSettings,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.adapter = adapter
        self.settings = settings
        self.clock = clock or (lambda: now_in(settings.tz))

    def list_active_rooms(self) -> List[Room]:
        return [room for room in (Room.from_dict(r) for r in self.adapter.list_rooms()) if room.is_active()]

    def todays_bookings(self, room_id: str, today: str) -> List[Booking]:
        bookings = [Booking.from_dict(d) for d in self.adapter.list_bookings(today)]
        active = []
        for b in bookings:
            if b.room_id != room_id or not b.is_active():
                continue
            if not (is_valid_time(b.start_time) and is_valid_time(b.end_time)):
                logger.warning(f"Booking {b.id} has unreadable times, left off the status board")
                continue
            active.append(b)
        return sorted(active, key=lambda b: normalize_time(b.start_time))

    def status_board(self, include_bookings: bool = True) -> List[Dict[str, Any]]:
        """
        Active rooms with availability right now, the current and next booking
        and today's booking count, plus today's bookings when `include_bookings`
        is set. A room whose bookings cannot be read is reported as available
        with no bookings.
        """
        now = self.clock().astimezone(self.settings.tz)
        today = now.strftime(DATE_FORMAT)
        current_time = now.strftime("%H:%M")

        board = []
        for room in self.list_active_rooms():
            entry = room.to_dict()
            try:
                bookings = self.todays_bookings(room.id, today)
            except StoreUnavailableError as e:
                logger.error(f"Could not load today's bookings for room {room.id}: {e}")
                entry.update(is_available=True, current_booking=None, next_booking=None, today_bookings_count=0)
                if include_bookings:
                    entry["bookings"] = []
                board.append(entry)
                continue

            current = next(
                (b for b in bookings if normalize_time(b.start_time) <= current_time < normalize_time(b.end_time)),
                None,
            )
            upcoming = next((b for b in bookings if normalize_time(b.start_time) > current_time), None)
            entry.update(
                is_available=current is None,
                current_booking=_summary(current),
                next_booking=_summary(upcoming),
                today_bookings_count=len(bookings),
            )
            if include_bookings:
                entry["bookings"] = [b.to_dict() for b in bookings]
            board.append(entry)
        return board
