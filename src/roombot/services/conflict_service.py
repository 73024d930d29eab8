"""
Booking conflict detection.

A request conflicts with an active booking of the same room when the
half-open intervals overlap, or when the booking is still occupied
(checked in, never checked out) past its scheduled end and the request
starts within the grace window after now.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from roombot.adapters.base import RoomStoreAdapter
from roombot.base_config import LifecycleSettings
from roombot.exceptions import StoreUnavailableError
from roombot.models import Booking, Room
from roombot.timeutils import combine, minutes_to_time_str, now_in, time_to_minutes

logger = logging.getLogger(__name__)

# Half-hour starts offered when suggesting another slot in the same room
SUGGESTION_FIRST_HOUR = 9
SUGGESTION_LAST_HOUR = 17


def suggestion_slots() -> List[str]:
    slots = []
    for hour in range(SUGGESTION_FIRST_HOUR, SUGGESTION_LAST_HOUR + 1):
        slots.append(f"{hour:02d}:00")
        slots.append(f"{hour:02d}:30")
    return slots


class ConflictChecker:
    """Decides whether a room/date/time request collides with existing bookings."""

    def __init__(
        self,
        adapter: RoomStoreAdapter,
        settings: LifecycleSettings,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.adapter = adapter
        self.settings = settings
        self.clock = clock or (lambda: now_in(settings.tz))

    def _is_conflicting(self, booking: Booking, date: str, start_time: str, end_time: str, now: datetime) -> bool:
        tz = self.settings.tz
        request_start = combine(date, start_time, tz)
        request_end = combine(date, end_time, tz)
        try:
            booking_start = combine(date, booking.start_time, tz)
            booking_end = combine(date, booking.end_time, tz)
        except ValueError:
            # unreadable stored times block the room rather than being ignored
            logger.warning(
                f"Booking {booking.id} has unreadable times "
                f"({booking.start_time!r}-{booking.end_time!r}), treating as conflict"
            )
            return True

        overlaps = request_start < booking_end and request_end > booking_start

        grace = timedelta(minutes=self.settings.stale_occupancy_grace_minutes)
        still_in_use = (
            booking.is_occupying()
            and now > booking_end
            and request_start < now + grace
        )

        if overlaps or still_in_use:
            logger.debug(
                f"Conflict with {booking.id}: overlap={overlaps} still_in_use={still_in_use} "
                f"({booking.start_time}-{booking.end_time} vs {start_time}-{end_time})"
            )
        return overlaps or still_in_use

    def find_conflicts(
        self,
        room_id: str,
        date: str,
        start_time: str,
        end_time: str,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """Returns the active bookings that block the request. Store failures propagate."""
        now = self.clock()
        conflicts = []
        for data in self.adapter.list_bookings(date):
            booking = Booking.from_dict(data)
            if booking.room_id != room_id or not booking.is_active():
                continue
            if exclude_booking_id and booking.id == exclude_booking_id:
                continue
            if self._is_conflicting(booking, date, start_time, end_time, now):
                conflicts.append(booking)

        if conflicts:
            logger.warning(
                f"Found {len(conflicts)} conflicting bookings for room {room_id} "
                f"on {date} between {start_time}-{end_time}"
            )
        return conflicts

    def has_conflict(
        self,
        room_id: str,
        date: str,
        start_time: str,
        end_time: str,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """True when the interval is blocked. An unreachable store counts as blocked."""
        try:
            return len(self.find_conflicts(room_id, date, start_time, end_time, exclude_booking_id)) > 0
        except StoreUnavailableError as e:
            logger.error(f"Conflict check failed for room {room_id} on {date}, treating as conflict: {e}")
            return True

    def suggest_alternative(self, room_id: str, date: str, start_time: str, end_time: str) -> Dict[str, str]:
        """
        First other active room free at the same time, else the first free
        half-hour start in the same room keeping the requested duration.
        Returns an empty dict when nothing fits.
        """
        try:
            rooms = [Room.from_dict(r) for r in self.adapter.list_rooms()]
        except StoreUnavailableError as e:
            logger.error(f"Could not load rooms for a suggestion: {e}")
            return {}

        for room in rooms:
            if room.id == room_id or not room.is_active():
                continue
            if not self.has_conflict(room.id, date, start_time, end_time):
                return {"room_id": room.id}

        duration = time_to_minutes(end_time) - time_to_minutes(start_time)
        for slot in suggestion_slots():
            slot_end_minutes = time_to_minutes(slot) + duration
            if slot_end_minutes >= 24 * 60:
                continue
            slot_end = minutes_to_time_str(slot_end_minutes)
            if not self.has_conflict(room_id, date, slot, slot_end):
                return {"start_time": slot, "end_time": slot_end}

        return {}
