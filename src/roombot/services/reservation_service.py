from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from roombot.adapters.base import RoomStoreAdapter
from roombot.base_config import IDENTIFIER_EMAIL, LifecycleSettings
from roombot.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    AuthorizationError,
    ConflictError,
    NotCheckedInError,
    NotFoundError,
    TooEarlyError,
    ValidationError,
)
from roombot.models import Booking, Room, new_booking_id
from roombot.services.conflict_service import ConflictChecker
from roombot.timeutils import (
    format_timestamp,
    is_valid_date,
    is_valid_time,
    minutes_to_time_str,
    normalize_time,
    now_in,
    parse_date,
    time_to_minutes,
)

logger = logging.getLogger(__name__)

REQUIRED_BOOKING_FIELDS = ("room_id", "title", "booker_name", "booker_id", "start_time", "end_time", "date")
EXTEND_MINUTES = (30, 60)

_EMPLOYEE_ID_RE = re.compile(r"^\d{7}$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ReservationService:
    """
    Booking lifecycle: create, status changes, check-in, check-out, extension
    and no-show marking. Every mutation goes through `adapter.patch_booking`
    and stamps `updated_at`.
    """

    def __init__(
        self,
        adapter: RoomStoreAdapter,
        settings: LifecycleSettings,
        conflict_checker: Optional[ConflictChecker] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.adapter = adapter
        self.settings = settings
        self.clock = clock or (lambda: now_in(settings.tz))
        self.conflict_checker = conflict_checker or ConflictChecker(adapter, settings, clock=self.clock)

    # ------------------------------------
    # Helpers
    # ------------------------------------
    def _now(self) -> datetime:
        return self.clock().astimezone(self.settings.tz)

    def _timestamp(self) -> str:
        return format_timestamp(self._now())

    def is_valid_identifier(self, identifier: Optional[str]) -> bool:
        if not identifier:
            return False
        if self.settings.identifier_scheme == IDENTIFIER_EMAIL:
            return bool(_EMAIL_RE.match(identifier))
        return bool(_EMPLOYEE_ID_RE.match(identifier))

    def _require_identifier(self, identifier: Optional[str]) -> str:
        identifier = (identifier or "").strip()
        if not identifier:
            raise ValidationError("An identifier is required for this action.")
        if identifier != self.settings.admin_override_code and not self.is_valid_identifier(identifier):
            if self.settings.identifier_scheme == IDENTIFIER_EMAIL:
                raise ValidationError("Identifier must be a valid e-mail address.")
            raise ValidationError("Identifier must be a 7-digit employee number.")
        return identifier

    def _authorize(self, booking: Booking, identifier: str) -> None:
        if identifier != booking.booker_id and identifier != self.settings.admin_override_code:
            logger.warning(f"Identifier mismatch on booking {booking.id}")
            raise AuthorizationError("Only the booker can perform this action.")

    def _load(self, booking_id: str) -> Booking:
        data = self.adapter.get_booking(booking_id)
        if not data:
            raise NotFoundError(f"Booking {booking_id} not found.")
        return Booking.from_dict(data)

    def apply_patch(self, booking_id: str, fields: Dict[str, Any]) -> Booking:
        fields = dict(fields, updated_at=self._timestamp())
        updated = self.adapter.patch_booking(booking_id, fields)
        if not updated:
            raise NotFoundError(f"Booking {booking_id} not found.")
        return Booking.from_dict(updated)

    def validate_time_range(self, start_time: Optional[str], end_time: Optional[str]) -> None:
        if not is_valid_time(start_time) or not is_valid_time(end_time):
            raise ValidationError("Times must be in HH:MM format.")
        if time_to_minutes(start_time) >= time_to_minutes(end_time):
            raise ValidationError("End time must be later than start time.")

    # ------------------------------------
    # Queries
    # ------------------------------------
    def get_booking(self, booking_id: str) -> Booking:
        return self._load(booking_id)

    def list_bookings(
        self,
        date: Optional[str] = None,
        room_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Booking]:
        bookings = [Booking.from_dict(d) for d in self.adapter.list_bookings(date)]
        if room_id:
            bookings = [b for b in bookings if b.room_id == room_id]
        if status:
            bookings = [b for b in bookings if b.status == status]
        return sorted(bookings, key=lambda b: (b.date, normalize_time(b.start_time) if is_valid_time(b.start_time) else b.start_time))

    # ------------------------------------
    # Create
    # ------------------------------------
    def create_booking(self, request: Dict[str, Any], require_approval: bool = False) -> Booking:
        """
        Validates the request, checks the room and the time slot, then appends
        a new booking. Raises ValidationError, NotFoundError or ConflictError.
        """
        missing = [name for name in REQUIRED_BOOKING_FIELDS if not str(request.get(name) or "").strip()]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        booker_id = str(request["booker_id"]).strip()
        if not self.is_valid_identifier(booker_id):
            if self.settings.identifier_scheme == IDENTIFIER_EMAIL:
                raise ValidationError("Booker identifier must be a valid e-mail address.")
            raise ValidationError("Booker identifier must be a 7-digit employee number.")

        start_time = str(request["start_time"]).strip()
        end_time = str(request["end_time"]).strip()
        self.validate_time_range(start_time, end_time)
        start_time, end_time = normalize_time(start_time), normalize_time(end_time)

        day = str(request["date"]).strip()
        if not is_valid_date(day):
            raise ValidationError("Date must be in YYYY-MM-DD format.")
        if parse_date(day) < self._now().date():
            raise ValidationError("Bookings cannot be made for past dates.")

        participants = request.get("participants", 1)
        try:
            participants = int(participants) if participants not in (None, "") else 1
        except (TypeError, ValueError):
            raise ValidationError("Participants must be a whole number.")
        if participants < 1:
            raise ValidationError("Participants must be at least 1.")

        room_id = str(request["room_id"]).strip()
        room_data = self.adapter.get_room(room_id)
        room = Room.from_dict(room_data) if room_data else None
        if room is None or not room.is_active():
            raise NotFoundError(f"Room {room_id} does not exist or is not active.")
        if not room.can_accommodate(participants):
            raise ValidationError(f"Room {room.name} holds at most {room.capacity} participants.")

        if self.conflict_checker.has_conflict(room_id, day, start_time, end_time):
            raise ConflictError("The selected time overlaps an existing booking.")

        now = self._timestamp()
        booking = Booking(
            id=new_booking_id(),
            room_id=room_id,
            room_name=room.name,
            title=str(request["title"]).strip(),
            booker_name=str(request["booker_name"]).strip(),
            booker_id=booker_id,
            date=day,
            start_time=start_time,
            end_time=end_time,
            status=Booking.STATUS_PENDING if require_approval else Booking.STATUS_CONFIRMED,
            purpose=str(request.get("purpose") or "").strip(),
            participants=participants,
            created_at=now,
            updated_at=now,
        )
        saved = self.adapter.append_booking(booking.to_dict())
        logger.info(f"Booking {booking.id} created for room {room_id} on {day} {start_time}-{end_time}")
        return Booking.from_dict(saved)

    # ------------------------------------
    # Status
    # ------------------------------------
    def set_status(self, booking_id: str, new_status: str, requesting_identifier: Optional[str] = None) -> Booking:
        if new_status not in Booking.STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(Booking.STATUSES)}")
        booking = self._load(booking_id)
        if requesting_identifier is not None:
            self._authorize(booking, self._require_identifier(requesting_identifier))
        logger.info(f"Booking {booking_id}: status {booking.status} -> {new_status}")
        return self.apply_patch(booking_id, {"status": new_status})

    # ------------------------------------
    # Occupancy
    # ------------------------------------
    def check_in(self, booking_id: str, requesting_identifier: str) -> Booking:
        identifier = self._require_identifier(requesting_identifier)
        booking = self._load(booking_id)
        self._authorize(booking, identifier)
        if booking.is_cancelled():
            raise ValidationError("A cancelled booking cannot be checked in.")

        now = self._now()
        allowed_from = booking.scheduled_start(self.settings.tz) - timedelta(minutes=self.settings.check_in_window_minutes)
        if now < allowed_from:
            raise TooEarlyError(
                f"Check-in opens {self.settings.check_in_window_minutes} minutes before the booking starts."
            )
        if booking.is_checked_in:
            raise AlreadyCheckedInError("This booking is already checked in.")

        stamp = format_timestamp(now)
        logger.info(f"Booking {booking_id} checked in at {stamp}")
        return self.apply_patch(booking_id, {
            "is_checked_in": True,
            "check_in_time": stamp,
            "actual_start_time": stamp,
            "is_no_show": False,
        })

    def check_out(self, booking_id: str, requesting_identifier: str) -> Booking:
        identifier = self._require_identifier(requesting_identifier)
        booking = self._load(booking_id)
        self._authorize(booking, identifier)
        if not booking.is_checked_in:
            raise NotCheckedInError("This booking has not been checked in.")
        if booking.is_checked_out():
            raise AlreadyCheckedOutError("This booking is already checked out.")

        stamp = self._timestamp()
        logger.info(f"Booking {booking_id} checked out at {stamp}")
        return self.apply_patch(booking_id, {"check_out_time": stamp, "actual_end_time": stamp})

    def auto_check_out(self, booking_id: str) -> Optional[Booking]:
        """
        Unattended checkout once the scheduled end is reached, performed with
        the booker's own identifier. Returns None when the booking is not due.
        """
        booking = self._load(booking_id)
        if not booking.is_occupying():
            return None
        if self._now() < booking.scheduled_end(self.settings.tz):
            return None
        logger.info(f"Automatic checkout for booking {booking_id}")
        return self.check_out(booking_id, booking.booker_id)

    def extend(self, booking_id: str, requesting_identifier: str, minutes: int) -> Booking:
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes not in EXTEND_MINUTES:
            raise ValidationError("Bookings can only be extended by 30 or 60 minutes.")
        identifier = self._require_identifier(requesting_identifier)

        booking = self._load(booking_id)
        self._authorize(booking, identifier)
        if not booking.is_checked_in:
            raise NotCheckedInError("Only checked-in bookings can be extended.")
        if booking.is_checked_out():
            raise AlreadyCheckedOutError("A checked-out booking cannot be extended.")

        new_end_minutes = time_to_minutes(booking.end_time) + minutes
        if new_end_minutes >= 24 * 60:
            raise ValidationError("A booking cannot be extended past midnight.")
        new_end = minutes_to_time_str(new_end_minutes)

        if self.conflict_checker.has_conflict(
            booking.room_id, booking.date, booking.end_time, new_end, exclude_booking_id=booking.id
        ):
            raise ConflictError("Another booking occupies the extension period.")

        logger.info(f"Booking {booking_id} extended by {minutes} minutes: {booking.end_time} -> {new_end}")
        return self.apply_patch(booking_id, {"end_time": new_end})

    def mark_no_show(self, booking_id: str) -> Booking:
        self._load(booking_id)
        logger.info(f"Booking {booking_id} marked as no-show")
        return self.apply_patch(booking_id, {
            "is_no_show": True,
            "is_checked_in": False,
            "status": Booking.STATUS_CANCELLED,
        })
