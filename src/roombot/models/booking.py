from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, ClassVar, Dict
import random
import string
import time

from roombot.timeutils import combine

_ID_ALPHABET = string.digits + string.ascii_lowercase


def new_booking_id() -> str:
    """`booking_<epoch ms>_<9 base36 chars>`."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"booking_{int(time.time() * 1000)}_{suffix}"


@dataclass
class Booking:
    """Meeting room booking model."""

    # Required
    id: str
    room_id: str
    title: str
    booker_name: str
    booker_id: str
    date: str        # YYYY-MM-DD
    start_time: str  # HH:MM
    end_time: str    # HH:MM

    # Optional
    room_name: str = ""
    purpose: str = ""
    participants: int = 1

    STATUS_PENDING: ClassVar[str] = "pending"
    STATUS_CONFIRMED: ClassVar[str] = "confirmed"
    STATUS_CANCELLED: ClassVar[str] = "cancelled"
    STATUSES: ClassVar[tuple] = ("confirmed", "pending", "cancelled")

    status: str = field(default=STATUS_PENDING)
    created_at: str = ""
    updated_at: str = ""

    # Occupancy
    check_in_time: str = ""
    check_out_time: str = ""
    actual_start_time: str = ""
    actual_end_time: str = ""
    is_checked_in: bool = False
    is_no_show: bool = False

    # ------------------------------------
    # Methods
    # ------------------------------------

    def is_active(self) -> bool:
        """Active bookings count toward conflicts."""
        return self.status != self.STATUS_CANCELLED

    def is_cancelled(self) -> bool:
        return self.status == self.STATUS_CANCELLED

    def is_confirmed(self) -> bool:
        return self.status == self.STATUS_CONFIRMED

    def is_checked_out(self) -> bool:
        return bool(self.check_out_time)

    def is_occupying(self) -> bool:
        """Checked in and not yet checked out."""
        return self.is_checked_in and not self.is_checked_out()

    def scheduled_start(self, tz: tzinfo) -> datetime:
        return combine(self.date, self.start_time, tz)

    def scheduled_end(self, tz: tzinfo) -> datetime:
        return combine(self.date, self.end_time, tz)

    def to_dict(self) -> Dict[str, Any]:
        return self.__dict__.copy()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Booking:
        data = data.copy()
        for key in ("is_checked_in", "is_no_show"):
            value = data.get(key)
            if isinstance(value, str):
                data[key] = value.strip().upper() == "TRUE"
            elif value is not None:
                data[key] = bool(value)
        for key in ("check_in_time", "check_out_time", "actual_start_time", "actual_end_time"):
            if data.get(key) is None:
                data[key] = ""

        field_names = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in field_names}

        return cls(**filtered_data)
