from .booking import Booking, new_booking_id
from .room import Room

__all__ = [
    "Booking",
    "Room",
    "new_booking_id",
]
