from .conflict_service import ConflictChecker
from .reservation_service import ReservationService
from .room_service import RoomService
from .bulk_service import BulkBookingService, BulkCreateResult
from .sweeper import OccupancySweeper

__all__ = [
    "ConflictChecker",
    "ReservationService",
    "RoomService",
    "BulkBookingService",
    "BulkCreateResult",
    "OccupancySweeper",
]
