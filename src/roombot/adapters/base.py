from __future__ import annotations

from typing import Protocol, runtime_checkable, Optional, Dict, Any, List


@runtime_checkable
class RoomStoreAdapter(Protocol):
    """Row-oriented record store for rooms and bookings.

    Records are plain dicts keyed by the `Room` / `Booking` field names.
    Storage failures raise `StoreUnavailableError`; a missing record is `None`.
    """

    # lifecycle
    def init(self) -> None: ...

    # rooms
    def create_room(self, record: Dict[str, Any]) -> Dict[str, Any]: ...
    def get_room(self, room_id: str) -> Optional[Dict[str, Any]]: ...
    def list_rooms(self) -> List[Dict[str, Any]]: ...

    # bookings
    def list_bookings(self, date: Optional[str] = None) -> List[Dict[str, Any]]: ...
    def get_booking(self, booking_id: str) -> Optional[Dict[str, Any]]: ...
    def append_booking(self, record: Dict[str, Any]) -> Dict[str, Any]: ...
    def patch_booking(self, booking_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]: ...
