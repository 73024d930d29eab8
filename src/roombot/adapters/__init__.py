from .base import RoomStoreAdapter
from .sqlite_adapter import SQLiteRoomAdapter
from .sheets_adapter import GoogleSheetsAdapter

__all__ = [
    "RoomStoreAdapter",
    "SQLiteRoomAdapter",
    "GoogleSheetsAdapter",
]
