from __future__ import annotations

import sqlite3
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from roombot.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

ROOM_COLUMNS = ("id", "name", "capacity", "location", "equipment", "status")

BOOKING_COLUMNS = (
    "id", "room_id", "room_name", "title", "booker_name", "booker_id",
    "start_time", "end_time", "date", "status", "purpose", "participants",
    "created_at", "updated_at", "check_in_time", "check_out_time",
    "actual_start_time", "actual_end_time", "is_checked_in", "is_no_show",
)

_BOOL_COLUMNS = ("is_checked_in", "is_no_show")


class SQLiteRoomAdapter:
    """SQLite record store for rooms and bookings (local development and tests)."""

    def __init__(self, db_url: str):
        # Format: sqlite:///path
        if db_url.startswith("sqlite:///"):
            self.db_path = db_url.replace("sqlite:///", "")
        else:
            self.db_path = db_url

        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"SQLiteRoomAdapter initialised. Database path: {self.db_path}")

    def _conn(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            return conn
        except sqlite3.Error as e:
            logger.error(f"Database connection error: {e}")
            raise StoreUnavailableError(f"Could not connect to database: {e}") from e

    # ------------------------------------
    # Lifecycle
    # ------------------------------------
    def init(self) -> None:
        """Creates the tables if they do not exist."""
        logger.info("Checking/creating database tables...")
        try:
            with self._conn() as conn:
                cur = conn.cursor()

                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS rooms (
                        id TEXT PRIMARY KEY,
                        name TEXT NOT NULL,
                        capacity INTEGER NOT NULL,
                        location TEXT NOT NULL DEFAULT '',
                        equipment TEXT NOT NULL DEFAULT '',
                        status TEXT NOT NULL DEFAULT 'active'
                    )
                    """
                )

                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS bookings (
                        id TEXT PRIMARY KEY,
                        room_id TEXT NOT NULL,
                        room_name TEXT NOT NULL DEFAULT '',
                        title TEXT NOT NULL,
                        booker_name TEXT NOT NULL,
                        booker_id TEXT NOT NULL,
                        start_time TEXT NOT NULL,
                        end_time TEXT NOT NULL,
                        date TEXT NOT NULL,
                        status TEXT NOT NULL DEFAULT 'pending',
                        purpose TEXT NOT NULL DEFAULT '',
                        participants INTEGER NOT NULL DEFAULT 1,
                        created_at TEXT NOT NULL DEFAULT '',
                        updated_at TEXT NOT NULL DEFAULT '',
                        check_in_time TEXT NOT NULL DEFAULT '',
                        check_out_time TEXT NOT NULL DEFAULT '',
                        actual_start_time TEXT NOT NULL DEFAULT '',
                        actual_end_time TEXT NOT NULL DEFAULT '',
                        is_checked_in INTEGER NOT NULL DEFAULT 0,
                        is_no_show INTEGER NOT NULL DEFAULT 0,
                        FOREIGN KEY(room_id) REFERENCES rooms(id)
                    )
                    """
                )
                cur.execute("CREATE INDEX IF NOT EXISTS idx_bookings_date ON bookings(date)")
                conn.commit()
                logger.info("Table initialisation completed.")
        except sqlite3.Error as e:
            logger.error(f"SQLite error during table initialisation: {e}")
            raise StoreUnavailableError(f"Table initialisation failed: {e}") from e

    # ------------------------------------
    # Row conversion
    # ------------------------------------
    @staticmethod
    def _room_from_row(row: sqlite3.Row) -> Dict[str, Any]:
        data = dict(row)
        equipment = data.get("equipment") or ""
        data["equipment"] = [item.strip() for item in equipment.split(",") if item.strip()]
        return data

    @staticmethod
    def _booking_from_row(row: sqlite3.Row) -> Dict[str, Any]:
        data = dict(row)
        for key in _BOOL_COLUMNS:
            data[key] = bool(data.get(key))
        return data

    @staticmethod
    def _booking_to_params(data: Dict[str, Any]) -> Dict[str, Any]:
        params = {k: v for k, v in data.items() if k in BOOKING_COLUMNS}
        for key in _BOOL_COLUMNS:
            if key in params:
                params[key] = 1 if params[key] else 0
        return params

    # ------------------------------------
    # Helpers
    # ------------------------------------
    def _fetch_one(self, query: str, params: tuple) -> Optional[sqlite3.Row]:
        try:
            with self._conn() as conn:
                cur = conn.cursor()
                cur.execute(query, params)
                return cur.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Query failed ({query!r}): {e}")
            raise StoreUnavailableError(f"Read failed: {e}") from e

    def _fetch_all(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        try:
            with self._conn() as conn:
                cur = conn.cursor()
                cur.execute(query, params)
                return cur.fetchall()
        except sqlite3.Error as e:
            logger.error(f"Query failed ({query!r}): {e}")
            raise StoreUnavailableError(f"Read failed: {e}") from e

    def _insert(self, table_name: str, data: Dict[str, Any]) -> None:
        try:
            with self._conn() as conn:
                cur = conn.cursor()
                fields = ", ".join(data.keys())
                placeholders = ", ".join("?" * len(data))
                cur.execute(f"INSERT INTO {table_name} ({fields}) VALUES ({placeholders})", tuple(data.values()))
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Insert into {table_name} failed: {e}")
            raise StoreUnavailableError(f"Could not write to {table_name}: {e}") from e

    # ------------------------------------
    # Rooms
    # ------------------------------------
    def create_room(self, record: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Creating room: {record.get('name')}")
        data = {k: v for k, v in record.items() if k in ROOM_COLUMNS}
        equipment = data.get("equipment")
        if isinstance(equipment, (list, tuple)):
            data["equipment"] = ",".join(equipment)
        self._insert("rooms", data)
        return self.get_room(data["id"]) or {"id": data["id"]}

    def get_room(self, room_id: str) -> Optional[Dict[str, Any]]:
        row = self._fetch_one("SELECT * FROM rooms WHERE id = ?", (room_id,))
        return self._room_from_row(row) if row else None

    def list_rooms(self) -> List[Dict[str, Any]]:
        return [self._room_from_row(r) for r in self._fetch_all("SELECT * FROM rooms ORDER BY rowid")]

    # ------------------------------------
    # Bookings
    # ------------------------------------
    def list_bookings(self, date: Optional[str] = None) -> List[Dict[str, Any]]:
        if date:
            rows = self._fetch_all("SELECT * FROM bookings WHERE date = ? ORDER BY rowid", (date,))
        else:
            rows = self._fetch_all("SELECT * FROM bookings ORDER BY rowid")
        return [self._booking_from_row(r) for r in rows]

    def get_booking(self, booking_id: str) -> Optional[Dict[str, Any]]:
        row = self._fetch_one("SELECT * FROM bookings WHERE id = ?", (booking_id,))
        return self._booking_from_row(row) if row else None

    def append_booking(self, record: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Appending booking {record.get('id')} for room {record.get('room_id')}")
        self._insert("bookings", self._booking_to_params(record))
        return self.get_booking(record["id"]) or dict(record)

    def patch_booking(self, booking_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        params = self._booking_to_params(fields)
        params.pop("id", None)
        if not params:
            return self.get_booking(booking_id)
        logger.info(f"Patching booking {booking_id}: {list(params.keys())}")
        try:
            with self._conn() as conn:
                cur = conn.cursor()
                set_clause = ", ".join([f"{k} = ?" for k in params.keys()])
                values = tuple(params.values()) + (booking_id,)
                cur.execute(f"UPDATE bookings SET {set_clause} WHERE id = ?", values)
                conn.commit()
                if cur.rowcount == 0:
                    return None
        except sqlite3.Error as e:
            logger.error(f"Booking update failed: {e}")
            raise StoreUnavailableError(f"Could not update booking {booking_id}: {e}") from e
        return self.get_booking(booking_id)
