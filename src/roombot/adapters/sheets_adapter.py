"""
Google Sheets record store.

Rooms and bookings live in two sheets of one spreadsheet, one record per row,
row 1 being a header. Column positions are private to this module; callers
only see dict records.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx

from roombot.exceptions import ConfigurationError, StoreUnavailableError

logger = logging.getLogger(__name__)

SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"

# rooms!A:F
ROOM_SHEET_COLUMNS = ("id", "name", "capacity", "location", "equipment", "status")

# bookings!A:U, the last column (autoReleaseTime) is kept empty
BOOKING_SHEET_COLUMNS = (
    "id", "room_id", "room_name", "title", "booker_name", "booker_id",
    "start_time", "end_time", "date", "status", "purpose", "participants",
    "created_at", "updated_at", "check_in_time", "check_out_time",
    "actual_start_time", "actual_end_time", "is_checked_in", "is_no_show",
    "auto_release_time",
)

ROOM_LAST_COLUMN = "F"
BOOKING_LAST_COLUMN = "U"


def _cell(row: List[Any], index: int) -> str:
    if index < len(row) and row[index] is not None:
        return str(row[index])
    return ""


def _to_int(value: str, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def room_from_row(row: List[Any]) -> Dict[str, Any]:
    equipment = _cell(row, 4)
    return {
        "id": _cell(row, 0),
        "name": _cell(row, 1),
        "capacity": _to_int(_cell(row, 2), 0),
        "location": _cell(row, 3),
        "equipment": [item.strip() for item in equipment.split(",") if item.strip()],
        "status": "active" if _cell(row, 5) == "active" else "inactive",
    }


def room_to_row(record: Dict[str, Any]) -> List[Any]:
    equipment = record.get("equipment") or []
    if isinstance(equipment, (list, tuple)):
        equipment = ",".join(equipment)
    return [
        record.get("id", ""),
        record.get("name", ""),
        record.get("capacity", 0),
        record.get("location", ""),
        equipment,
        record.get("status", "active"),
    ]


def booking_from_row(row: List[Any]) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for index, name in enumerate(BOOKING_SHEET_COLUMNS):
        data[name] = _cell(row, index)
    data.pop("auto_release_time")
    data["status"] = data["status"] or "pending"
    data["participants"] = _to_int(data["participants"], 1)
    data["is_checked_in"] = data["is_checked_in"].upper() == "TRUE"
    data["is_no_show"] = data["is_no_show"].upper() == "TRUE"
    return data


def booking_to_row(record: Dict[str, Any]) -> List[Any]:
    row: List[Any] = []
    for name in BOOKING_SHEET_COLUMNS:
        value = record.get(name, "")
        if name in ("is_checked_in", "is_no_show"):
            value = "TRUE" if value else "FALSE"
        elif value is None:
            value = ""
        row.append(value)
    return row


class GoogleSheetsAdapter:
    """Spreadsheet-backed record store talking to the Sheets v4 REST API."""

    def __init__(
        self,
        spreadsheet_id: str,
        access_token: Optional[str],
        rooms_sheet: str = "rooms",
        bookings_sheet: str = "bookings",
        timeout: int = 30,
        client: Optional[httpx.Client] = None,
    ):
        if not spreadsheet_id:
            raise ConfigurationError("GOOGLE_SHEETS_SPREADSHEET_ID is not set.")
        self.spreadsheet_id = spreadsheet_id
        self.rooms_sheet = rooms_sheet
        self.bookings_sheet = bookings_sheet

        headers = {"Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._client = client or httpx.Client(timeout=timeout)
        self._headers = headers
        logger.info(f"GoogleSheetsAdapter initialised for spreadsheet {spreadsheet_id}")

    # ------------------------------------
    # HTTP
    # ------------------------------------
    def _url(self, suffix: str = "") -> str:
        return f"{SHEETS_API_URL}/{self.spreadsheet_id}{suffix}"

    def _values_url(self, a1_range: str, action: str = "") -> str:
        return self._url(f"/values/{quote(a1_range, safe='!:')}{action}")

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._client.request(method, url, headers=self._headers, **kwargs)
            response.raise_for_status()
            return response.json() if response.content else {}
        except httpx.HTTPError as e:
            logger.error(f"Sheets API {method} {url} failed: {e}")
            raise StoreUnavailableError(f"Spreadsheet request failed: {e}") from e
        except ValueError as e:
            logger.error(f"Sheets API returned an unreadable body for {url}: {e}")
            raise StoreUnavailableError(f"Spreadsheet response could not be decoded: {e}") from e

    def _get_rows(self, a1_range: str) -> List[List[Any]]:
        data = self._request("GET", self._values_url(a1_range))
        return data.get("values") or []

    def _append_row(self, sheet: str, last_column: str, row: List[Any]) -> None:
        self._request(
            "POST",
            self._values_url(f"{sheet}!A:{last_column}", ":append"),
            params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
            json={"values": [row]},
        )

    def _update_row(self, a1_range: str, row: List[Any]) -> None:
        self._request(
            "PUT",
            self._values_url(a1_range),
            params={"valueInputOption": "USER_ENTERED"},
            json={"range": a1_range, "majorDimension": "ROWS", "values": [row]},
        )

    # ------------------------------------
    # Lifecycle
    # ------------------------------------
    def init(self) -> None:
        """Verifies the spreadsheet is reachable and both sheets exist."""
        data = self._request("GET", self._url(), params={"fields": "sheets.properties.title"})
        titles = {s.get("properties", {}).get("title") for s in data.get("sheets", [])}
        missing = [name for name in (self.rooms_sheet, self.bookings_sheet) if name not in titles]
        if missing:
            raise ConfigurationError(f"Spreadsheet is missing sheets: {', '.join(missing)}")
        logger.info("Spreadsheet access verified.")

    # ------------------------------------
    # Rooms
    # ------------------------------------
    def create_room(self, record: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Creating room: {record.get('name')}")
        row = room_to_row(record)
        self._append_row(self.rooms_sheet, ROOM_LAST_COLUMN, row)
        return room_from_row(row)

    def list_rooms(self) -> List[Dict[str, Any]]:
        rows = self._get_rows(f"{self.rooms_sheet}!A2:{ROOM_LAST_COLUMN}")
        return [room_from_row(row) for row in rows if row and _cell(row, 0)]

    def get_room(self, room_id: str) -> Optional[Dict[str, Any]]:
        for room in self.list_rooms():
            if room["id"] == room_id:
                return room
        return None

    # ------------------------------------
    # Bookings
    # ------------------------------------
    def _booking_rows(self) -> List[List[Any]]:
        return self._get_rows(f"{self.bookings_sheet}!A2:{BOOKING_LAST_COLUMN}")

    def _find_booking_row(self, booking_id: str) -> Tuple[int, Optional[List[Any]]]:
        """Returns (sheet row number, row) for the booking, or (-1, None)."""
        for index, row in enumerate(self._booking_rows()):
            if row and _cell(row, 0) == booking_id:
                return index + 2, row
        return -1, None

    def list_bookings(self, date: Optional[str] = None) -> List[Dict[str, Any]]:
        bookings = [booking_from_row(row) for row in self._booking_rows() if row and _cell(row, 0)]
        if date:
            bookings = [b for b in bookings if b["date"] == date]
        return bookings

    def get_booking(self, booking_id: str) -> Optional[Dict[str, Any]]:
        _, row = self._find_booking_row(booking_id)
        return booking_from_row(row) if row else None

    def append_booking(self, record: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Appending booking {record.get('id')} for room {record.get('room_id')}")
        row = booking_to_row(record)
        self._append_row(self.bookings_sheet, BOOKING_LAST_COLUMN, row)
        return booking_from_row(row)

    def patch_booking(self, booking_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        row_number, row = self._find_booking_row(booking_id)
        if row is None:
            return None

        merged = booking_from_row(row)
        merged.update({k: v for k, v in fields.items() if k in BOOKING_SHEET_COLUMNS and k != "id"})
        merged["auto_release_time"] = _cell(row, len(BOOKING_SHEET_COLUMNS) - 1)

        logger.info(f"Patching booking {booking_id} (row {row_number}): {list(fields.keys())}")
        a1_range = f"{self.bookings_sheet}!A{row_number}:{BOOKING_LAST_COLUMN}{row_number}"
        self._update_row(a1_range, booking_to_row(merged))

        merged.pop("auto_release_time")
        return merged

    def close(self) -> None:
        self._client.close()
