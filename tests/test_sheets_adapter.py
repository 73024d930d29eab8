"""
Tests for the Google Sheets record store, run against an in-memory
spreadsheet served through `httpx.MockTransport`.
"""
import json
import re

import httpx
import pytest

from roombot.adapters.sheets_adapter import (
    BOOKING_SHEET_COLUMNS,
    GoogleSheetsAdapter,
    booking_from_row,
    booking_to_row,
)
from roombot.exceptions import ConfigurationError, StoreUnavailableError


# ============================================================================
# Test Fixtures and Helpers
# ============================================================================

class FakeSpreadsheet:
    """Minimal stand-in for the Sheets v4 values endpoints."""

    def __init__(self, titles=("rooms", "bookings")):
        self.sheets = {title: [["header"]] for title in titles}
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if "/values/" not in path:
            return httpx.Response(200, json={"sheets": [{"properties": {"title": t}} for t in self.sheets]})

        a1_range = path.split("/values/", 1)[1]
        sheet, cells = a1_range.split("!", 1)
        if request.method == "GET":
            return httpx.Response(200, json={"range": a1_range, "values": self.sheets[sheet][1:]})
        body = json.loads(request.content)
        if request.method == "POST":
            self.sheets[sheet].extend(body["values"])
            return httpx.Response(200, json={"updates": {"updatedRows": 1}})
        if request.method == "PUT":
            row_number = int(re.match(r"A(\d+):", cells).group(1))
            self.sheets[sheet][row_number - 1] = body["values"][0]
            return httpx.Response(200, json={"updatedRows": 1})
        return httpx.Response(405)


def make_adapter(fake: FakeSpreadsheet) -> GoogleSheetsAdapter:
    client = httpx.Client(transport=httpx.MockTransport(fake.handler))
    return GoogleSheetsAdapter("sheet-id", "token", client=client)


def make_booking_record(**overrides):
    record = {
        "id": "booking_1_abc",
        "room_id": "R1",
        "room_name": "Orion",
        "title": "Design review",
        "booker_name": "Kim Test",
        "booker_id": "1234500",
        "date": "2026-10-17",
        "start_time": "14:00",
        "end_time": "15:00",
        "status": "confirmed",
        "participants": 3,
        "is_checked_in": False,
        "is_no_show": False,
    }
    record.update(overrides)
    return record


# ============================================================================
# Row mapping
# ============================================================================

class TestRowMapping:

    def test_booking_row_has_21_columns_with_empty_auto_release(self):
        row = booking_to_row(make_booking_record())
        assert len(row) == len(BOOKING_SHEET_COLUMNS) == 21
        assert row[-1] == ""
        assert row[18] == "FALSE"

    def test_booking_from_short_row_fills_defaults(self):
        data = booking_from_row(["booking_x", "R1", "", "t", "n", "1234500", "9:00", "10:00", "2026-10-17"])
        assert data["status"] == "pending"
        assert data["participants"] == 1
        assert data["is_checked_in"] is False
        assert data["check_out_time"] == ""
        assert "auto_release_time" not in data


# ============================================================================
# Adapter
# ============================================================================

class TestGoogleSheetsAdapter:

    def test_requires_spreadsheet_id(self):
        with pytest.raises(ConfigurationError):
            GoogleSheetsAdapter("", "token")

    def test_init_verifies_sheets(self):
        fake = FakeSpreadsheet()
        make_adapter(fake).init()
        assert fake.requests[0].headers["Authorization"] == "Bearer token"

    def test_init_missing_sheet(self):
        fake = FakeSpreadsheet(titles=("rooms",))
        with pytest.raises(ConfigurationError):
            make_adapter(fake).init()

    def test_rooms_roundtrip(self):
        fake = FakeSpreadsheet()
        adapter = make_adapter(fake)
        adapter.create_room({"id": "R1", "name": "Orion", "capacity": 6, "equipment": ["TV", "Phone"]})
        adapter.create_room({"id": "R2", "name": "Lyra", "capacity": 2, "status": "inactive"})

        rooms = adapter.list_rooms()
        assert [r["id"] for r in rooms] == ["R1", "R2"]
        assert rooms[0]["equipment"] == ["TV", "Phone"]
        assert adapter.get_room("R2")["status"] == "inactive"
        assert adapter.get_room("R3") is None

    def test_append_and_filter_bookings(self):
        fake = FakeSpreadsheet()
        adapter = make_adapter(fake)
        adapter.append_booking(make_booking_record())
        adapter.append_booking(make_booking_record(id="booking_2_def", date="2026-10-18"))

        assert len(adapter.list_bookings()) == 2
        assert [b["id"] for b in adapter.list_bookings("2026-10-18")] == ["booking_2_def"]
        assert adapter.get_booking("booking_1_abc")["participants"] == 3

        append = [r for r in fake.requests if r.method == "POST"][0]
        assert append.url.params["valueInputOption"] == "USER_ENTERED"
        assert append.url.params["insertDataOption"] == "INSERT_ROWS"

    def test_patch_rewrites_row_and_keeps_last_column(self):
        fake = FakeSpreadsheet()
        adapter = make_adapter(fake)
        adapter.append_booking(make_booking_record(id="booking_0_zzz"))
        adapter.append_booking(make_booking_record())
        fake.sheets["bookings"][2][-1] = "legacy"

        patched = adapter.patch_booking("booking_1_abc", {"is_checked_in": True, "check_in_time": "2026-10-17T13:50:00.000+09:00"})

        assert patched["is_checked_in"] is True
        assert patched["title"] == "Design review"
        put = [r for r in fake.requests if r.method == "PUT"][0]
        assert put.url.path.endswith("bookings!A3:U3")
        row = fake.sheets["bookings"][2]
        assert row[18] == "TRUE"
        assert row[-1] == "legacy"
        assert fake.sheets["bookings"][1][0] == "booking_0_zzz"

    def test_patch_unknown_booking(self):
        adapter = make_adapter(FakeSpreadsheet())
        assert adapter.patch_booking("booking_missing", {"status": "cancelled"}) is None

    def test_http_error_is_store_unavailable(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
        adapter = GoogleSheetsAdapter("sheet-id", "token", client=client)
        with pytest.raises(StoreUnavailableError):
            adapter.list_bookings()

    def test_transport_error_is_store_unavailable(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        adapter = GoogleSheetsAdapter("sheet-id", "token", client=httpx.Client(transport=httpx.MockTransport(refuse)))
        with pytest.raises(StoreUnavailableError):
            adapter.list_rooms()
