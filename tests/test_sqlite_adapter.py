import gc
import os
import tempfile
import time

import pytest

from roombot.adapters.sqlite_adapter import SQLiteRoomAdapter
from roombot.exceptions import StoreUnavailableError


def make_db_url(tmpdir: str) -> str:
    db_path = os.path.join(tmpdir, "roombot_test.db")
    return f"sqlite:///{db_path}"


def make_booking_record(**overrides):
    record = {
        "id": "booking_1_abc",
        "room_id": "R1",
        "room_name": "Orion",
        "title": "Weekly sync",
        "booker_name": "Kim Test",
        "booker_id": "1234500",
        "date": "2026-10-17",
        "start_time": "10:00",
        "end_time": "11:00",
        "status": "confirmed",
        "purpose": "",
        "participants": 4,
        "created_at": "2026-10-17T09:00:00.000+09:00",
        "updated_at": "2026-10-17T09:00:00.000+09:00",
        "check_in_time": "",
        "check_out_time": "",
        "actual_start_time": "",
        "actual_end_time": "",
        "is_checked_in": False,
        "is_no_show": False,
    }
    record.update(overrides)
    return record


def test_sqlite_adapter_crud_flow():
    with tempfile.TemporaryDirectory() as td:
        db = SQLiteRoomAdapter(make_db_url(td))

        try:
            db.init()
            db.create_room({"id": "R1", "name": "Orion", "capacity": 6, "location": "3F", "equipment": ["TV", "Whiteboard"]})
            db.create_room({"id": "R2", "name": "Lyra", "capacity": 2, "status": "inactive"})

            rooms = db.list_rooms()
            assert [r["id"] for r in rooms] == ["R1", "R2"]
            assert rooms[0]["equipment"] == ["TV", "Whiteboard"]
            assert db.get_room("R2")["status"] == "inactive"
            assert db.get_room("R9") is None

            saved = db.append_booking(make_booking_record())
            assert saved["id"] == "booking_1_abc"
            assert saved["is_checked_in"] is False

            db.append_booking(make_booking_record(id="booking_2_def", date="2026-10-18"))
            assert len(db.list_bookings()) == 2
            assert [b["id"] for b in db.list_bookings("2026-10-17")] == ["booking_1_abc"]

            patched = db.patch_booking("booking_1_abc", {"is_checked_in": True, "check_in_time": "2026-10-17T09:50:00.000+09:00"})
            assert patched["is_checked_in"] is True
            assert patched["check_in_time"] == "2026-10-17T09:50:00.000+09:00"
            assert patched["title"] == "Weekly sync"

            assert db.patch_booking("booking_missing", {"status": "cancelled"}) is None
            assert db.get_booking("booking_missing") is None
        finally:
            del db
            gc.collect()
            time.sleep(0.1)


def test_sqlite_adapter_duplicate_id_is_store_error():
    with tempfile.TemporaryDirectory() as td:
        db = SQLiteRoomAdapter(make_db_url(td))
        try:
            db.init()
            db.append_booking(make_booking_record())
            with pytest.raises(StoreUnavailableError):
                db.append_booking(make_booking_record())
        finally:
            del db
            gc.collect()
            time.sleep(0.1)
