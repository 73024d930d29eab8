"""
Tests for the Telegram command handlers and the sweeper loop step.

Handlers are driven directly with stand-in update/context objects; nothing
talks to Telegram.
"""
import asyncio
import gc
import os
import tempfile
import threading
import time
from datetime import datetime
from types import SimpleNamespace

import roombot.channels.telegram as telegram_channel
from roombot.adapters.sqlite_adapter import SQLiteRoomAdapter
from roombot.main import sweep_once
from roombot.timeutils import fixed_offset
from roombot.tools import set_adapter, set_clock

NOW = datetime(2026, 10, 17, 10, 20, tzinfo=fixed_offset(9))


# ============================================================================
# Test Fixtures and Helpers
# ============================================================================

class FakeMessage:
    def __init__(self):
        self.replies = []

    async def reply_text(self, text, parse_mode=None):
        self.replies.append(text)


def make_update():
    return SimpleNamespace(message=FakeMessage())


def make_context(*args):
    return SimpleNamespace(args=list(args))


def setup_test_db():
    td = tempfile.TemporaryDirectory()
    db = SQLiteRoomAdapter(f"sqlite:///{os.path.join(td.name, 'roombot_test.db')}")
    db.init()
    db.create_room({"id": "R1", "name": "Orion", "capacity": 6})
    set_adapter(db)
    set_clock(lambda: NOW)
    return td, db


def cleanup_test_db(td, db):
    set_adapter(None)
    set_clock(None)
    del db
    gc.collect()
    time.sleep(0.1)
    td.cleanup()


async def failing_tool(name, args):
    raise RuntimeError("store exploded")


# ============================================================================
# Handlers
# ============================================================================

class TestCommandHandlers:

    def test_invoke_tool_is_awaitable(self):
        td, db = setup_test_db()
        try:
            result = asyncio.run(telegram_channel.invoke_tool("list_rooms", {}))
            assert result["success"] is True
            assert result["rooms"][0]["id"] == "R1"
        finally:
            cleanup_test_db(td, db)

    def test_rooms_command(self):
        td, db = setup_test_db()
        try:
            update = make_update()
            asyncio.run(telegram_channel.rooms_command(update, make_context()))
            assert len(update.message.replies) == 1
            assert "Orion" in update.message.replies[0]
        finally:
            cleanup_test_db(td, db)

    def test_book_and_list(self):
        td, db = setup_test_db()
        try:
            update = make_update()
            context = make_context("R1", "2026-10-18", "14:00", "15:00", "1234500", "Kim", "Design", "review")
            asyncio.run(telegram_channel.book_command(update, context))
            assert update.message.replies[0].startswith("Booking created")

            update = make_update()
            asyncio.run(telegram_channel.bookings_command(update, make_context("2026-10-18")))
            assert "Design review" in update.message.replies[0]
        finally:
            cleanup_test_db(td, db)

    def test_tool_failure_reply(self):
        td, db = setup_test_db()
        try:
            update = make_update()
            asyncio.run(telegram_channel.checkin_command(update, make_context("booking_missing", "1234500")))
            assert update.message.replies[0].startswith("Failed: Booking booking\\_missing not found")
        finally:
            cleanup_test_db(td, db)

    def test_rooms_and_bookings_reply_when_tool_raises(self, monkeypatch):
        monkeypatch.setattr(telegram_channel, "invoke_tool", failing_tool)
        for handler in (telegram_channel.rooms_command, telegram_channel.bookings_command):
            update = make_update()
            asyncio.run(handler(update, make_context()))
            assert len(update.message.replies) == 1
            assert "could not be processed" in update.message.replies[0]

    def test_usage_reply(self):
        update = make_update()
        asyncio.run(telegram_channel.extend_command(update, make_context("booking_x")))
        assert update.message.replies[0].startswith("Usage: /extend")


# ============================================================================
# Sweeper loop step
# ============================================================================

class TestSweepOnce:

    def test_sweep_runs_off_the_event_loop(self):
        seen = {}

        class RecordingSweeper:
            def sweep(self):
                seen["thread"] = threading.get_ident()
                return {"checked_out": [], "no_shows": []}

        async def run():
            seen["loop_thread"] = threading.get_ident()
            return await sweep_once(RecordingSweeper())

        assert asyncio.run(run()) == {"checked_out": [], "no_shows": []}
        assert seen["thread"] != seen["loop_thread"]

    def test_sweep_errors_do_not_escape(self):
        class BrokenSweeper:
            def sweep(self):
                raise ValueError("time data '' does not match format '%H:%M'")

        assert asyncio.run(sweep_once(BrokenSweeper())) is None
