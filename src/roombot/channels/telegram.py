"""
Telegram command channel. Each command maps positional arguments onto one
of the booking tools and replies with a short MarkdownV2 summary.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes

from roombot.config import get_config
from roombot.exceptions import ChannelError
from roombot.tools import get_tool_map

logger = logging.getLogger(__name__)

USAGE = {
    "bookings": "/bookings [YYYY-MM-DD]",
    "book": "/book <room_id> <YYYY-MM-DD> <HH:MM> <HH:MM> <booker_id> <name> <title...>",
    "checkin": "/checkin <booking_id> <booker_id>",
    "checkout": "/checkout <booking_id> <booker_id>",
    "extend": "/extend <booking_id> <booker_id> [30|60]",
    "cancel": "/cancel <booking_id> <booker_id>",
}


# ------------------------------------
# Helpers
# ------------------------------------
def escape_markdown_v2(text: str) -> str:
    """Escapes MarkdownV2 special characters."""
    escape_chars = r'_*[]()~`>#+-=|{}.!'
    return re.sub(f'([{re.escape(escape_chars)}])', r'\\\1', text)


async def invoke_tool(name: str, args: Dict[str, Any]) -> Dict[str, Any]:
    tool = get_tool_map().get(name)
    if tool is None:
        raise ChannelError(f"Tool {name} not found")
    return await tool.ainvoke(args)


def format_booking(booking: Dict[str, Any]) -> str:
    line = f"{booking['date']} {booking['start_time']}-{booking['end_time']} {booking['room_name'] or booking['room_id']}: {booking['title']}"
    if booking.get("is_checked_in") and not booking.get("check_out_time"):
        line += " (in use)"
    return f"{line} [{booking['id']}]"


def format_result(result: Dict[str, Any]) -> str:
    if not result.get("success"):
        return f"Failed: {result.get('error', 'unknown error')}"
    if "booking" in result:
        return f"{result.get('message', 'Done.')}\n{format_booking(result['booking'])}"
    return result.get("message", "Done.")


def parse_args(args: Optional[List[str]], minimum: int, command: str) -> List[str]:
    args = list(args or [])
    if len(args) < minimum:
        raise ChannelError(f"Usage: {USAGE[command]}")
    return args


async def _reply(update: Update, text: str) -> None:
    await update.message.reply_text(escape_markdown_v2(text), parse_mode='MarkdownV2')


async def _call(update: Update, name: str, args: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Runs a tool. On failure the user gets a reply and None is returned."""
    try:
        result = await invoke_tool(name, args)
    except Exception as e:
        logger.error(f"Tool Error ({name}): {e}", exc_info=True)
        await _reply(update, "Sorry, that request could not be processed. Please try again.")
        return None
    if not result.get("success"):
        await _reply(update, format_result(result))
        return None
    return result


async def _run(update: Update, name: str, args: Dict[str, Any]) -> None:
    result = await _call(update, name, args)
    if result is not None:
        await _reply(update, format_result(result))


# ------------------------------------
# Handlers
# ------------------------------------
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    lines = ["Meeting room booking. Commands:", "/rooms"] + list(USAGE.values())
    await _reply(update, "\n".join(lines))


async def rooms_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    result = await _call(update, "get_room_status_board", {})
    if result is None:
        return
    lines = []
    for room in result["rooms"]:
        state = "free" if room["is_available"] else f"busy until {room['current_booking']['end_time']}"
        lines.append(f"{room['name']} ({room['capacity']} seats): {state}, {room['today_bookings_count']} today")
    await _reply(update, "\n".join(lines) or "No active rooms.")


async def bookings_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    args = {"date": context.args[0]} if context.args else {}
    result = await _call(update, "list_bookings", args)
    if result is None:
        return
    lines = [format_booking(b) for b in result["bookings"] if b["status"] != "cancelled"]
    await _reply(update, "\n".join(lines) or "No bookings.")


async def book_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    try:
        args = parse_args(context.args, 7, "book")
    except ChannelError as e:
        await _reply(update, str(e))
        return
    room_id, date, start_time, end_time, booker_id, booker_name = args[:6]
    await _run(update, "create_booking", {
        "room_id": room_id,
        "date": date,
        "start_time": start_time,
        "end_time": end_time,
        "booker_id": booker_id,
        "booker_name": booker_name,
        "title": " ".join(args[6:]),
    })


async def checkin_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    try:
        booking_id, booker_id = parse_args(context.args, 2, "checkin")[:2]
    except ChannelError as e:
        await _reply(update, str(e))
        return
    await _run(update, "check_in_booking", {"booking_id": booking_id, "booker_id": booker_id})


async def checkout_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    try:
        booking_id, booker_id = parse_args(context.args, 2, "checkout")[:2]
    except ChannelError as e:
        await _reply(update, str(e))
        return
    await _run(update, "check_out_booking", {"booking_id": booking_id, "booker_id": booker_id})


async def extend_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    try:
        args = parse_args(context.args, 2, "extend")
        minutes = int(args[2]) if len(args) > 2 else 30
    except ValueError:
        await _reply(update, f"Usage: {USAGE['extend']}")
        return
    except ChannelError as e:
        await _reply(update, str(e))
        return
    await _run(update, "extend_booking", {"booking_id": args[0], "booker_id": args[1], "extend_minutes": minutes})


async def cancel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    try:
        booking_id, booker_id = parse_args(context.args, 2, "cancel")[:2]
    except ChannelError as e:
        await _reply(update, str(e))
        return
    await _run(update, "update_booking_status", {"booking_id": booking_id, "status": "cancelled", "booker_id": booker_id})


def create_telegram_app() -> Application:
    config = get_config()
    token = config.get_telegram_bot_token()
    if not token: raise ValueError("TELEGRAM_BOT_TOKEN is missing!")

    app = Application.builder().token(token).build()
    app.add_handler(CommandHandler("start", start_command))
    app.add_handler(CommandHandler("rooms", rooms_command))
    app.add_handler(CommandHandler("bookings", bookings_command))
    app.add_handler(CommandHandler("book", book_command))
    app.add_handler(CommandHandler("checkin", checkin_command))
    app.add_handler(CommandHandler("checkout", checkout_command))
    app.add_handler(CommandHandler("extend", extend_command))
    app.add_handler(CommandHandler("cancel", cancel_command))
    return app


async def run_telegram_bot(application: Application) -> None:
    logger.info("Starting room booking bot (Telegram)...")
    await application.initialize()
    await application.start()
    await application.updater.start_polling(drop_pending_updates=True)
