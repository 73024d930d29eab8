from __future__ import annotations

import importlib
import os
import logging
from typing import Optional, Type

from dotenv import load_dotenv

from roombot.base_config import IDENTIFIER_EMAIL, IDENTIFIER_EMPLOYEE_ID, RoomBotConfig
from roombot.adapters.base import RoomStoreAdapter
from roombot.adapters.sheets_adapter import GoogleSheetsAdapter
from roombot.adapters.sqlite_adapter import SQLiteRoomAdapter
from roombot.exceptions import ConfigurationError

load_dotenv()

DEFAULT_CONFIG_CLASS = "roombot.config.EnvironmentRoomBotConfig"
CONFIG_ENV_KEY = "ROOMBOT_CONFIG"

STORE_SQLITE = "sqlite"
STORE_SHEETS = "sheets"

logger = logging.getLogger(__name__)


def _import_config_class(path: str) -> Type[RoomBotConfig]:
    try:
        module_path, class_name = path.rsplit(".", 1)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid config path '{path}'") from exc

    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ConfigurationError(f"Could not import module '{module_path}'") from exc

    try:
        cls = getattr(module, class_name)
    except AttributeError as exc:
        raise ConfigurationError(f"Config class '{class_name}' not found in '{module_path}'") from exc

    if not isinstance(cls, type) or not issubclass(cls, RoomBotConfig):
        raise ConfigurationError(f"{path} is not a subclass of RoomBotConfig")

    return cls


class EnvironmentRoomBotConfig(RoomBotConfig):
    """Default configuration that reads from environment variables."""

    def __init__(self) -> None:
        self._env = os.environ

    def _get_int(self, key: str, default: int) -> int:
        raw = self._env.get(key)
        if raw is None or raw == "":
            return default
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning(f"Invalid integer for {key}: {raw!r}, using {default}")
            return default

    def get_store_backend(self) -> str:
        backend = self._env.get("ROOMBOT_STORE", STORE_SQLITE).strip().lower()
        if backend not in (STORE_SQLITE, STORE_SHEETS):
            raise ConfigurationError(f"ROOMBOT_STORE must be '{STORE_SQLITE}' or '{STORE_SHEETS}', got '{backend}'")
        return backend

    def get_database_url(self) -> str:
        return self._env.get("DATABASE_URL", "sqlite:///roombot.db")

    def get_spreadsheet_id(self) -> Optional[str]:
        return self._env.get("GOOGLE_SHEETS_SPREADSHEET_ID")

    def get_sheets_access_token(self) -> Optional[str]:
        return self._env.get("GOOGLE_SHEETS_ACCESS_TOKEN")

    def get_rooms_sheet_name(self) -> str:
        return self._env.get("GOOGLE_SHEETS_ROOMS_SHEET_NAME", "rooms")

    def get_bookings_sheet_name(self) -> str:
        return self._env.get("GOOGLE_SHEETS_BOOKINGS_SHEET_NAME", "bookings")

    def get_sheets_timeout(self) -> int:
        return self._get_int("SHEETS_TIMEOUT", 30)

    def get_admin_override_code(self) -> str:
        return self._env.get("ADMIN_PIN", "1234567")

    def get_check_in_window_minutes(self) -> int:
        return self._get_int("CHECK_IN_WINDOW_MINUTES", 15)

    def get_stale_occupancy_grace_minutes(self) -> int:
        return self._get_int("STALE_OCCUPANCY_GRACE_MINUTES", 30)

    def get_no_show_after_minutes(self) -> int:
        return self._get_int("NO_SHOW_AFTER_MINUTES", 15)

    def get_identifier_scheme(self) -> str:
        scheme = self._env.get("IDENTIFIER_SCHEME", IDENTIFIER_EMPLOYEE_ID).strip().lower()
        if scheme not in (IDENTIFIER_EMPLOYEE_ID, IDENTIFIER_EMAIL):
            raise ConfigurationError(f"IDENTIFIER_SCHEME must be '{IDENTIFIER_EMPLOYEE_ID}' or '{IDENTIFIER_EMAIL}'")
        return scheme

    def get_utc_offset_hours(self) -> int:
        return self._get_int("UTC_OFFSET_HOURS", 9)

    def get_sweep_interval_seconds(self) -> int:
        return self._get_int("SWEEP_INTERVAL_SECONDS", 60)

    def get_telegram_bot_token(self) -> Optional[str]:
        return self._env.get("TELEGRAM_BOT_TOKEN")

    def create_adapter(self) -> RoomStoreAdapter:
        """Builds the configured record store and initialises it."""
        backend = self.get_store_backend()
        if backend == STORE_SHEETS:
            adapter: RoomStoreAdapter = GoogleSheetsAdapter(
                spreadsheet_id=self.get_spreadsheet_id() or "",
                access_token=self.get_sheets_access_token(),
                rooms_sheet=self.get_rooms_sheet_name(),
                bookings_sheet=self.get_bookings_sheet_name(),
                timeout=self.get_sheets_timeout(),
            )
        else:
            adapter = SQLiteRoomAdapter(self.get_database_url())
        adapter.init()
        return adapter


_CONFIG: Optional[RoomBotConfig] = None


def get_config() -> RoomBotConfig:
    global _CONFIG
    if _CONFIG is None:
        class_path = os.getenv(CONFIG_ENV_KEY, DEFAULT_CONFIG_CLASS)
        cls = _import_config_class(class_path)
        _CONFIG = cls()
    return _CONFIG


def set_config(config: Optional[RoomBotConfig]) -> None:
    global _CONFIG
    _CONFIG = config
