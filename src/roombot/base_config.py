"""
Base configuration abstractions for RoomBot.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Optional

from roombot.adapters.base import RoomStoreAdapter
from roombot.timeutils import DEFAULT_UTC_OFFSET_HOURS, fixed_offset

IDENTIFIER_EMPLOYEE_ID = "employee_id"
IDENTIFIER_EMAIL = "email"


@dataclass
class LifecycleSettings:
    """Settings handed to the booking services at construction."""

    admin_override_code: str
    check_in_window_minutes: int = 15
    stale_occupancy_grace_minutes: int = 30
    no_show_after_minutes: int = 15
    identifier_scheme: str = IDENTIFIER_EMPLOYEE_ID
    tz: tzinfo = field(default_factory=lambda: fixed_offset(DEFAULT_UTC_OFFSET_HOURS))


class RoomBotConfig(ABC):
    """Abstract configuration contract for all channels / stores."""

    @abstractmethod
    def get_store_backend(self) -> str: pass

    @abstractmethod
    def get_database_url(self) -> str: pass

    @abstractmethod
    def get_admin_override_code(self) -> str: pass

    @abstractmethod
    def get_telegram_bot_token(self) -> Optional[str]: pass

    @abstractmethod
    def create_adapter(self) -> RoomStoreAdapter: pass

    def get_spreadsheet_id(self) -> Optional[str]: return None
    def get_sheets_access_token(self) -> Optional[str]: return None
    def get_rooms_sheet_name(self) -> str: return "rooms"
    def get_bookings_sheet_name(self) -> str: return "bookings"
    def get_sheets_timeout(self) -> int: return 30
    def get_check_in_window_minutes(self) -> int: return 15
    def get_stale_occupancy_grace_minutes(self) -> int: return 30
    def get_no_show_after_minutes(self) -> int: return 15
    def get_identifier_scheme(self) -> str: return IDENTIFIER_EMPLOYEE_ID
    def get_utc_offset_hours(self) -> int: return DEFAULT_UTC_OFFSET_HOURS
    def get_sweep_interval_seconds(self) -> int: return 60

    def get_lifecycle_settings(self) -> LifecycleSettings:
        return LifecycleSettings(
            admin_override_code=self.get_admin_override_code(),
            check_in_window_minutes=self.get_check_in_window_minutes(),
            stale_occupancy_grace_minutes=self.get_stale_occupancy_grace_minutes(),
            no_show_after_minutes=self.get_no_show_after_minutes(),
            identifier_scheme=self.get_identifier_scheme(),
            tz=fixed_offset(self.get_utc_offset_hours()),
        )
