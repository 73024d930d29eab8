"""RoomBot Core - meeting room booking with check-in and occupancy tracking"""

__version__ = "0.1.0"

# Core abstractions
from .base_config import LifecycleSettings, RoomBotConfig

# Exceptions
from .exceptions import (
    RoomBotError,
    ConfigurationError,
    StoreUnavailableError,
    ChannelError,
    BookingError,
    ValidationError,
    NotFoundError,
    ConflictError,
    AuthorizationError,
    TooEarlyError,
    AlreadyCheckedInError,
    NotCheckedInError,
    AlreadyCheckedOutError,
)

# Config management
from .config import get_config, set_config

# Adapters
from .adapters.base import RoomStoreAdapter
from .adapters.sqlite_adapter import SQLiteRoomAdapter
from .adapters.sheets_adapter import GoogleSheetsAdapter

# Tools
from .tools import get_adapter, set_adapter

__all__ = [
    # Version
    "__version__",

    # Core
    "LifecycleSettings",
    "RoomBotConfig",

    # Exceptions
    "RoomBotError",
    "ConfigurationError",
    "StoreUnavailableError",
    "ChannelError",
    "BookingError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "AuthorizationError",
    "TooEarlyError",
    "AlreadyCheckedInError",
    "NotCheckedInError",
    "AlreadyCheckedOutError",

    # Config
    "get_config",
    "set_config",

    # Adapters
    "RoomStoreAdapter",
    "SQLiteRoomAdapter",
    "GoogleSheetsAdapter",

    # Tool Utilities
    "get_adapter",
    "set_adapter",
]
