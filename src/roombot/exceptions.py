"""Custom exceptions for RoomBot."""
from __future__ import annotations


class RoomBotError(Exception):
    """Base exception for all RoomBot errors."""
    pass


class ConfigurationError(RoomBotError):
    """Raised when configuration is invalid or missing."""
    pass


class StoreUnavailableError(RoomBotError):
    """Raised when the record store (SQLite file, spreadsheet API) cannot be reached or fails."""
    pass


class ChannelError(RoomBotError):
    """Raised when channel (Telegram) operations fail."""
    pass


class BookingError(RoomBotError):
    """Base class for booking domain errors. `status_code` is the HTTP-equivalent outcome."""
    status_code = 400


class ValidationError(BookingError):
    """Raised when input is missing or malformed."""
    status_code = 400


class NotFoundError(BookingError):
    """Raised when a room or booking does not exist."""
    status_code = 404


class ConflictError(BookingError):
    """Raised when the requested time overlaps an active booking."""
    status_code = 409


class AuthorizationError(BookingError):
    """Raised when the requesting identifier is neither the booker's nor the override code."""
    status_code = 403


class TooEarlyError(BookingError):
    status_code = 400


class AlreadyCheckedInError(BookingError):
    status_code = 409


class NotCheckedInError(BookingError):
    status_code = 409


class AlreadyCheckedOutError(BookingError):
    status_code = 409
