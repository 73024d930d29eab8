"""Argument schemas for the structured tools."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class CreateBookingInput(BaseModel):
    room_id: str = Field(description="Room id, e.g. 'R1'")
    title: str = Field(description="Meeting title")
    booker_name: str = Field(description="Name of the person booking")
    booker_id: str = Field(description="Booker's 7-digit employee number")
    date: str = Field(description="Booking date (YYYY-MM-DD)")
    start_time: str = Field(description="Start time (HH:MM, 24-hour)")
    end_time: str = Field(description="End time (HH:MM, 24-hour)")
    purpose: Optional[str] = Field(default="", description="Free-text purpose")
    participants: int = Field(default=1, description="Number of participants (whole number)")


class ExtendBookingInput(BaseModel):
    booking_id: str = Field(description="Booking id")
    booker_id: str = Field(description="Booker's employee number or the admin code")
    extend_minutes: int = Field(default=30, description="30 or 60")


class BulkCreateInput(BaseModel):
    dates: List[str] = Field(description="Dates to book (YYYY-MM-DD)")
    room_id: str = Field(description="Room id")
    title: str = Field(description="Meeting title")
    booker_name: str = Field(description="Name of the person booking")
    booker_id: str = Field(description="Booker's 7-digit employee number")
    start_time: str = Field(description="Start time (HH:MM)")
    end_time: str = Field(description="End time (HH:MM)")
    purpose: Optional[str] = Field(default="", description="Free-text purpose")
    participants: int = Field(default=1, description="Number of participants")
