from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from roombot.exceptions import BookingError
from roombot.services.reservation_service import ReservationService
from roombot.timeutils import DATE_FORMAT

logger = logging.getLogger(__name__)


class OccupancySweeper:
    """
    Periodic driver for unattended transitions. It holds no timers itself;
    the caller decides how often `sweep` runs and it acts through the same
    service entry points a person would use.
    """

    def __init__(self, reservation_service: ReservationService):
        self.reservations = reservation_service
        self.settings = reservation_service.settings

    def sweep(self, now: Optional[datetime] = None) -> Dict[str, List[str]]:
        """Auto-checks-out overrun bookings and marks expired ones as no-shows."""
        now = (now or self.reservations.clock()).astimezone(self.settings.tz)
        today = now.strftime(DATE_FORMAT)
        no_show_delay = timedelta(minutes=self.settings.no_show_after_minutes)

        checked_out: List[str] = []
        no_shows: List[str] = []

        for booking in self.reservations.list_bookings(date=today):
            if not booking.is_active():
                continue
            try:
                if booking.is_occupying() and now >= booking.scheduled_end(self.settings.tz):
                    if self.reservations.auto_check_out(booking.id):
                        checked_out.append(booking.id)
                elif (
                    booking.is_confirmed()
                    and not booking.is_checked_in
                    and not booking.is_no_show
                    and now >= booking.scheduled_start(self.settings.tz) + no_show_delay
                ):
                    self.reservations.mark_no_show(booking.id)
                    no_shows.append(booking.id)
            except BookingError as e:
                logger.warning(f"Sweep skipped booking {booking.id}: {e}")
            except ValueError as e:
                logger.warning(f"Sweep skipped booking {booking.id} with unreadable times: {e}")

        if checked_out or no_shows:
            logger.info(f"Sweep at {now.isoformat()}: {len(checked_out)} auto checkouts, {len(no_shows)} no-shows")
        return {"checked_out": checked_out, "no_shows": no_shows}
