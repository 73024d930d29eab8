"""
Bulk booking operations.

Each item is attempted on its own through the same entry points as a single
request; failures are collected and reported, nothing is rolled back.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from roombot.exceptions import BookingError, ConflictError, StoreUnavailableError, ValidationError
from roombot.models import Booking
from roombot.services.reservation_service import ReservationService
from roombot.timeutils import normalize_time

logger = logging.getLogger(__name__)

BULK_UPDATABLE_FIELDS = ("start_time", "end_time", "title", "purpose", "participants")


@dataclass
class BulkCreateResult:
    created: List[Booking] = field(default_factory=list)
    failed: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0

    @property
    def success(self) -> bool:
        return not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "created": [b.to_dict() for b in self.created],
            "failed": list(self.failed),
            "total": self.total,
            "created_count": len(self.created),
            "failed_count": len(self.failed),
        }


class BulkBookingService:
    """Repeats create / cancel / update over many dates or booking ids."""

    def __init__(self, reservation_service: ReservationService):
        self.reservations = reservation_service
        self.adapter = reservation_service.adapter
        self.conflict_checker = reservation_service.conflict_checker

    def bulk_create(self, dates: Iterable[str], common_fields: Dict[str, Any], suggest: bool = True) -> BulkCreateResult:
        dates = list(dates or [])
        if not dates:
            raise ValidationError("At least one date is required.")

        result = BulkCreateResult(total=len(dates))
        for day in dates:
            request = dict(common_fields, date=day)
            try:
                result.created.append(self.reservations.create_booking(request))
            except ConflictError as e:
                failure: Dict[str, Any] = {"date": day, "error": str(e)}
                if suggest:
                    failure["suggestion"] = self.conflict_checker.suggest_alternative(
                        str(request.get("room_id")), day, request["start_time"], request["end_time"]
                    )
                result.failed.append(failure)
            except (BookingError, StoreUnavailableError) as e:
                result.failed.append({"date": day, "error": str(e)})

        logger.info(f"Bulk create: {len(result.created)} created, {len(result.failed)} failed of {result.total}")
        return result

    def bulk_cancel(self, booking_ids: Iterable[str]) -> Dict[str, Any]:
        outcome: Dict[str, Any] = {"success": 0, "failed": []}
        for booking_id in booking_ids:
            try:
                self.reservations.set_status(booking_id, Booking.STATUS_CANCELLED)
                outcome["success"] += 1
            except (BookingError, StoreUnavailableError) as e:
                logger.warning(f"Bulk cancel failed for {booking_id}: {e}")
                outcome["failed"].append(booking_id)
        return outcome

    def _update_one(self, booking_id: str, fields: Dict[str, Any]) -> None:
        booking = self.reservations.get_booking(booking_id)
        patch = dict(fields)

        if "start_time" in patch or "end_time" in patch:
            start_time = patch.get("start_time", booking.start_time)
            end_time = patch.get("end_time", booking.end_time)
            self.reservations.validate_time_range(start_time, end_time)
            start_time, end_time = normalize_time(start_time), normalize_time(end_time)
            patch.update(start_time=start_time, end_time=end_time)
            if booking.is_active() and self.conflict_checker.has_conflict(
                booking.room_id, booking.date, start_time, end_time, exclude_booking_id=booking.id
            ):
                raise ConflictError(f"New time for {booking_id} overlaps another booking.")

        if "participants" in patch:
            try:
                patch["participants"] = int(patch["participants"])
            except (TypeError, ValueError):
                raise ValidationError("Participants must be a whole number.")
            if patch["participants"] < 1:
                raise ValidationError("Participants must be at least 1.")

        self.reservations.apply_patch(booking_id, patch)

    def bulk_update(self, booking_ids: Iterable[str], fields: Dict[str, Any]) -> Dict[str, Any]:
        unknown = [name for name in fields if name not in BULK_UPDATABLE_FIELDS]
        if unknown:
            raise ValidationError(f"Fields cannot be bulk-updated: {', '.join(unknown)}")
        if not fields:
            raise ValidationError("No fields to update.")

        outcome: Dict[str, Any] = {"success": 0, "failed": []}
        for booking_id in booking_ids:
            try:
                self._update_one(booking_id, fields)
                outcome["success"] += 1
            except (BookingError, StoreUnavailableError) as e:
                logger.warning(f"Bulk update failed for {booking_id}: {e}")
                outcome["failed"].append(booking_id)
        return outcome
