"""Booking Conflict Checker - read-only lookups over booking_records.

Invariants:
    - Never writes: bookings belong to the match subsystem
    - Date bounds are inclusive on both ends
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from ringside.core.domain_types import EntityId
from ringside.models.booking import BookingRecord


class BookingConflictChecker:
    """Implements core.repository_protocols.BookingLookup."""

    def __init__(self, db: Session):
        self.db = db

    def is_booked_on(self, entity_id: EntityId, day: date) -> bool:
        return self.db.scalar(
            select(
                select(BookingRecord.id)
                .where(BookingRecord.entity_id == entity_id)
                .where(BookingRecord.booked_on == day)
                .exists()
            )
        )

    def booked_dates(
        self, entity_id: EntityId, start: date | None = None, end: date | None = None,
    ) -> frozenset[date]:
        stmt = (
            select(BookingRecord.booked_on)
            .where(BookingRecord.entity_id == entity_id)
            .distinct()
        )
        if start is not None:
            stmt = stmt.where(BookingRecord.booked_on >= start)
        if end is not None:
            stmt = stmt.where(BookingRecord.booked_on <= end)
        return frozenset(self.db.scalars(stmt))

    def bookings_between(
        self, entity_id: EntityId, start: date, end: date,
    ) -> list[BookingRecord]:
        return list(self.db.scalars(
            select(BookingRecord)
            .where(BookingRecord.entity_id == entity_id)
            .where(BookingRecord.booked_on.between(start, end))
            .order_by(BookingRecord.booked_on)
        ))
