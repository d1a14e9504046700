"""BookingRecord ORM - an entity's assignment to a match on a date.

Invariants:
    - Written by the match subsystem; the engine only reads it
    - booked_on is a calendar date, not an instant
"""

import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ringside.db.base import Base


class BookingRecord(Base):
    __tablename__ = "booking_records"
    __table_args__ = (
        Index("ix_booking_records_entity_day", "entity_id", "booked_on"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    entity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("roster_entities.id"), nullable=False,
    )
    match_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    booked_on: Mapped[date] = mapped_column(Date, nullable=False)

    entity: Mapped["RosterEntity"] = relationship(
        "RosterEntity", back_populates="bookings",
    )
