"""RosterEntity ORM - one wrestler, tag team, manager, referee, stable or title.

Invariants:
    - kind is fixed at creation; it decides which ledgers apply
    - No status column: status is derived from the ledgers on every read
    - Its row is the lock target that serializes ledger writes for the entity
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ringside.core.domain_types import EntityKind
from ringside.core.periods import utc_now
from ringside.db.base import Base, value_enum


class RosterEntity(Base):
    """Roster entity - identity plus kind."""
    __tablename__ = "roster_entities"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    kind: Mapped[EntityKind] = mapped_column(
        value_enum(EntityKind), nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now,
    )

    # Relationships
    periods: Mapped[list["StatusPeriod"]] = relationship(
        "StatusPeriod", back_populates="entity",
        order_by="StatusPeriod.started_at",
    )
    bookings: Mapped[list["BookingRecord"]] = relationship(
        "BookingRecord", back_populates="entity",
    )

    def __repr__(self) -> str:
        return f"<RosterEntity {self.kind.value} {self.name!r} {self.id}>"
