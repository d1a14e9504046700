"""StatusPeriod ORM - one interval in an (entity, period type) ledger.

Invariants:
    - ended_at NULL means open; at most one open row per (entity_id, period_type),
      enforced by the partial unique index uq_status_periods_open
    - ended_at >= started_at (check constraint)
    - Rows are appended and closed, never deleted

Design Decisions:
    - Partial unique index is the backstop for the row lock in PeriodLedger:
      the loser of a race fails on flush and gets PeriodClashError
    - Naive UTC DateTime columns: instants compare the same way in SQLite
      and PostgreSQL
"""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ringside.core.domain_types import PeriodType
from ringside.core.periods import Period
from ringside.db.base import Base, value_enum


class StatusPeriod(Base):
    """Status period - employment, injury, suspension, retirement or activation."""
    __tablename__ = "status_periods"
    __table_args__ = (
        Index(
            "uq_status_periods_open", "entity_id", "period_type",
            unique=True,
            sqlite_where=text("ended_at IS NULL"),
            postgresql_where=text("ended_at IS NULL"),
        ),
        Index("ix_status_periods_lookup", "entity_id", "period_type", "started_at"),
        CheckConstraint(
            "ended_at IS NULL OR ended_at >= started_at",
            name="ck_status_periods_range",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    entity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("roster_entities.id"), nullable=False,
    )
    period_type: Mapped[PeriodType] = mapped_column(
        value_enum(PeriodType), nullable=False,
    )
    started_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    entity: Mapped["RosterEntity"] = relationship(
        "RosterEntity", back_populates="periods",
    )

    def to_period(self) -> Period:
        return Period(self.period_type, self.started_at, self.ended_at)
