"""Period Ledger - append/close storage of status periods per (entity, period type).

Invariants:
    - At most one open period per (entity, period type): checked under the
      entity row lock, backed by the uq_status_periods_open partial index
    - Periods of one ledger never overlap; history() re-validates what it loads
    - Rows are flushed, never committed here: the caller owns the transaction
    - Instants are normalized to naive UTC on the way in

Design Decisions:
    - SELECT ... FOR UPDATE on the roster_entities row serializes writers per
      entity (ignored by SQLite, where the file lock serializes instead)
    - IntegrityError on flush means a concurrent writer opened the same
      period first: the session is rolled back and the loser gets PeriodClashError
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ringside.core.domain_types import (
    EntityId,
    PeriodType,
    capability_for_period,
    supports,
)
from ringside.core.errors import (
    ErrorContext,
    InvalidRangeError,
    InvalidTransitionError,
    LedgerCorruptionError,
    NoOpenPeriodError,
    PeriodClashError,
    ResourceNotFoundError,
    StartDateLockedError,
)
from ringside.core.periods import (
    Period,
    latest_end,
    normalize_instant,
    start_of_day,
    validate_ledger,
)
from ringside.core.repository_protocols import BookingLookup
from ringside.models.entity import RosterEntity
from ringside.models.period import StatusPeriod
from ringside.services.booking_conflicts import BookingConflictChecker

logger = logging.getLogger(__name__)

# Period types whose start pins the start of the listed ledger.
DEPENDENT_PERIODS: dict[PeriodType, tuple[PeriodType, ...]] = {
    PeriodType.EMPLOYMENT: (
        PeriodType.INJURY, PeriodType.SUSPENSION, PeriodType.RETIREMENT,
    ),
    PeriodType.ACTIVATION: (PeriodType.RETIREMENT,),
}


def _context(
    entity_id: EntityId, period_type: PeriodType, action: str | None = None,
) -> ErrorContext:
    return ErrorContext(
        entity_id=str(entity_id), period_type=period_type.value, action=action,
    )


class PeriodLedger:
    """Persistent ledger operations over the status_periods table."""

    def __init__(self, db: Session, bookings: BookingLookup | None = None):
        self.db = db
        self.bookings = bookings if bookings is not None else BookingConflictChecker(db)

    # ─── Reads ──────────────────────────────────────────────────

    def lock_entity(self, entity_id: EntityId) -> RosterEntity:
        entity = self.db.scalars(
            select(RosterEntity)
            .where(RosterEntity.id == entity_id)
            .with_for_update()
        ).one_or_none()
        if entity is None:
            raise ResourceNotFoundError("RosterEntity", str(entity_id))
        return entity

    def _rows(self, entity_id: EntityId, period_type: PeriodType) -> list[StatusPeriod]:
        return list(self.db.scalars(
            select(StatusPeriod)
            .where(StatusPeriod.entity_id == entity_id)
            .where(StatusPeriod.period_type == period_type)
            .order_by(StatusPeriod.started_at)
        ))

    def _open_row(
        self, entity_id: EntityId, period_type: PeriodType,
    ) -> StatusPeriod | None:
        open_rows = [
            row for row in self._rows(entity_id, period_type)
            if row.ended_at is None
        ]
        if len(open_rows) > 1:
            raise LedgerCorruptionError(
                f"{len(open_rows)} open {period_type.value} periods",
                _context(entity_id, period_type),
            )
        return open_rows[0] if open_rows else None

    def history(self, entity_id: EntityId, period_type: PeriodType) -> tuple[Period, ...]:
        """All periods of the ledger, oldest first."""
        return validate_ledger(
            (row.to_period() for row in self._rows(entity_id, period_type)),
            _context(entity_id, period_type),
        )

    def current_period(
        self, entity_id: EntityId, period_type: PeriodType,
    ) -> Period | None:
        row = self._open_row(entity_id, period_type)
        return row.to_period() if row is not None else None

    def period_at(
        self, entity_id: EntityId, period_type: PeriodType, instant: datetime,
    ) -> Period | None:
        instant = normalize_instant(instant)
        covering = [
            p for p in self.history(entity_id, period_type) if p.covers(instant)
        ]
        if len(covering) > 1:
            raise LedgerCorruptionError(
                f"{len(covering)} {period_type.value} periods cover {instant.isoformat()}",
                _context(entity_id, period_type),
            )
        return covering[0] if covering else None

    # ─── Writes ─────────────────────────────────────────────────

    def open_period(
        self, entity_id: EntityId, period_type: PeriodType, started_at: datetime,
    ) -> Period:
        started_at = normalize_instant(started_at)
        context = _context(entity_id, period_type, "open")
        entity = self.lock_entity(entity_id)
        if not supports(entity.kind, capability_for_period(period_type)):
            raise InvalidTransitionError(
                f"open {period_type.value} period", entity.kind.value, context,
            )

        if self._open_row(entity_id, period_type) is not None:
            raise PeriodClashError(period_type.value, context)

        previous_end = latest_end(self.history(entity_id, period_type))
        if previous_end is not None and started_at < previous_end:
            raise InvalidRangeError(
                started_at, previous_end, "overlaps an earlier period", context,
            )

        row = StatusPeriod(
            entity_id=entity_id, period_type=period_type, started_at=started_at,
        )
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                f"Concurrent open of {period_type.value} lost the race",
                extra={"entity_id": entity_id, "period_type": period_type,
                       "error_code": "PERIOD_CLASH"},
            )
            raise PeriodClashError(period_type.value, context) from e

        logger.info(
            f"Opened {period_type.value} period at {started_at.isoformat()}",
            extra={"entity_id": entity_id, "period_type": period_type},
        )
        return row.to_period()

    def close_period(
        self, entity_id: EntityId, period_type: PeriodType, ended_at: datetime,
    ) -> Period:
        ended_at = normalize_instant(ended_at)
        context = _context(entity_id, period_type, "close")
        self.lock_entity(entity_id)

        row = self._open_row(entity_id, period_type)
        if row is None:
            raise NoOpenPeriodError(period_type.value, context)
        if ended_at < row.started_at:
            raise InvalidRangeError(row.started_at, ended_at, context=context)

        row.ended_at = ended_at
        self.db.flush()
        logger.info(
            f"Closed {period_type.value} period at {ended_at.isoformat()}",
            extra={"entity_id": entity_id, "period_type": period_type},
        )
        return row.to_period()

    def reschedule_start(
        self,
        entity_id: EntityId,
        period_type: PeriodType,
        new_start: datetime,
        bookings: BookingLookup | None = None,
    ) -> Period:
        """Move the start of the open period.

        Moving earlier only has to clear the previous period. Moving later
        is refused when a booking day, or a dependent period, falls between
        the old and the new start. bookings overrides the ledger's own
        booking lookup for this call.
        """
        new_start = normalize_instant(new_start)
        context = _context(entity_id, period_type, "reschedule")
        if bookings is None:
            bookings = self.bookings
        self.lock_entity(entity_id)

        row = self._open_row(entity_id, period_type)
        if row is None:
            raise NoOpenPeriodError(period_type.value, context)
        old_start = row.started_at

        previous_end = latest_end(
            p for p in self.history(entity_id, period_type) if not p.is_open
        )
        if previous_end is not None and new_start < previous_end:
            raise InvalidRangeError(
                new_start, previous_end, "overlaps the previous period", context,
            )

        if new_start > old_start:
            self._ensure_window_clear(
                entity_id, period_type, old_start, new_start, bookings, context,
            )

        row.started_at = new_start
        self.db.flush()
        logger.info(
            f"Rescheduled {period_type.value} start "
            f"{old_start.isoformat()} -> {new_start.isoformat()}",
            extra={"entity_id": entity_id, "period_type": period_type},
        )
        return row.to_period()

    def _ensure_window_clear(
        self,
        entity_id: EntityId,
        period_type: PeriodType,
        old_start: datetime,
        new_start: datetime,
        bookings: BookingLookup,
        context: ErrorContext,
    ) -> None:
        stranded = sorted(
            day for day in bookings.booked_dates(
                entity_id, old_start.date(), new_start.date(),
            )
            if start_of_day(day) < new_start
        )
        if stranded:
            raise StartDateLockedError(
                "booking", start_of_day(stranded[0]), context,
            )

        for dependent in DEPENDENT_PERIODS.get(period_type, ()):
            for period in self.history(entity_id, dependent):
                if old_start <= period.started_at < new_start:
                    raise StartDateLockedError(
                        f"{dependent.value} period", period.started_at, context,
                    )
