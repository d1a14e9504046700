"""Periods - immutable time-bounded intervals and ledger invariants.

Invariants:
    - Intervals are half-open: [started_at, ended_at)
    - ended_at is None means open; ended_at >= started_at when present
    - validate_ledger rejects >1 open period or any overlap (fatal, not recoverable)
    - Instants are naive UTC; normalize_instant converts aware values

Design Decisions:
    - Frozen dataclass: a snapshot's ledgers can be shared freely between
      the resolver and the predicate evaluator
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Iterable

from ringside.core.domain_types import PeriodType
from ringside.core.errors import ErrorContext, LedgerCorruptionError


def normalize_instant(instant: datetime) -> datetime:
    """Aware -> naive UTC. Naive values are taken as UTC already."""
    if instant.tzinfo is not None:
        return instant.astimezone(timezone.utc).replace(tzinfo=None)
    return instant


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


@dataclass(frozen=True)
class Period:
    """One occurrence of a status-affecting condition."""
    period_type: PeriodType
    started_at: datetime
    ended_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.ended_at is None

    def covers(self, instant: datetime) -> bool:
        return self.started_at <= instant and (
            self.ended_at is None or instant < self.ended_at
        )

    def starts_after(self, instant: datetime) -> bool:
        return self.started_at > instant

    def ended_by(self, instant: datetime) -> bool:
        return self.ended_at is not None and self.ended_at <= instant

    def overlaps_range(self, start: datetime, end: datetime) -> bool:
        """True if the period shares any instant with [start, end]."""
        return self.started_at <= end and (
            self.ended_at is None or self.ended_at > start
        )

    def overlaps(self, other: "Period") -> bool:
        self_end = self.ended_at
        other_end = other.ended_at
        return (self_end is None or other.started_at < self_end) and (
            other_end is None or self.started_at < other_end
        )


def validate_ledger(
    periods: Iterable[Period], context: ErrorContext | None = None,
) -> tuple[Period, ...]:
    """Sort by start and check the ledger invariants. Returns the sorted tuple."""
    ordered = tuple(sorted(periods, key=lambda p: p.started_at))
    open_count = sum(1 for p in ordered if p.is_open)
    if open_count > 1:
        raise LedgerCorruptionError(
            f"{open_count} open periods in one ledger", context,
        )
    for period in ordered:
        if period.ended_at is not None and period.ended_at < period.started_at:
            raise LedgerCorruptionError(
                f"Period ends before it starts ({period.started_at.isoformat()})",
                context,
            )
    for earlier, later in zip(ordered, ordered[1:]):
        if earlier.overlaps(later):
            raise LedgerCorruptionError(
                f"Overlapping periods at {later.started_at.isoformat()}",
                context,
            )
    return ordered


def latest_end(periods: Iterable[Period]) -> datetime | None:
    ends = [p.ended_at for p in periods if p.ended_at is not None]
    return max(ends) if ends else None
