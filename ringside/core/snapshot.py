"""Entity Snapshot - one entity's ledgers, memberships and bookings as loaded.

Invariants:
    - A snapshot is immutable and self-contained: evaluating a predicate
      against it never touches the store
    - Member snapshots are full snapshots (their own ledgers), so composite
      status is always derived from the members' current data
    - Membership intervals are half-open like periods: [joined_at, left_at)
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Mapping

from ringside.core.domain_types import EntityId, EntityKind, PeriodType
from ringside.core.periods import Period


@dataclass(frozen=True)
class MemberLink:
    """A membership row joined to the member's snapshot."""
    member: "EntitySnapshot"
    joined_at: datetime
    left_at: datetime | None = None

    def is_current(self, instant: datetime) -> bool:
        return self.joined_at <= instant and (
            self.left_at is None or instant < self.left_at
        )


@dataclass(frozen=True)
class EntitySnapshot:
    entity_id: EntityId
    kind: EntityKind
    periods: Mapping[PeriodType, tuple[Period, ...]] = field(default_factory=dict)
    members: tuple[MemberLink, ...] = ()
    booking_dates: frozenset[date] = frozenset()

    def ledger(self, period_type: PeriodType) -> tuple[Period, ...]:
        return self.periods.get(period_type, ())

    def current_period(self, period_type: PeriodType) -> Period | None:
        for period in self.ledger(period_type):
            if period.is_open:
                return period
        return None

    def period_at(self, period_type: PeriodType, instant: datetime) -> Period | None:
        for period in self.ledger(period_type):
            if period.covers(instant):
                return period
        return None

    def current_members(self, instant: datetime) -> tuple["EntitySnapshot", ...]:
        return tuple(
            link.member for link in self.members if link.is_current(instant)
        )
