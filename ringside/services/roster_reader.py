"""Roster Reader - loads entity snapshots (ledgers, members, bookings) from the store.

Invariants:
    - One load() reads inside one session, so a snapshot never mixes two
      committed states
    - Every ledger is passed through validate_ledger: corrupted history
      raises LedgerCorruptionError here and is never hidden
    - Member snapshots are loaded recursively with full membership history;
      which members are current is decided at evaluation time
"""

from collections import defaultdict

from sqlalchemy import select
from sqlalchemy.orm import Session

from ringside.core.domain_types import EntityId, PeriodType
from ringside.core.errors import ErrorContext, ResourceNotFoundError
from ringside.core.periods import Period, validate_ledger
from ringside.core.snapshot import EntitySnapshot, MemberLink
from ringside.models.entity import RosterEntity
from ringside.models.membership import Membership
from ringside.models.period import StatusPeriod
from ringside.services.booking_conflicts import BookingConflictChecker


class RosterReader:
    """Implements core.repository_protocols.SnapshotSource."""

    def __init__(self, db: Session):
        self.db = db
        self.bookings = BookingConflictChecker(db)

    def get_entity(self, entity_id: EntityId) -> RosterEntity:
        entity = self.db.get(RosterEntity, entity_id)
        if entity is None:
            raise ResourceNotFoundError("RosterEntity", str(entity_id))
        return entity

    def load(self, entity_id: EntityId) -> EntitySnapshot:
        return self._build(self.get_entity(entity_id), {})

    def _build(
        self, entity: RosterEntity, loaded: dict[EntityId, EntitySnapshot],
    ) -> EntitySnapshot:
        if entity.id in loaded:
            return loaded[entity.id]

        context = ErrorContext(entity_id=str(entity.id), entity_kind=entity.kind.value)
        grouped: dict[PeriodType, list[Period]] = defaultdict(list)
        for row in self.db.scalars(
            select(StatusPeriod).where(StatusPeriod.entity_id == entity.id)
        ):
            grouped[row.period_type].append(row.to_period())
        periods = {
            ptype: validate_ledger(rows, context) for ptype, rows in grouped.items()
        }

        membership_rows = self.db.scalars(
            select(Membership)
            .where(Membership.composite_id == entity.id)
            .order_by(Membership.joined_at)
        ).all()
        members = tuple(
            MemberLink(
                member=self._build(self.get_entity(row.member_id), loaded),
                joined_at=row.joined_at,
                left_at=row.left_at,
            )
            for row in membership_rows
        )

        snapshot = EntitySnapshot(
            entity_id=entity.id,
            kind=entity.kind,
            periods=periods,
            members=members,
            booking_dates=self.bookings.booked_dates(entity.id),
        )
        loaded[entity.id] = snapshot
        return snapshot
