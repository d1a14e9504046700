"""Status Service - single-entity status and availability checks over the store.

Invariants:
    - Every answer is computed from a freshly loaded snapshot (no caching
      across calls), with the same rules RosterQueries compiles to SQL
    - Read-only: no locks taken, no writes
"""

from datetime import date, datetime

from sqlalchemy.orm import Session

from ringside.core import availability
from ringside.core.domain_types import EntityId, Status
from ringside.core.periods import normalize_instant, utc_now
from ringside.core.repository_protocols import SnapshotSource
from ringside.core.status_rules import resolve
from ringside.services.roster_reader import RosterReader


class StatusService:
    def __init__(self, db: Session, snapshots: SnapshotSource | None = None):
        self.snapshots = snapshots or RosterReader(db)

    @staticmethod
    def _instant(as_of: datetime | None) -> datetime:
        return normalize_instant(as_of) if as_of else utc_now()

    def resolve(self, entity_id: EntityId, as_of: datetime | None = None) -> Status:
        return resolve(self.snapshots.load(entity_id), self._instant(as_of))

    def bookable(self, entity_id: EntityId, as_of: datetime | None = None) -> bool:
        return availability.bookable(self.snapshots.load(entity_id), self._instant(as_of))

    def available(self, entity_id: EntityId, as_of: datetime | None = None) -> bool:
        return availability.available(self.snapshots.load(entity_id), self._instant(as_of))

    def unavailable(self, entity_id: EntityId, as_of: datetime | None = None) -> bool:
        return availability.unavailable(
            self.snapshots.load(entity_id), self._instant(as_of),
        )

    def available_on(self, entity_id: EntityId, day: date) -> bool:
        return availability.available_on(self.snapshots.load(entity_id), day)

    def not_booked_on(self, entity_id: EntityId, day: date) -> bool:
        return availability.not_booked_on(self.snapshots.load(entity_id), day)
