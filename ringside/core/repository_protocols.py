"""Boundary Protocols - contracts between core and the store-backed services.

Invariants:
    - Core NEVER imports from services - dependency arrows point inward only
    - Store reads needed by ledger checks go through these Protocol types
    - Implementations live in ringside/services/ and are passed in by callers

Design Decisions:
    - Protocol over ABC: structural subtyping, tests can pass plain fakes
"""

from datetime import date
from typing import Protocol

from ringside.core.domain_types import EntityId
from ringside.core.snapshot import EntitySnapshot


class BookingLookup(Protocol):
    """Contract for the booking store - implemented by BookingConflictChecker."""
    def is_booked_on(self, entity_id: EntityId, day: date) -> bool: ...
    def booked_dates(
        self, entity_id: EntityId, start: date | None = None, end: date | None = None,
    ) -> frozenset[date]: ...


class SnapshotSource(Protocol):
    """Contract for snapshot loading - implemented by RosterReader."""
    def load(self, entity_id: EntityId) -> EntitySnapshot: ...
