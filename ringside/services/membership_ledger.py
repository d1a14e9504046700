"""Membership Ledger - joins and departures for tag teams and stables.

Invariants:
    - Member kinds are checked against composite.MEMBER_KINDS
    - A tag team has at most TAG_TEAM_SIZE current members, and a wrestler
      belongs to at most one current tag team
    - Same one-open / no-overlap rules as the period ledger, per
      (composite, member) pair; uq_memberships_current is the backstop
    - Rows are flushed, never committed here: the caller owns the transaction
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ringside.core.composite import ensure_member_kind, ensure_room_for_member
from ringside.core.domain_types import EntityId, EntityKind
from ringside.core.errors import (
    CompositeMembershipError,
    ErrorContext,
    InvalidRangeError,
    NoOpenPeriodError,
    ResourceNotFoundError,
)
from ringside.core.periods import normalize_instant
from ringside.models.entity import RosterEntity
from ringside.models.membership import Membership

logger = logging.getLogger(__name__)


class MembershipLedger:
    """Persistent membership operations over the memberships table."""

    def __init__(self, db: Session):
        self.db = db

    def _lock(self, entity_id: EntityId) -> RosterEntity:
        entity = self.db.scalars(
            select(RosterEntity)
            .where(RosterEntity.id == entity_id)
            .with_for_update()
        ).one_or_none()
        if entity is None:
            raise ResourceNotFoundError("RosterEntity", str(entity_id))
        return entity

    # ─── Reads ──────────────────────────────────────────────────

    def current_members(self, composite_id: EntityId) -> list[Membership]:
        return list(self.db.scalars(
            select(Membership)
            .where(Membership.composite_id == composite_id)
            .where(Membership.left_at.is_(None))
            .order_by(Membership.joined_at)
        ))

    def current_composites(
        self, member_id: EntityId, composite_kind: EntityKind | None = None,
    ) -> list[Membership]:
        """Open memberships of member_id, optionally only in one composite kind."""
        stmt = (
            select(Membership)
            .where(Membership.member_id == member_id)
            .where(Membership.left_at.is_(None))
        )
        if composite_kind is not None:
            stmt = stmt.join(
                RosterEntity, RosterEntity.id == Membership.composite_id,
            ).where(RosterEntity.kind == composite_kind)
        return list(self.db.scalars(stmt.order_by(Membership.joined_at)))

    def history(self, composite_id: EntityId, member_id: EntityId) -> list[Membership]:
        return list(self.db.scalars(
            select(Membership)
            .where(Membership.composite_id == composite_id)
            .where(Membership.member_id == member_id)
            .order_by(Membership.joined_at)
        ))

    # ─── Writes ─────────────────────────────────────────────────

    def add_member(
        self, composite_id: EntityId, member_id: EntityId, joined_at: datetime,
    ) -> Membership:
        joined_at = normalize_instant(joined_at)
        composite = self._lock(composite_id)
        member = self._lock(member_id)
        context = ErrorContext(
            entity_id=str(composite_id),
            entity_kind=composite.kind.value,
            action="add_member",
        )
        ensure_member_kind(composite.kind, member.kind, context)

        current = self.current_members(composite_id)
        if any(m.member_id == member_id for m in current):
            raise CompositeMembershipError(
                f"{member.name} is already a current member of {composite.name}",
                context,
            )
        ensure_room_for_member(composite.kind, len(current), context)
        if composite.kind is EntityKind.TAG_TEAM and self.current_composites(
            member_id, EntityKind.TAG_TEAM,
        ):
            raise CompositeMembershipError(
                f"{member.name} already belongs to a current tag team", context,
            )

        ends = [m.left_at for m in self.history(composite_id, member_id)]
        last_left = max((e for e in ends if e is not None), default=None)
        if last_left is not None and joined_at < last_left:
            raise InvalidRangeError(
                joined_at, last_left, "overlaps an earlier membership", context,
            )

        row = Membership(
            composite_id=composite_id,
            member_id=member_id,
            member_kind=member.kind,
            joined_at=joined_at,
        )
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            raise CompositeMembershipError(
                f"{member.name} joined {composite.name} concurrently", context,
            ) from e

        logger.info(
            f"{member.kind.value} {member.name} joined {composite.name}",
            extra={"entity_id": composite_id, "entity_kind": composite.kind,
                   "action": "add_member"},
        )
        return row

    def remove_member(
        self, composite_id: EntityId, member_id: EntityId, left_at: datetime,
    ) -> Membership:
        left_at = normalize_instant(left_at)
        composite = self._lock(composite_id)
        context = ErrorContext(
            entity_id=str(composite_id),
            entity_kind=composite.kind.value,
            action="remove_member",
        )
        row = next(
            (m for m in self.current_members(composite_id) if m.member_id == member_id),
            None,
        )
        if row is None:
            raise NoOpenPeriodError("membership", context)
        if left_at < row.joined_at:
            raise InvalidRangeError(row.joined_at, left_at, context=context)

        row.left_at = left_at
        self.db.flush()
        logger.info(
            f"Member {member_id} left {composite.name}",
            extra={"entity_id": composite_id, "entity_kind": composite.kind,
                   "action": "remove_member"},
        )
        return row
