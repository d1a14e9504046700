"""Roster Actions - action handlers with atomic cross-entity cascades.

Invariants:
    - One action == one transaction: every affected entity is loaded and
      validated before the first write, and any error rolls back everything
    - Status is never written; actions only open/close periods and end memberships
    - Tag team employ requires exactly TAG_TEAM_SIZE current members and employs
      the members that are not yet employed
    - Retiring a stable retires every current member (tag teams with their
      wrestlers, wrestlers, managers); if one member cannot retire, nothing is written
    - Retiring anything else ends its own current memberships

Design Decisions:
    - Arena style (collect, validate, plan, apply, commit) over model hooks:
      a cascade is a visible list of LedgerChange / MembershipEnd values
    - Plans are applied through capability objects, so a kind that lacks a
      capability fails even if a plan were built by hand
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ringside.core.composite import ensure_has_members, ensure_tag_team_complete
from ringside.core.domain_types import (
    EmploymentStatus,
    EntityId,
    EntityKind,
    RosterAction,
    capability_for_period,
)
from ringside.core.errors import ErrorContext, RosterError
from ringside.core.periods import normalize_instant, utc_now
from ringside.core.snapshot import EntitySnapshot
from ringside.core.status_rules import resolve
from ringside.core.transitions import LedgerChange, MembershipEnd, plan_transition
from ringside.models.entity import RosterEntity
from ringside.services.capabilities import capability_for
from ringside.services.membership_ledger import MembershipLedger
from ringside.services.period_ledger import PeriodLedger
from ringside.services.roster_reader import RosterReader

logger = logging.getLogger(__name__)


@dataclass
class ActionPlan:
    """Everything one action will write, in order."""
    changes: list[LedgerChange] = field(default_factory=list)
    membership_ends: list[MembershipEnd] = field(default_factory=list)

    def end_membership(self, end: MembershipEnd) -> None:
        if end not in self.membership_ends:
            self.membership_ends.append(end)


class RosterActions:
    """Entry point for action handlers: employ, release, suspend, ... remove_member."""

    def __init__(self, db: Session):
        self.db = db
        self.ledger = PeriodLedger(db)
        self.memberships = MembershipLedger(db)
        self.reader = RosterReader(db)

    # ─── Actions ────────────────────────────────────────────────

    def employ(self, entity_id: EntityId, at: datetime | None = None) -> RosterEntity:
        return self._run(RosterAction.EMPLOY, entity_id, at)

    def release(self, entity_id: EntityId, at: datetime | None = None) -> RosterEntity:
        return self._run(RosterAction.RELEASE, entity_id, at)

    def suspend(self, entity_id: EntityId, at: datetime | None = None) -> RosterEntity:
        return self._run(RosterAction.SUSPEND, entity_id, at)

    def reinstate(self, entity_id: EntityId, at: datetime | None = None) -> RosterEntity:
        return self._run(RosterAction.REINSTATE, entity_id, at)

    def injure(self, entity_id: EntityId, at: datetime | None = None) -> RosterEntity:
        return self._run(RosterAction.INJURE, entity_id, at)

    def heal(self, entity_id: EntityId, at: datetime | None = None) -> RosterEntity:
        return self._run(RosterAction.HEAL, entity_id, at)

    def retire(self, entity_id: EntityId, at: datetime | None = None) -> RosterEntity:
        return self._run(RosterAction.RETIRE, entity_id, at)

    def unretire(self, entity_id: EntityId, at: datetime | None = None) -> RosterEntity:
        return self._run(RosterAction.UNRETIRE, entity_id, at)

    def activate(self, entity_id: EntityId, at: datetime | None = None) -> RosterEntity:
        return self._run(RosterAction.ACTIVATE, entity_id, at)

    def deactivate(self, entity_id: EntityId, at: datetime | None = None) -> RosterEntity:
        return self._run(RosterAction.DEACTIVATE, entity_id, at)

    def add_member(
        self, composite_id: EntityId, member_id: EntityId, at: datetime | None = None,
    ) -> RosterEntity:
        at = normalize_instant(at) if at else utc_now()
        with self._transaction("add_member", composite_id):
            self.memberships.add_member(composite_id, member_id, at)
        return self.reader.get_entity(composite_id)

    def remove_member(
        self, composite_id: EntityId, member_id: EntityId, at: datetime | None = None,
    ) -> RosterEntity:
        at = normalize_instant(at) if at else utc_now()
        with self._transaction("remove_member", composite_id):
            self.memberships.remove_member(composite_id, member_id, at)
        return self.reader.get_entity(composite_id)

    # ─── Orchestration ──────────────────────────────────────────

    @contextmanager
    def _transaction(self, action: str, entity_id: EntityId) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except RosterError as e:
            self.db.rollback()
            logger.log(
                logging.WARNING if e.recoverable else logging.ERROR,
                f"{action} rolled back: {e.message}",
                extra={"entity_id": entity_id, "action": action, "error_code": e.code},
            )
            raise
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def _run(
        self, action: RosterAction, entity_id: EntityId, at: datetime | None,
    ) -> RosterEntity:
        at = normalize_instant(at) if at else utc_now()
        with self._transaction(action.value, entity_id):
            entity = self.ledger.lock_entity(entity_id)
            plan = self.plan(action, self.reader.load(entity_id), at)
            self._apply(plan)
        logger.info(
            f"{action.value} committed: {len(plan.changes)} ledger changes, "
            f"{len(plan.membership_ends)} memberships ended",
            extra={"entity_id": entity_id, "entity_kind": entity.kind,
                   "action": action.value},
        )
        return entity

    def plan(
        self, action: RosterAction, snapshot: EntitySnapshot, at: datetime,
    ) -> ActionPlan:
        """Validate every affected entity and collect the writes. No IO besides reads."""
        plan = ActionPlan(changes=list(plan_transition(snapshot, action, at)))
        context = ErrorContext(
            entity_id=str(snapshot.entity_id),
            entity_kind=snapshot.kind.value,
            action=action.value,
        )
        match (action, snapshot.kind):
            case (RosterAction.EMPLOY, EntityKind.TAG_TEAM):
                ensure_tag_team_complete(snapshot, at, context)
                for member in snapshot.current_members(at):
                    if resolve(member, at) is not EmploymentStatus.EMPLOYED:
                        plan.changes += plan_transition(member, RosterAction.EMPLOY, at)
            case (RosterAction.RELEASE, EntityKind.TAG_TEAM):
                for member in snapshot.current_members(at):
                    plan.end_membership(
                        MembershipEnd(snapshot.entity_id, member.entity_id, at),
                    )
            case (RosterAction.SUSPEND, EntityKind.TAG_TEAM):
                ensure_has_members(snapshot, at, context)
                self._cascade_members(
                    plan, snapshot, at, EmploymentStatus.EMPLOYED, RosterAction.SUSPEND,
                )
            case (RosterAction.REINSTATE, EntityKind.TAG_TEAM):
                self._cascade_members(
                    plan, snapshot, at, EmploymentStatus.SUSPENDED, RosterAction.REINSTATE,
                )
            case (RosterAction.RETIRE, EntityKind.STABLE):
                visited = {snapshot.entity_id}
                for member in snapshot.current_members(at):
                    self._retire_member(plan, member, at, visited)
            case (RosterAction.RETIRE, _):
                self._end_memberships_of(plan, snapshot.entity_id, at)
        return plan

    def _cascade_members(
        self,
        plan: ActionPlan,
        snapshot: EntitySnapshot,
        at: datetime,
        when: EmploymentStatus,
        action: RosterAction,
    ) -> None:
        for member in snapshot.current_members(at):
            if resolve(member, at) is when:
                plan.changes += plan_transition(member, action, at)

    def _retire_member(
        self,
        plan: ActionPlan,
        member: EntitySnapshot,
        at: datetime,
        visited: set[EntityId],
    ) -> None:
        if member.entity_id in visited:
            return
        visited.add(member.entity_id)
        plan.changes += plan_transition(member, RosterAction.RETIRE, at)
        self._end_memberships_of(plan, member.entity_id, at)
        if member.kind is EntityKind.TAG_TEAM:
            for wrestler in member.current_members(at):
                self._retire_member(plan, wrestler, at, visited)

    def _end_memberships_of(
        self, plan: ActionPlan, member_id: EntityId, at: datetime,
    ) -> None:
        for row in self.memberships.current_composites(member_id):
            plan.end_membership(MembershipEnd(row.composite_id, member_id, at))

    def _apply(self, plan: ActionPlan) -> None:
        for change in plan.changes:
            entity = self.reader.get_entity(change.entity_id)
            capability = capability_for(
                self.ledger, entity, capability_for_period(change.period_type),
            )
            if change.operation == "open":
                capability.open(change.at)
            else:
                capability.close(change.at)
        for end in plan.membership_ends:
            self.memberships.remove_member(end.composite_id, end.member_id, end.at)
