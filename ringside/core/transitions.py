"""Transition Rules - which action is allowed from which status, and what it writes.

Invariants:
    - All functions are PURE: they read snapshots and return planned changes
    - plan_transition() validates capability and status before planning anything
    - Closes are planned before opens, so an unretire or re-employ at one
      instant never holds two open periods of a type
    - Planned changes are applied by services/roster_actions.py in order

Design Decisions:
    - Table-driven allowed statuses: one row per (action, family) instead of
      a validator class per action
    - Cascades stay in the service layer; this module plans a single entity
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from ringside.core.domain_types import (
    ActivationStatus,
    Capability,
    EmploymentStatus,
    EntityId,
    EntityKind,
    PeriodType,
    RosterAction,
    Status,
    is_employable,
    supports,
)
from ringside.core.errors import ErrorContext, InvalidTransitionError, NoOpenPeriodError
from ringside.core.snapshot import EntitySnapshot
from ringside.core.status_rules import resolve


@dataclass(frozen=True)
class LedgerChange:
    """One planned open or close on one entity's ledger."""
    entity_id: EntityId
    kind: EntityKind
    period_type: PeriodType
    operation: Literal["open", "close"]
    at: datetime


@dataclass(frozen=True)
class MembershipEnd:
    composite_id: EntityId
    member_id: EntityId
    at: datetime


ACTION_CAPABILITY: dict[RosterAction, Capability] = {
    RosterAction.EMPLOY: Capability.EMPLOYABLE,
    RosterAction.RELEASE: Capability.EMPLOYABLE,
    RosterAction.SUSPEND: Capability.SUSPENDABLE,
    RosterAction.REINSTATE: Capability.SUSPENDABLE,
    RosterAction.INJURE: Capability.INJURABLE,
    RosterAction.HEAL: Capability.INJURABLE,
    RosterAction.RETIRE: Capability.RETIRABLE,
    RosterAction.UNRETIRE: Capability.RETIRABLE,
    RosterAction.ACTIVATE: Capability.ACTIVATABLE,
    RosterAction.DEACTIVATE: Capability.ACTIVATABLE,
}

_E = EmploymentStatus
_A = ActivationStatus

EMPLOYABLE_ALLOWED: dict[RosterAction, frozenset[Status]] = {
    RosterAction.EMPLOY: frozenset({_E.UNEMPLOYED, _E.RELEASED}),
    RosterAction.RELEASE: frozenset({_E.EMPLOYED, _E.UNBOOKABLE, _E.SUSPENDED, _E.INJURED}),
    RosterAction.SUSPEND: frozenset({_E.EMPLOYED, _E.UNBOOKABLE}),
    RosterAction.REINSTATE: frozenset({_E.SUSPENDED}),
    RosterAction.INJURE: frozenset({_E.EMPLOYED}),
    RosterAction.HEAL: frozenset({_E.INJURED}),
    RosterAction.RETIRE: frozenset({
        _E.EMPLOYED, _E.UNBOOKABLE, _E.SUSPENDED, _E.INJURED, _E.RELEASED,
    }),
    RosterAction.UNRETIRE: frozenset({_E.RETIRED}),
}

ACTIVATABLE_ALLOWED: dict[RosterAction, frozenset[Status]] = {
    RosterAction.RETIRE: frozenset({_A.ACTIVE, _A.INACTIVE}),
    RosterAction.UNRETIRE: frozenset({_A.RETIRED}),
    RosterAction.ACTIVATE: frozenset({_A.UNACTIVATED, _A.INACTIVE}),
    RosterAction.DEACTIVATE: frozenset({_A.ACTIVE}),
}

# Periods an action ends when they are open, before its own change.
_CLOSES_FIRST: dict[RosterAction, tuple[PeriodType, ...]] = {
    RosterAction.RELEASE: (PeriodType.SUSPENSION, PeriodType.INJURY),
    RosterAction.RETIRE: (
        PeriodType.SUSPENSION, PeriodType.INJURY,
        PeriodType.EMPLOYMENT, PeriodType.ACTIVATION,
    ),
}

_OPENS: dict[RosterAction, PeriodType] = {
    RosterAction.EMPLOY: PeriodType.EMPLOYMENT,
    RosterAction.SUSPEND: PeriodType.SUSPENSION,
    RosterAction.INJURE: PeriodType.INJURY,
    RosterAction.RETIRE: PeriodType.RETIREMENT,
    RosterAction.ACTIVATE: PeriodType.ACTIVATION,
}

_CLOSES: dict[RosterAction, PeriodType] = {
    RosterAction.RELEASE: PeriodType.EMPLOYMENT,
    RosterAction.REINSTATE: PeriodType.SUSPENSION,
    RosterAction.HEAL: PeriodType.INJURY,
    RosterAction.UNRETIRE: PeriodType.RETIREMENT,
    RosterAction.DEACTIVATE: PeriodType.ACTIVATION,
}


def allowed_from(action: RosterAction, kind: EntityKind) -> frozenset[Status]:
    table = EMPLOYABLE_ALLOWED if is_employable(kind) else ACTIVATABLE_ALLOWED
    return table.get(action, frozenset())


def ensure_allowed(
    snapshot: EntitySnapshot, action: RosterAction, at: datetime,
) -> Status:
    """Rule: the kind has the action's capability and the status permits it.

    Returns the resolved status so callers don't resolve twice.
    """
    context = ErrorContext(
        entity_id=str(snapshot.entity_id),
        entity_kind=snapshot.kind.value,
        action=action.value,
    )
    status = resolve(snapshot, at)
    if not supports(snapshot.kind, ACTION_CAPABILITY[action]):
        raise InvalidTransitionError(action.value, status.value, context)
    if status not in allowed_from(action, snapshot.kind):
        raise InvalidTransitionError(action.value, status.value, context)
    return status


def plan_transition(
    snapshot: EntitySnapshot, action: RosterAction, at: datetime,
) -> tuple[LedgerChange, ...]:
    """Validate action for snapshot at `at` and return its ledger changes."""
    ensure_allowed(snapshot, action, at)

    def change(ptype: PeriodType, operation: str) -> LedgerChange:
        return LedgerChange(snapshot.entity_id, snapshot.kind, ptype, operation, at)

    changes: list[LedgerChange] = [
        change(ptype, "close")
        for ptype in _CLOSES_FIRST.get(action, ())
        if snapshot.current_period(ptype) is not None
    ]

    closing = _CLOSES.get(action)
    if closing is not None:
        if snapshot.current_period(closing) is None:
            raise NoOpenPeriodError(
                closing.value,
                ErrorContext(
                    entity_id=str(snapshot.entity_id),
                    entity_kind=snapshot.kind.value,
                    period_type=closing.value,
                    action=action.value,
                ),
            )
        changes.append(change(closing, "close"))

    if action is RosterAction.UNRETIRE:
        reopened = (
            PeriodType.EMPLOYMENT if is_employable(snapshot.kind)
            else PeriodType.ACTIVATION
        )
        changes.append(change(reopened, "open"))

    opening = _OPENS.get(action)
    if opening is not None:
        changes.append(change(opening, "open"))

    return tuple(changes)
