"""Availability Evaluator - bookable / available rules per kind (pure).

Invariants:
    - Every rule is a Predicate built from status_rules.status_is, so the
      SQL backend compiles exactly what these functions evaluate
    - available_on(day) checks bookability at the start of day, then the
      booking conflict for that day
    - No side effects
"""

from datetime import date, datetime
from functools import lru_cache

from ringside.core.composite import stable_quorum
from ringside.core.domain_types import (
    ActivationStatus,
    EmploymentStatus,
    EntityKind,
    is_employable,
)
from ringside.core.periods import start_of_day
from ringside.core.predicates import BookedOn, Predicate, evaluate
from ringside.core.snapshot import EntitySnapshot
from ringside.core.status_rules import status_is


# ─── Rules ──────────────────────────────────────────────────────

@lru_cache(maxsize=None)
def available_rule(kind: EntityKind) -> Predicate:
    if is_employable(kind):
        return status_is(kind, EmploymentStatus.EMPLOYED)
    active = status_is(kind, ActivationStatus.ACTIVE)
    if kind is EntityKind.STABLE:
        return active & stable_quorum()
    return active


@lru_cache(maxsize=None)
def bookable_rule(kind: EntityKind) -> Predicate:
    """Employed for employable kinds; activatable kinds fall back to available."""
    if is_employable(kind):
        return status_is(kind, EmploymentStatus.EMPLOYED)
    return available_rule(kind)


def unavailable_rule(kind: EntityKind) -> Predicate:
    return ~available_rule(kind)


def not_booked_rule(day: date) -> Predicate:
    return ~BookedOn(day)


def available_on_rule(kind: EntityKind, day: date) -> Predicate:
    """Evaluate at start_of_day(day)."""
    return bookable_rule(kind) & not_booked_rule(day)


# ─── Snapshot Checks ────────────────────────────────────────────

def bookable(snapshot: EntitySnapshot, as_of: datetime) -> bool:
    return evaluate(bookable_rule(snapshot.kind), snapshot, as_of)


def available(snapshot: EntitySnapshot, as_of: datetime) -> bool:
    return evaluate(available_rule(snapshot.kind), snapshot, as_of)


def unavailable(snapshot: EntitySnapshot, as_of: datetime) -> bool:
    return evaluate(unavailable_rule(snapshot.kind), snapshot, as_of)


def not_booked_on(snapshot: EntitySnapshot, day: date) -> bool:
    return evaluate(not_booked_rule(day), snapshot, start_of_day(day))


def available_on(snapshot: EntitySnapshot, day: date) -> bool:
    return evaluate(available_on_rule(snapshot.kind, day), snapshot, start_of_day(day))
