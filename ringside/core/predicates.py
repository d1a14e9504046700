"""Predicate Tree - declarative eligibility rules with an in-memory evaluator.

Invariants:
    - A predicate is data: frozen, hashable, no callbacks
    - evaluate() is the in-memory backend; services/query_compiler.py is the
      SQL backend. Both dispatch on the same node types and nothing else
    - Every node is evaluated at one instant (as_of) except PeriodOverlaps and
      BookedOn, which carry their own range/day

Design Decisions:
    - Closed node set over free-form lambdas: a node the SQL backend cannot
      compile cannot be written
    - Comparison names map to operator functions that work on ints and on
      SQLAlchemy column expressions alike
"""

import operator
from dataclasses import dataclass
from datetime import date, datetime

from ringside.core.domain_types import EntityKind, PeriodType
from ringside.core.snapshot import EntitySnapshot


COMPARATORS = {
    "eq": operator.eq,
    "ge": operator.ge,
    "lt": operator.lt,
}


class Predicate:
    """Base node. Supports &, | and ~ for composition."""

    def __and__(self, other: "Predicate") -> "Predicate":
        return all_of(self, other)

    def __or__(self, other: "Predicate") -> "Predicate":
        return any_of(self, other)

    def __invert__(self) -> "Predicate":
        return Not(self)


@dataclass(frozen=True)
class Always(Predicate):
    value: bool = True


@dataclass(frozen=True)
class PeriodCovers(Predicate):
    """A period of this type covers as_of."""
    period_type: PeriodType


@dataclass(frozen=True)
class PeriodStartsAfter(Predicate):
    """A period of this type starts strictly after as_of."""
    period_type: PeriodType


@dataclass(frozen=True)
class PeriodEndedBy(Predicate):
    """A closed period of this type ended at or before as_of."""
    period_type: PeriodType


@dataclass(frozen=True)
class PeriodOverlaps(Predicate):
    """A period of this type shares any instant with [start, end]."""
    period_type: PeriodType
    start: datetime
    end: datetime


@dataclass(frozen=True)
class Not(Predicate):
    inner: Predicate


@dataclass(frozen=True)
class AllOf(Predicate):
    parts: tuple[Predicate, ...]


@dataclass(frozen=True)
class AnyOf(Predicate):
    parts: tuple[Predicate, ...]


@dataclass(frozen=True)
class MemberWeight(Predicate):
    """Weighted count of current members compared against a bound.

    weights lists (kind, weight) pairs; kinds not listed weigh 1.
    """
    comparison: str
    count: int
    weights: tuple[tuple[EntityKind, int], ...] = ()


@dataclass(frozen=True)
class EveryMember(Predicate):
    """Every current member satisfies inner (vacuously true with no members)."""
    inner: Predicate


@dataclass(frozen=True)
class BookedOn(Predicate):
    day: date


def all_of(*parts: Predicate) -> Predicate:
    flat: list[Predicate] = []
    for part in parts:
        flat.extend(part.parts if isinstance(part, AllOf) else (part,))
    return flat[0] if len(flat) == 1 else AllOf(tuple(flat))


def any_of(*parts: Predicate) -> Predicate:
    flat: list[Predicate] = []
    for part in parts:
        flat.extend(part.parts if isinstance(part, AnyOf) else (part,))
    return flat[0] if len(flat) == 1 else AnyOf(tuple(flat))


def weigh_members(
    snapshot: EntitySnapshot,
    as_of: datetime,
    weights: tuple[tuple[EntityKind, int], ...] = (),
) -> int:
    table = dict(weights)
    return sum(
        table.get(member.kind, 1)
        for member in snapshot.current_members(as_of)
    )


def evaluate(predicate: Predicate, snapshot: EntitySnapshot, as_of: datetime) -> bool:
    """In-memory backend: evaluate predicate against one loaded snapshot."""
    match predicate:
        case Always(value=value):
            return value
        case PeriodCovers(period_type=ptype):
            return any(p.covers(as_of) for p in snapshot.ledger(ptype))
        case PeriodStartsAfter(period_type=ptype):
            return any(p.starts_after(as_of) for p in snapshot.ledger(ptype))
        case PeriodEndedBy(period_type=ptype):
            return any(p.ended_by(as_of) for p in snapshot.ledger(ptype))
        case PeriodOverlaps(period_type=ptype, start=start, end=end):
            return any(p.overlaps_range(start, end) for p in snapshot.ledger(ptype))
        case Not(inner=inner):
            return not evaluate(inner, snapshot, as_of)
        case AllOf(parts=parts):
            return all(evaluate(p, snapshot, as_of) for p in parts)
        case AnyOf(parts=parts):
            return any(evaluate(p, snapshot, as_of) for p in parts)
        case MemberWeight(comparison=comparison, count=count, weights=weights):
            total = weigh_members(snapshot, as_of, weights)
            return COMPARATORS[comparison](total, count)
        case EveryMember(inner=inner):
            return all(
                evaluate(inner, member, as_of)
                for member in snapshot.current_members(as_of)
            )
        case BookedOn(day=day):
            return day in snapshot.booking_dates
    raise TypeError(f"Unknown predicate node: {type(predicate).__name__}")
