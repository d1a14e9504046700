"""Status Resolver - one precedence ladder per entity kind.

Invariants:
    - ladder_for(kind) is the only place the precedence order is written
    - resolve() returns the first rung whose predicate holds; the last rung is
      Always(True), so every snapshot resolves
    - status_is(kind, s) == "rung s holds and no higher rung holds", built from
      the same rung tuple, so it agrees with resolve() for every instant
    - A tag team's employed rung includes its members (composite.tag_team_ready)
    - A future rung holds only while no period of its type covers as_of, so a
      later re-employment or re-activation never hides the current one

Design Decisions:
    - Injured outranks Suspended. Actions never let the two co-occur
      (both require an employed entity), so the order only matters for
      hand-written history
    - Ladders are cached: predicates are immutable and keyed by kind
"""

from datetime import datetime
from functools import lru_cache

from ringside.core.composite import tag_team_ready
from ringside.core.domain_types import (
    ActivationStatus,
    Capability,
    EmploymentStatus,
    EntityKind,
    PeriodType,
    Status,
    is_employable,
    supports,
)
from ringside.core.errors import ErrorContext, LedgerCorruptionError
from ringside.core.predicates import (
    Always,
    PeriodCovers,
    PeriodEndedBy,
    PeriodStartsAfter,
    Predicate,
    any_of,
    evaluate,
)
from ringside.core.snapshot import EntitySnapshot


Rung = tuple[Status, Predicate]


def _upcoming(period_type: PeriodType) -> Predicate:
    """A later period is scheduled and none covers as_of."""
    return PeriodStartsAfter(period_type) & ~PeriodCovers(period_type)


@lru_cache(maxsize=None)
def ladder_for(kind: EntityKind) -> tuple[Rung, ...]:
    """Rungs for kind, highest precedence first."""
    if is_employable(kind):
        return _employable_ladder(kind)
    return _activatable_ladder()


def _employable_ladder(kind: EntityKind) -> tuple[Rung, ...]:
    rungs: list[Rung] = [
        (EmploymentStatus.RETIRED, PeriodCovers(PeriodType.RETIREMENT)),
    ]
    if supports(kind, Capability.INJURABLE):
        rungs.append((EmploymentStatus.INJURED, PeriodCovers(PeriodType.INJURY)))
    rungs += [
        (EmploymentStatus.SUSPENDED, PeriodCovers(PeriodType.SUSPENSION)),
        (EmploymentStatus.FUTURE_EMPLOYMENT, _upcoming(PeriodType.EMPLOYMENT)),
    ]
    employed = PeriodCovers(PeriodType.EMPLOYMENT)
    if kind is EntityKind.TAG_TEAM:
        members_employed = status_is(EntityKind.WRESTLER, EmploymentStatus.EMPLOYED)
        rungs += [
            (EmploymentStatus.EMPLOYED, employed & tag_team_ready(members_employed)),
            (EmploymentStatus.UNBOOKABLE, employed),
        ]
    else:
        rungs.append((EmploymentStatus.EMPLOYED, employed))
    rungs += [
        (EmploymentStatus.RELEASED, PeriodEndedBy(PeriodType.EMPLOYMENT)),
        (EmploymentStatus.UNEMPLOYED, Always(True)),
    ]
    return tuple(rungs)


def _activatable_ladder() -> tuple[Rung, ...]:
    return (
        (ActivationStatus.RETIRED, PeriodCovers(PeriodType.RETIREMENT)),
        (ActivationStatus.FUTURE_ACTIVATION, _upcoming(PeriodType.ACTIVATION)),
        (ActivationStatus.ACTIVE, PeriodCovers(PeriodType.ACTIVATION)),
        (ActivationStatus.INACTIVE, PeriodEndedBy(PeriodType.ACTIVATION)),
        (ActivationStatus.UNACTIVATED, Always(True)),
    )


def statuses_for(kind: EntityKind) -> tuple[Status, ...]:
    return tuple(status for status, _ in ladder_for(kind))


@lru_cache(maxsize=None)
def status_is(kind: EntityKind, status: Status) -> Predicate:
    """Predicate that holds exactly when resolve() would return status.

    A status outside the kind's ladder never holds.
    """
    rungs = ladder_for(kind)
    for index, (rung_status, predicate) in enumerate(rungs):
        if rung_status == status:
            higher = [p for _, p in rungs[:index]]
            if not higher:
                return predicate
            return predicate & ~any_of(*higher)
    return Always(False)


def resolve(snapshot: EntitySnapshot, as_of: datetime) -> Status:
    for status, predicate in ladder_for(snapshot.kind):
        if evaluate(predicate, snapshot, as_of):
            return status
    raise LedgerCorruptionError(
        f"No status rung matched for {snapshot.kind.value}",
        ErrorContext(entity_id=str(snapshot.entity_id), entity_kind=snapshot.kind.value),
    )
