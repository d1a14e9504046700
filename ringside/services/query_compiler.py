"""Predicate Compiler - turns core predicates into SQL filters and listing queries.

Invariants:
    - compile_predicate() handles exactly the node types core.predicates.evaluate()
      handles, with the same interval semantics ([start, end), inclusive ranges
      for PeriodOverlaps, membership current at as_of)
    - Listing rules come from core.status_rules / core.availability, so
      set membership and the single-entity check agree for every instant
    - Every nested subquery gets its own alias and correlates to the entity
      alias of the level above

Design Decisions:
    - EXISTS / NOT EXISTS over joins: one row per entity, no DISTINCT needed
    - Weighted member counts via a correlated scalar subquery with CASE
"""

from datetime import date, datetime
from typing import Callable, Iterable, Iterator

from sqlalchemy import (
    ColumnElement, and_, case, false, func, literal_column, not_, or_, select, true,
)
from sqlalchemy.orm import Session, aliased
from sqlalchemy.orm.util import AliasedClass

from ringside.core.availability import (
    available_on_rule,
    available_rule,
    bookable_rule,
    unavailable_rule,
)
from ringside.core.domain_types import (
    EntityId,
    EntityKind,
    PeriodType,
    Status,
    is_employable,
)
from ringside.core.periods import normalize_instant, start_of_day, utc_now
from ringside.core.predicates import (
    COMPARATORS,
    Always,
    AllOf,
    AnyOf,
    BookedOn,
    EveryMember,
    MemberWeight,
    Not,
    PeriodCovers,
    PeriodEndedBy,
    PeriodOverlaps,
    PeriodStartsAfter,
    Predicate,
    all_of,
)
from ringside.core.status_rules import status_is
from ringside.models.booking import BookingRecord
from ringside.models.entity import RosterEntity
from ringside.models.membership import Membership
from ringside.models.period import StatusPeriod
from ringside.schemas.roster_query import RosterListQuery


# ─── Compiler ───────────────────────────────────────────────────

def _period_exists(entity: AliasedClass, period_type: PeriodType, *criteria) -> ColumnElement[bool]:
    period = aliased(StatusPeriod)
    return (
        select(period.id)
        .where(period.entity_id == entity.id)
        .where(period.period_type == period_type)
        .where(*[criterion(period) for criterion in criteria])
        .exists()
    )


def _member_current(membership: AliasedClass, as_of: datetime) -> ColumnElement[bool]:
    return and_(
        membership.joined_at <= as_of,
        or_(membership.left_at.is_(None), membership.left_at > as_of),
    )


def compile_predicate(
    predicate: Predicate, entity: AliasedClass, as_of: datetime,
) -> ColumnElement[bool]:
    """SQL backend: a boolean clause over entity (an aliased RosterEntity)."""
    match predicate:
        case Always(value=value):
            return true() if value else false()
        case PeriodCovers(period_type=ptype):
            return _period_exists(
                entity, ptype,
                lambda p: p.started_at <= as_of,
                lambda p: or_(p.ended_at.is_(None), p.ended_at > as_of),
            )
        case PeriodStartsAfter(period_type=ptype):
            return _period_exists(entity, ptype, lambda p: p.started_at > as_of)
        case PeriodEndedBy(period_type=ptype):
            return _period_exists(
                entity, ptype,
                lambda p: p.ended_at.is_not(None),
                lambda p: p.ended_at <= as_of,
            )
        case PeriodOverlaps(period_type=ptype, start=start, end=end):
            return _period_exists(
                entity, ptype,
                lambda p: p.started_at <= end,
                lambda p: or_(p.ended_at.is_(None), p.ended_at > start),
            )
        case Not(inner=inner):
            return not_(compile_predicate(inner, entity, as_of))
        case AllOf(parts=parts):
            return and_(*[compile_predicate(p, entity, as_of) for p in parts])
        case AnyOf(parts=parts):
            return or_(*[compile_predicate(p, entity, as_of) for p in parts])
        case MemberWeight(comparison=comparison, count=count, weights=weights):
            membership = aliased(Membership)
            weight = case(
                *[
                    (membership.member_kind == kind, literal_column(str(w)))
                    for kind, w in weights
                ],
                else_=literal_column("1"),
            ) if weights else literal_column("1")
            total = (
                select(func.coalesce(func.sum(weight), literal_column("0")))
                .where(membership.composite_id == entity.id)
                .where(_member_current(membership, as_of))
                .scalar_subquery()
            )
            return COMPARATORS[comparison](total, count)
        case EveryMember(inner=inner):
            membership = aliased(Membership)
            member = aliased(RosterEntity)
            return not_(
                select(membership.id)
                .where(membership.composite_id == entity.id)
                .where(_member_current(membership, as_of))
                .where(member.id == membership.member_id)
                .where(not_(compile_predicate(inner, member, as_of)))
                .exists()
            )
        case BookedOn(day=day):
            booking = aliased(BookingRecord)
            return (
                select(booking.id)
                .where(booking.entity_id == entity.id)
                .where(booking.booked_on == day)
                .exists()
            )
    raise TypeError(f"Unknown predicate node: {type(predicate).__name__}")


# ─── Listing Queries ────────────────────────────────────────────

class RosterQueries:
    """Set-oriented counterparts of StatusService, returning entity ids."""

    def __init__(self, db: Session):
        self.db = db

    def _ids(
        self,
        entity: AliasedClass,
        clause: ColumnElement[bool],
        limit: int | None = None,
        offset: int = 0,
    ) -> Iterator[EntityId]:
        stmt = (
            select(entity.id)
            .where(clause)
            .order_by(entity.name, entity.id)
            .offset(offset)
            .limit(limit)
        )
        for entity_id in self.db.scalars(stmt):
            yield EntityId(entity_id)

    def stream(
        self, kind: EntityKind, predicate: Predicate, as_of: datetime | None = None,
    ) -> Iterator[EntityId]:
        """Ids of kind whose snapshot satisfies predicate at as_of."""
        as_of = normalize_instant(as_of) if as_of else utc_now()
        entity = aliased(RosterEntity, name="entity")
        clause = and_(entity.kind == kind, compile_predicate(predicate, entity, as_of))
        return self._ids(entity, clause)

    def _stream_rule(
        self,
        rule_for: Callable[[EntityKind], Predicate],
        as_of: datetime,
        kinds: Iterable[EntityKind] | None,
    ) -> Iterator[EntityId]:
        entity = aliased(RosterEntity, name="entity")
        clause = or_(*[
            and_(entity.kind == kind, compile_predicate(rule_for(kind), entity, as_of))
            for kind in (kinds or list(EntityKind))
        ])
        return self._ids(entity, clause)

    def with_status(
        self, kind: EntityKind, status: Status, as_of: datetime | None = None,
    ) -> Iterator[EntityId]:
        return self.stream(kind, status_is(kind, status), as_of)

    def bookable_ids(
        self, as_of: datetime | None = None, kinds: Iterable[EntityKind] | None = None,
    ) -> Iterator[EntityId]:
        as_of = normalize_instant(as_of) if as_of else utc_now()
        return self._stream_rule(bookable_rule, as_of, kinds)

    def available_ids(
        self, as_of: datetime | None = None, kinds: Iterable[EntityKind] | None = None,
    ) -> Iterator[EntityId]:
        as_of = normalize_instant(as_of) if as_of else utc_now()
        return self._stream_rule(available_rule, as_of, kinds)

    def unavailable_ids(
        self, as_of: datetime | None = None, kinds: Iterable[EntityKind] | None = None,
    ) -> Iterator[EntityId]:
        as_of = normalize_instant(as_of) if as_of else utc_now()
        return self._stream_rule(unavailable_rule, as_of, kinds)

    def available_on_ids(
        self, day: date, kinds: Iterable[EntityKind] | None = None,
    ) -> Iterator[EntityId]:
        return self._stream_rule(
            lambda kind: available_on_rule(kind, day), start_of_day(day), kinds,
        )

    def active_during(
        self, start: datetime, end: datetime, kinds: Iterable[EntityKind] | None = None,
    ) -> Iterator[EntityId]:
        """Activatable entities with an activation overlapping [start, end]."""
        kinds = [k for k in (kinds or list(EntityKind)) if not is_employable(k)]
        return self._during(PeriodType.ACTIVATION, start, end, kinds)

    def employed_during(
        self, start: datetime, end: datetime, kinds: Iterable[EntityKind] | None = None,
    ) -> Iterator[EntityId]:
        """Employable entities with an employment overlapping [start, end]."""
        kinds = [k for k in (kinds or list(EntityKind)) if is_employable(k)]
        return self._during(PeriodType.EMPLOYMENT, start, end, kinds)

    def _during(
        self, period_type: PeriodType, start: datetime, end: datetime,
        kinds: list[EntityKind],
    ) -> Iterator[EntityId]:
        start, end = normalize_instant(start), normalize_instant(end)
        rule = PeriodOverlaps(period_type, start, end)
        if not kinds:
            return iter(())
        return self._stream_rule(lambda kind: rule, end, kinds)

    def search(self, query: RosterListQuery) -> list[EntityId]:
        """Listing view entry point: every given filter must hold."""
        if query.as_of is not None:
            as_of = normalize_instant(query.as_of)
        elif query.available_on is not None:
            as_of = start_of_day(query.available_on)
        else:
            as_of = utc_now()
        parts: list[Predicate] = []
        if query.status is not None:
            parts.append(status_is(query.kind, query.status))
        if query.during is not None:
            period_type = (
                PeriodType.EMPLOYMENT if is_employable(query.kind)
                else PeriodType.ACTIVATION
            )
            parts.append(PeriodOverlaps(
                period_type,
                normalize_instant(query.during.start),
                normalize_instant(query.during.end),
            ))
        if query.available_on is not None:
            parts.append(available_on_rule(query.kind, query.available_on))
        predicate = all_of(*parts) if parts else Always(True)

        entity = aliased(RosterEntity, name="entity")
        clause = and_(
            entity.kind == query.kind, compile_predicate(predicate, entity, as_of),
        )
        return list(self._ids(entity, clause, query.limit, query.offset))
