"""Composite Propagator - membership rules for tag teams and stables.

Invariants:
    - Composite status is never stored: tag_team_ready() and stable_quorum()
      are predicates evaluated against the members' own snapshots on read
    - A tag team needs exactly TAG_TEAM_SIZE current members to be employed
    - A stable needs weighted membership >= STABLE_MIN_MEMBERS to be available
      (a tag team member counts as its two wrestlers)
    - A stable's retirement comes only from its own ledger; member retirement
      never retires the stable

Design Decisions:
    - Member-status predicates are passed in by status_rules, keeping this
      module free of ladder knowledge (and of a circular import)
"""

from datetime import datetime

from ringside.core.domain_types import EntityKind
from ringside.core.errors import CompositeMembershipError, ErrorContext
from ringside.core.predicates import EveryMember, MemberWeight, Predicate, weigh_members
from ringside.core.snapshot import EntitySnapshot


TAG_TEAM_SIZE = 2
STABLE_MIN_MEMBERS = 3

MEMBER_KINDS: dict[EntityKind, frozenset[EntityKind]] = {
    EntityKind.TAG_TEAM: frozenset({EntityKind.WRESTLER}),
    EntityKind.STABLE: frozenset({
        EntityKind.WRESTLER, EntityKind.TAG_TEAM, EntityKind.MANAGER,
    }),
}

STABLE_WEIGHTS: tuple[tuple[EntityKind, int], ...] = (
    (EntityKind.TAG_TEAM, TAG_TEAM_SIZE),
)


# ─── Predicates ─────────────────────────────────────────────────

def tag_team_ready(member_employed: Predicate) -> Predicate:
    """Exactly TAG_TEAM_SIZE current members, all of them employed."""
    return MemberWeight("eq", TAG_TEAM_SIZE) & EveryMember(member_employed)


def stable_quorum() -> Predicate:
    return MemberWeight("ge", STABLE_MIN_MEMBERS, STABLE_WEIGHTS)


def member_weight(snapshot: EntitySnapshot, as_of: datetime) -> int:
    weights = STABLE_WEIGHTS if snapshot.kind is EntityKind.STABLE else ()
    return weigh_members(snapshot, as_of, weights)


# ─── Guards ─────────────────────────────────────────────────────

def ensure_member_kind(
    composite_kind: EntityKind,
    member_kind: EntityKind,
    context: ErrorContext | None = None,
) -> None:
    allowed = MEMBER_KINDS.get(composite_kind)
    if allowed is None:
        raise CompositeMembershipError(
            f"A {composite_kind.value} cannot have members", context,
        )
    if member_kind not in allowed:
        raise CompositeMembershipError(
            f"A {member_kind.value} cannot join a {composite_kind.value}", context,
        )


def ensure_tag_team_complete(
    snapshot: EntitySnapshot, as_of: datetime, context: ErrorContext | None = None,
) -> None:
    count = len(snapshot.current_members(as_of))
    if count != TAG_TEAM_SIZE:
        raise CompositeMembershipError(
            f"Tag team needs exactly {TAG_TEAM_SIZE} current members, has {count}",
            context,
        )


def ensure_has_members(
    snapshot: EntitySnapshot, as_of: datetime, context: ErrorContext | None = None,
) -> None:
    if not snapshot.current_members(as_of):
        raise CompositeMembershipError(
            f"{snapshot.kind.value} has no current members", context,
        )


def ensure_room_for_member(
    composite_kind: EntityKind, current_count: int, context: ErrorContext | None = None,
) -> None:
    """Tag teams are capped at TAG_TEAM_SIZE; stables are not capped."""
    if composite_kind is not EntityKind.TAG_TEAM:
        return
    if current_count >= TAG_TEAM_SIZE:
        raise CompositeMembershipError(
            f"Tag team already has {TAG_TEAM_SIZE} current members", context,
        )
