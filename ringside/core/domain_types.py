"""Domain Types - entity kinds, period types, statuses and capabilities.

Invariants:
    - EntityId wraps UUIDs - never use bare UUID in domain logic
    - Every kind has a fixed capability set; a period type applies to a kind
      only through one of its capabilities
    - All valid states encoded as Enums - no raw string matching

Design Decisions:
    - str Enums: values are what the store persists and what callers receive
    - Status is a union of two closed enumerations, one per status family
"""

from enum import Enum
from typing import NewType, Union
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

EntityId = NewType("EntityId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class EntityKind(str, Enum):
    """The six roster entity kinds."""
    WRESTLER = "wrestler"
    TAG_TEAM = "tag_team"
    MANAGER = "manager"
    REFEREE = "referee"
    STABLE = "stable"
    TITLE = "title"


class PeriodType(str, Enum):
    """Ledger keys - one time-bounded history per (entity, period type)."""
    EMPLOYMENT = "employment"
    INJURY = "injury"
    SUSPENSION = "suspension"
    RETIREMENT = "retirement"
    ACTIVATION = "activation"


class Capability(str, Enum):
    """What an entity kind can go through."""
    EMPLOYABLE = "employable"
    INJURABLE = "injurable"
    SUSPENDABLE = "suspendable"
    RETIRABLE = "retirable"
    ACTIVATABLE = "activatable"


class EmploymentStatus(str, Enum):
    """Derived status for employable kinds (individuals and tag teams)."""
    UNEMPLOYED = "unemployed"
    FUTURE_EMPLOYMENT = "future_employment"
    EMPLOYED = "employed"
    RELEASED = "released"
    SUSPENDED = "suspended"
    INJURED = "injured"
    RETIRED = "retired"
    UNBOOKABLE = "unbookable"  # tag team only


class ActivationStatus(str, Enum):
    """Derived status for activatable kinds (titles and stables)."""
    UNACTIVATED = "unactivated"
    FUTURE_ACTIVATION = "future_activation"
    ACTIVE = "active"
    INACTIVE = "inactive"
    RETIRED = "retired"


Status = Union[EmploymentStatus, ActivationStatus]


class RosterAction(str, Enum):
    """Actions the handler layer can request."""
    EMPLOY = "employ"
    RELEASE = "release"
    SUSPEND = "suspend"
    REINSTATE = "reinstate"
    INJURE = "injure"
    HEAL = "heal"
    RETIRE = "retire"
    UNRETIRE = "unretire"
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"


# ─── Capability Tables ───────────────────────────────────────────

CAPABILITY_PERIOD: dict[Capability, PeriodType] = {
    Capability.EMPLOYABLE: PeriodType.EMPLOYMENT,
    Capability.INJURABLE: PeriodType.INJURY,
    Capability.SUSPENDABLE: PeriodType.SUSPENSION,
    Capability.RETIRABLE: PeriodType.RETIREMENT,
    Capability.ACTIVATABLE: PeriodType.ACTIVATION,
}

_INDIVIDUAL = frozenset({
    Capability.EMPLOYABLE, Capability.INJURABLE,
    Capability.SUSPENDABLE, Capability.RETIRABLE,
})

KIND_CAPABILITIES: dict[EntityKind, frozenset[Capability]] = {
    EntityKind.WRESTLER: _INDIVIDUAL,
    EntityKind.MANAGER: _INDIVIDUAL,
    EntityKind.REFEREE: _INDIVIDUAL,
    EntityKind.TAG_TEAM: frozenset({
        Capability.EMPLOYABLE, Capability.SUSPENDABLE, Capability.RETIRABLE,
    }),
    EntityKind.STABLE: frozenset({
        Capability.ACTIVATABLE, Capability.RETIRABLE,
    }),
    EntityKind.TITLE: frozenset({
        Capability.ACTIVATABLE, Capability.RETIRABLE,
    }),
}

COMPOSITE_KINDS = frozenset({EntityKind.TAG_TEAM, EntityKind.STABLE})


def supports(kind: EntityKind, capability: Capability) -> bool:
    return capability in KIND_CAPABILITIES[kind]


def period_types_for(kind: EntityKind) -> frozenset[PeriodType]:
    """Period types whose ledgers exist for this kind."""
    return frozenset(
        CAPABILITY_PERIOD[c] for c in KIND_CAPABILITIES[kind]
    )


def capability_for_period(period_type: PeriodType) -> Capability:
    for capability, ptype in CAPABILITY_PERIOD.items():
        if ptype is period_type:
            return capability
    raise ValueError(f"No capability owns period type {period_type!r}")


def is_employable(kind: EntityKind) -> bool:
    return supports(kind, Capability.EMPLOYABLE)


def is_composite(kind: EntityKind) -> bool:
    return kind in COMPOSITE_KINDS
