"""Capability Interfaces - per-capability views over the generic period ledger.

Invariants:
    - A capability object exists only for a kind that has the capability;
      capability_for() raises InvalidTransitionError otherwise
    - Each capability owns exactly one period type (CAPABILITY_PERIOD)
    - Capabilities are composed over PeriodLedger, never inherited into models
"""

from datetime import datetime
from typing import ClassVar

from ringside.core.domain_types import CAPABILITY_PERIOD, Capability, supports
from ringside.core.errors import ErrorContext, InvalidTransitionError
from ringside.core.periods import Period
from ringside.models.entity import RosterEntity
from ringside.services.period_ledger import PeriodLedger


class PeriodCapability:
    """Open/close/read one entity's ledger for one period type."""
    capability: ClassVar[Capability]

    def __init__(self, ledger: PeriodLedger, entity: RosterEntity):
        if not supports(entity.kind, self.capability):
            raise InvalidTransitionError(
                f"use {self.capability.value} capability",
                entity.kind.value,
                ErrorContext(entity_id=str(entity.id), entity_kind=entity.kind.value),
            )
        self.ledger = ledger
        self.entity = entity
        self.period_type = CAPABILITY_PERIOD[self.capability]

    def open(self, at: datetime) -> Period:
        return self.ledger.open_period(self.entity.id, self.period_type, at)

    def close(self, at: datetime) -> Period:
        return self.ledger.close_period(self.entity.id, self.period_type, at)

    def current(self) -> Period | None:
        return self.ledger.current_period(self.entity.id, self.period_type)

    def history(self) -> tuple[Period, ...]:
        return self.ledger.history(self.entity.id, self.period_type)


class Employable(PeriodCapability):
    capability = Capability.EMPLOYABLE

    def employ(self, at: datetime) -> Period:
        return self.open(at)

    def release(self, at: datetime) -> Period:
        return self.close(at)


class Injurable(PeriodCapability):
    capability = Capability.INJURABLE

    def injure(self, at: datetime) -> Period:
        return self.open(at)

    def heal(self, at: datetime) -> Period:
        return self.close(at)


class Suspendable(PeriodCapability):
    capability = Capability.SUSPENDABLE

    def suspend(self, at: datetime) -> Period:
        return self.open(at)

    def reinstate(self, at: datetime) -> Period:
        return self.close(at)


class Retirable(PeriodCapability):
    capability = Capability.RETIRABLE

    def retire(self, at: datetime) -> Period:
        return self.open(at)

    def unretire(self, at: datetime) -> Period:
        return self.close(at)


class Activatable(PeriodCapability):
    capability = Capability.ACTIVATABLE

    def activate(self, at: datetime) -> Period:
        return self.open(at)

    def deactivate(self, at: datetime) -> Period:
        return self.close(at)


CAPABILITY_CLASSES: dict[Capability, type[PeriodCapability]] = {
    Capability.EMPLOYABLE: Employable,
    Capability.INJURABLE: Injurable,
    Capability.SUSPENDABLE: Suspendable,
    Capability.RETIRABLE: Retirable,
    Capability.ACTIVATABLE: Activatable,
}


def capability_for(
    ledger: PeriodLedger, entity: RosterEntity, capability: Capability,
) -> PeriodCapability:
    return CAPABILITY_CLASSES[capability](ledger, entity)
