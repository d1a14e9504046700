"""Transition Rules - allowed statuses per action and planned ledger changes."""

import pytest

from ringside.core.domain_types import (
    ActivationStatus,
    EmploymentStatus,
    EntityKind,
    PeriodType,
    RosterAction,
)
from ringside.core.errors import InvalidTransitionError, NoOpenPeriodError
from ringside.core.transitions import allowed_from, ensure_allowed, plan_transition
from tests.builders import day, employed, period, snapshot, tag_team

EMP = PeriodType.EMPLOYMENT
SUS = PeriodType.SUSPENSION
INJ = PeriodType.INJURY
RET = PeriodType.RETIREMENT
ACT = PeriodType.ACTIVATION


def _ops(changes):
    return [(c.period_type, c.operation) for c in changes]


def test_employ_opens_employment():
    wrestler = snapshot(EntityKind.WRESTLER)
    changes = plan_transition(wrestler, RosterAction.EMPLOY, day(1))
    assert _ops(changes) == [(EMP, "open")]
    assert changes[0].at == day(1)
    assert changes[0].entity_id == wrestler.entity_id


def test_employ_released_wrestler_again():
    wrestler = snapshot(EntityKind.WRESTLER, period(EMP, 1, 5))
    assert _ops(plan_transition(wrestler, RosterAction.EMPLOY, day(6))) == [(EMP, "open")]


def test_cannot_employ_employed_wrestler():
    with pytest.raises(InvalidTransitionError, match="employed"):
        plan_transition(employed(), RosterAction.EMPLOY, day(2))


def test_release_closes_suspension_first():
    wrestler = snapshot(EntityKind.WRESTLER, period(EMP, 1), period(SUS, 5))
    assert _ops(plan_transition(wrestler, RosterAction.RELEASE, day(6))) == [
        (SUS, "close"), (EMP, "close"),
    ]


def test_suspend_and_reinstate():
    wrestler = employed()
    assert _ops(plan_transition(wrestler, RosterAction.SUSPEND, day(2))) == [(SUS, "open")]
    suspended = snapshot(EntityKind.WRESTLER, period(EMP, 1), period(SUS, 5))
    assert _ops(plan_transition(suspended, RosterAction.REINSTATE, day(6))) == [(SUS, "close")]


def test_injure_requires_employed():
    released = snapshot(EntityKind.WRESTLER, period(EMP, 1, 2))
    with pytest.raises(InvalidTransitionError):
        plan_transition(released, RosterAction.INJURE, day(3))


def test_tag_team_cannot_be_injured():
    team = tag_team(employed(), employed())
    with pytest.raises(InvalidTransitionError):
        plan_transition(team, RosterAction.INJURE, day(2))


def test_heal_requires_injury():
    with pytest.raises(InvalidTransitionError, match="heal"):
        plan_transition(employed(), RosterAction.HEAL, day(2))


def test_retire_injured_wrestler_closes_everything_open():
    wrestler = snapshot(EntityKind.WRESTLER, period(EMP, 1), period(INJ, 5))
    assert _ops(plan_transition(wrestler, RosterAction.RETIRE, day(6))) == [
        (INJ, "close"), (EMP, "close"), (RET, "open"),
    ]


def test_retire_released_wrestler_only_opens_retirement():
    wrestler = snapshot(EntityKind.WRESTLER, period(EMP, 1, 5))
    assert _ops(plan_transition(wrestler, RosterAction.RETIRE, day(6))) == [(RET, "open")]


def test_cannot_retire_retired_or_unemployed():
    retired = snapshot(EntityKind.WRESTLER, period(EMP, 1, 5), period(RET, 5))
    with pytest.raises(InvalidTransitionError, match="retired"):
        plan_transition(retired, RosterAction.RETIRE, day(6))
    with pytest.raises(InvalidTransitionError, match="unemployed"):
        plan_transition(snapshot(EntityKind.WRESTLER), RosterAction.RETIRE, day(6))


def test_unretire_reopens_employment_at_the_same_instant():
    retired = snapshot(EntityKind.REFEREE, period(EMP, 1, 5), period(RET, 5))
    changes = plan_transition(retired, RosterAction.UNRETIRE, day(9))
    assert _ops(changes) == [(RET, "close"), (EMP, "open")]
    assert {c.at for c in changes} == {day(9)}


def test_title_lifecycle():
    title = snapshot(EntityKind.TITLE)
    assert _ops(plan_transition(title, RosterAction.ACTIVATE, day(1))) == [(ACT, "open")]
    active = snapshot(EntityKind.TITLE, period(ACT, 1))
    assert _ops(plan_transition(active, RosterAction.DEACTIVATE, day(2))) == [(ACT, "close")]
    assert _ops(plan_transition(active, RosterAction.RETIRE, day(2))) == [
        (ACT, "close"), (RET, "open"),
    ]
    retired = snapshot(EntityKind.TITLE, period(ACT, 1, 2), period(RET, 2))
    assert _ops(plan_transition(retired, RosterAction.UNRETIRE, day(3))) == [
        (RET, "close"), (ACT, "open"),
    ]


def test_title_cannot_be_employed():
    with pytest.raises(InvalidTransitionError):
        plan_transition(snapshot(EntityKind.TITLE), RosterAction.EMPLOY, day(1))


def test_unactivated_title_cannot_be_retired():
    with pytest.raises(InvalidTransitionError, match="unactivated"):
        plan_transition(snapshot(EntityKind.TITLE), RosterAction.RETIRE, day(1))


def test_release_without_open_employment():
    # employment closed in the future still covers now, but nothing is open
    wrestler = snapshot(EntityKind.WRESTLER, period(EMP, 1, 30))
    with pytest.raises(NoOpenPeriodError):
        plan_transition(wrestler, RosterAction.RELEASE, day(5))


def test_allowed_tables():
    assert allowed_from(RosterAction.SUSPEND, EntityKind.TAG_TEAM) == {
        EmploymentStatus.EMPLOYED, EmploymentStatus.UNBOOKABLE,
    }
    assert allowed_from(RosterAction.ACTIVATE, EntityKind.STABLE) == {
        ActivationStatus.UNACTIVATED, ActivationStatus.INACTIVE,
    }
    assert allowed_from(RosterAction.EMPLOY, EntityKind.TITLE) == frozenset()


def test_ensure_allowed_returns_status():
    assert ensure_allowed(employed(), RosterAction.SUSPEND, day(2)) is EmploymentStatus.EMPLOYED
