"""Status Resolver - precedence ladders, status_is agreement, composite rules.

Tests cover:
    - Precedence (retired > injured > suspended > future > employed > released)
    - Round trip and suspension scenario
    - Activation ladder for titles and stables
    - status_is holds for exactly the resolved status at every instant
    - Tag team employed only with exactly two employed members
"""

import pytest

from ringside.core.domain_types import (
    ActivationStatus,
    EmploymentStatus,
    EntityKind,
    PeriodType,
)
from ringside.core.predicates import Always, evaluate
from ringside.core.status_rules import ladder_for, resolve, status_is, statuses_for
from tests.builders import day, employed, link, period, snapshot, tag_team

EMP = PeriodType.EMPLOYMENT
SUS = PeriodType.SUSPENSION
INJ = PeriodType.INJURY
RET = PeriodType.RETIREMENT
ACT = PeriodType.ACTIVATION
E = EmploymentStatus
A = ActivationStatus


# --- Employable ladder ---------------------------------------------------------

def test_unemployed_without_history():
    assert resolve(snapshot(EntityKind.REFEREE), day(1)) is E.UNEMPLOYED


def test_retired_outranks_suspended():
    wrestler = snapshot(
        EntityKind.WRESTLER, period(EMP, 1), period(SUS, 5), period(RET, 6),
    )
    assert resolve(wrestler, day(7)) is E.RETIRED


def test_injured_outranks_suspended():
    wrestler = snapshot(
        EntityKind.WRESTLER, period(EMP, 1), period(SUS, 5), period(INJ, 6),
    )
    assert resolve(wrestler, day(5.5)) is E.SUSPENDED
    assert resolve(wrestler, day(7)) is E.INJURED


def test_round_trip_employed_then_released():
    wrestler = snapshot(EntityKind.WRESTLER, period(EMP, 1, 2))
    assert resolve(wrestler, day(1.5)) is E.EMPLOYED
    assert resolve(wrestler, day(2.5)) is E.RELEASED


def test_suspension_scenario():
    wrestler = snapshot(EntityKind.WRESTLER, period(EMP, 1), period(SUS, 10, 20))
    assert resolve(wrestler, day(5)) is E.EMPLOYED
    assert resolve(wrestler, day(15)) is E.SUSPENDED
    assert resolve(wrestler, day(25)) is E.EMPLOYED


def test_future_employment_outranks_past_release():
    manager = snapshot(EntityKind.MANAGER, period(EMP, 1, 5), period(EMP, 30))
    assert resolve(manager, day(0.5)) is E.FUTURE_EMPLOYMENT
    assert resolve(manager, day(10)) is E.FUTURE_EMPLOYMENT
    assert resolve(manager, day(31)) is E.EMPLOYED


def test_later_reemployment_does_not_hide_current_employment():
    wrestler = snapshot(EntityKind.WRESTLER, period(EMP, 1, 10), period(EMP, 20))
    assert resolve(wrestler, day(5)) is E.EMPLOYED
    assert resolve(wrestler, day(15)) is E.FUTURE_EMPLOYMENT
    assert resolve(wrestler, day(25)) is E.EMPLOYED
    assert evaluate(status_is(EntityKind.WRESTLER, E.EMPLOYED), wrestler, day(5))


def test_tag_team_ladder_has_no_injury_rung():
    statuses = statuses_for(EntityKind.TAG_TEAM)
    assert E.INJURED not in statuses
    assert E.UNBOOKABLE in statuses
    assert E.INJURED in statuses_for(EntityKind.WRESTLER)
    assert E.UNBOOKABLE not in statuses_for(EntityKind.WRESTLER)


def test_every_ladder_ends_with_a_catch_all():
    for kind in EntityKind:
        assert ladder_for(kind)[-1][1] == Always(True)


# --- Activatable ladder --------------------------------------------------------

@pytest.mark.parametrize("kind", [EntityKind.TITLE, EntityKind.STABLE])
def test_activation_ladder(kind):
    entity = snapshot(kind, period(ACT, 5, 10), period(ACT, 20, 30), period(RET, 30))
    assert resolve(entity, day(1)) is A.FUTURE_ACTIVATION
    assert resolve(entity, day(7)) is A.ACTIVE
    assert resolve(entity, day(15)) is A.FUTURE_ACTIVATION
    assert resolve(entity, day(25)) is A.ACTIVE
    assert resolve(entity, day(35)) is A.RETIRED


def test_inactive_and_unactivated_titles():
    assert resolve(snapshot(EntityKind.TITLE), day(1)) is A.UNACTIVATED
    title = snapshot(EntityKind.TITLE, period(ACT, 1, 5))
    assert resolve(title, day(6)) is A.INACTIVE


# --- status_is agrees with resolve ---------------------------------------------

INSTANTS = [day(n / 2) for n in range(0, 80)]


@pytest.mark.parametrize("entity", [
    snapshot(EntityKind.WRESTLER, period(EMP, 2, 12), period(SUS, 4, 6),
             period(INJ, 8, 9), period(EMP, 20), period(RET, 30, 35)),
    snapshot(EntityKind.TITLE, period(ACT, 3, 9), period(RET, 9, 15), period(ACT, 15)),
    snapshot(EntityKind.MANAGER, period(EMP, 1, 10), period(EMP, 20)),
    snapshot(EntityKind.STABLE, period(ACT, 2, 8), period(ACT, 12, 18), period(ACT, 25)),
    tag_team(employed(), snapshot(EntityKind.WRESTLER, period(EMP, 1, 10)), since=3),
])
def test_exactly_one_status_holds_at_every_instant(entity):
    for instant in INSTANTS:
        holding = [
            status for status in statuses_for(entity.kind)
            if evaluate(status_is(entity.kind, status), entity, instant)
        ]
        assert holding == [resolve(entity, instant)], instant


def test_status_outside_the_ladder_never_holds():
    assert status_is(EntityKind.WRESTLER, E.UNBOOKABLE) == Always(False)


# --- Tag team composite rules --------------------------------------------------

def test_tag_team_employed_with_two_employed_members():
    team = tag_team(employed(), employed())
    assert resolve(team, day(2)) is E.EMPLOYED


@pytest.mark.parametrize("size", [0, 1, 3])
def test_tag_team_with_wrong_member_count_is_never_employed(size):
    team = tag_team(*[employed() for _ in range(size)])
    assert resolve(team, day(2)) is E.UNBOOKABLE


def test_suspended_member_makes_team_unbookable():
    suspended = snapshot(EntityKind.WRESTLER, period(EMP, 1), period(SUS, 5))
    team = tag_team(employed(), suspended)
    assert resolve(team, day(3)) is E.EMPLOYED
    assert resolve(team, day(6)) is E.UNBOOKABLE


def test_team_own_suspension_outranks_members():
    team = snapshot(
        EntityKind.TAG_TEAM, period(EMP, 1), period(SUS, 5),
        members=(link(employed()), link(employed())),
    )
    assert resolve(team, day(6)) is E.SUSPENDED


def test_member_departure_is_seen_on_next_read():
    team = snapshot(
        EntityKind.TAG_TEAM, period(EMP, 1),
        members=(link(employed(), 1), link(employed(), 1, 10)),
    )
    assert resolve(team, day(9)) is E.EMPLOYED
    assert resolve(team, day(10)) is E.UNBOOKABLE
