"""Membership Ledger - joins, departures and composite guards."""

import pytest

from ringside.core.domain_types import EntityKind
from ringside.core.errors import (
    CompositeMembershipError,
    InvalidRangeError,
    NoOpenPeriodError,
)
from ringside.services.membership_ledger import MembershipLedger
from tests.builders import day


@pytest.fixture
def memberships(test_db):
    return MembershipLedger(test_db)


@pytest.fixture
def team(roster):
    return roster.entity(EntityKind.TAG_TEAM, "Hart Foundation")


def test_add_and_remove_member(memberships, roster, team, test_db):
    bret = roster.entity(EntityKind.WRESTLER, "Bret")
    row = memberships.add_member(team.id, bret.id, day(1))
    test_db.commit()
    assert row.member_kind is EntityKind.WRESTLER
    assert [m.member_id for m in memberships.current_members(team.id)] == [bret.id]

    memberships.remove_member(team.id, bret.id, day(5))
    test_db.commit()
    assert memberships.current_members(team.id) == []
    [past] = memberships.history(team.id, bret.id)
    assert (past.joined_at, past.left_at) == (day(1), day(5))


def test_member_kind_is_checked(memberships, roster, team):
    referee = roster.entity(EntityKind.REFEREE)
    with pytest.raises(CompositeMembershipError, match="cannot join"):
        memberships.add_member(team.id, referee.id, day(1))


def test_titles_have_no_members(memberships, roster):
    title = roster.entity(EntityKind.TITLE)
    wrestler = roster.entity(EntityKind.WRESTLER)
    with pytest.raises(CompositeMembershipError, match="cannot have members"):
        memberships.add_member(title.id, wrestler.id, day(1))


def test_duplicate_current_membership(memberships, roster, team):
    bret = roster.entity(EntityKind.WRESTLER)
    memberships.add_member(team.id, bret.id, day(1))
    with pytest.raises(CompositeMembershipError, match="already a current member"):
        memberships.add_member(team.id, bret.id, day(2))


def test_tag_team_is_capped(memberships, roster, team):
    for _ in range(2):
        memberships.add_member(team.id, roster.entity(EntityKind.WRESTLER).id, day(1))
    with pytest.raises(CompositeMembershipError, match="already has 2"):
        memberships.add_member(team.id, roster.entity(EntityKind.WRESTLER).id, day(1))


def test_stables_are_not_capped(memberships, roster):
    stable = roster.entity(EntityKind.STABLE)
    for kind in (EntityKind.WRESTLER, EntityKind.MANAGER, EntityKind.TAG_TEAM,
                 EntityKind.WRESTLER):
        memberships.add_member(stable.id, roster.entity(kind).id, day(1))
    assert len(memberships.current_members(stable.id)) == 4


def test_wrestler_in_one_tag_team_at_a_time(memberships, roster, team):
    bret = roster.entity(EntityKind.WRESTLER)
    other = roster.entity(EntityKind.TAG_TEAM)
    memberships.add_member(team.id, bret.id, day(1))
    with pytest.raises(CompositeMembershipError, match="current tag team"):
        memberships.add_member(other.id, bret.id, day(2))


def test_wrestler_can_join_tag_team_and_stable(memberships, roster, team):
    bret = roster.entity(EntityKind.WRESTLER)
    stable = roster.entity(EntityKind.STABLE)
    memberships.add_member(team.id, bret.id, day(1))
    memberships.add_member(stable.id, bret.id, day(1))
    composites = memberships.current_composites(bret.id)
    assert {m.composite_id for m in composites} == {team.id, stable.id}
    only_teams = memberships.current_composites(bret.id, EntityKind.TAG_TEAM)
    assert [m.composite_id for m in only_teams] == [team.id]


def test_rejoin_after_leaving(memberships, roster, team):
    bret = roster.entity(EntityKind.WRESTLER)
    memberships.add_member(team.id, bret.id, day(1))
    memberships.remove_member(team.id, bret.id, day(5))
    with pytest.raises(InvalidRangeError):
        memberships.add_member(team.id, bret.id, day(4))
    memberships.add_member(team.id, bret.id, day(5))
    assert len(memberships.history(team.id, bret.id)) == 2


def test_remove_requires_current_membership(memberships, roster, team):
    bret = roster.entity(EntityKind.WRESTLER)
    with pytest.raises(NoOpenPeriodError):
        memberships.remove_member(team.id, bret.id, day(3))


def test_remove_before_join_is_invalid(memberships, roster, team):
    bret = roster.entity(EntityKind.WRESTLER)
    memberships.add_member(team.id, bret.id, day(3))
    with pytest.raises(InvalidRangeError):
        memberships.remove_member(team.id, bret.id, day(2))
