"""Service test fixtures - SQLite DB sessions and a roster row factory.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - The roster factory writes rows directly (bypassing the ledgers) so
      tests can set up any history, including ones actions would refuse

Design Decisions:
    - StaticPool: one shared connection keeps the in-memory DB alive across
      sessions in the same test
    - SQLite partial indexes are real, so the one-open-period backstop is
      exercised here as well as on PostgreSQL
"""

from datetime import date, datetime
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from ringside.core.domain_types import EntityKind, PeriodType
from ringside.db.base import Base
from ringside.db.session import create_session_factory
from ringside.models.booking import BookingRecord
from ringside.models.entity import RosterEntity
from ringside.models.membership import Membership
from ringside.models.period import StatusPeriod
import ringside.models  # noqa: F401


@pytest.fixture
def test_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def test_session_factory(test_engine):
    return create_session_factory(engine=test_engine)


@pytest.fixture
def test_db(test_session_factory):
    with test_session_factory() as session:
        yield session


class RosterFactory:
    """Direct row writer for arranging test histories."""

    def __init__(self, db):
        self.db = db

    def entity(self, kind: EntityKind, name: str | None = None) -> RosterEntity:
        row = RosterEntity(kind=kind, name=name or f"{kind.value}-{uuid4().hex[:6]}")
        self.db.add(row)
        self.db.commit()
        return row

    def period(
        self,
        entity: RosterEntity,
        period_type: PeriodType,
        started_at: datetime,
        ended_at: datetime | None = None,
    ) -> StatusPeriod:
        row = StatusPeriod(
            entity_id=entity.id, period_type=period_type,
            started_at=started_at, ended_at=ended_at,
        )
        self.db.add(row)
        self.db.commit()
        return row

    def member(
        self,
        composite: RosterEntity,
        member: RosterEntity,
        joined_at: datetime,
        left_at: datetime | None = None,
    ) -> Membership:
        row = Membership(
            composite_id=composite.id, member_id=member.id, member_kind=member.kind,
            joined_at=joined_at, left_at=left_at,
        )
        self.db.add(row)
        self.db.commit()
        return row

    def booking(self, entity: RosterEntity, day: date) -> BookingRecord:
        row = BookingRecord(entity_id=entity.id, match_id=uuid4(), booked_on=day)
        self.db.add(row)
        self.db.commit()
        return row

    def employed(
        self, kind: EntityKind = EntityKind.WRESTLER, since: datetime = datetime(2024, 1, 1),
    ) -> RosterEntity:
        entity = self.entity(kind)
        self.period(entity, PeriodType.EMPLOYMENT, since)
        return entity


@pytest.fixture
def roster(test_db):
    return RosterFactory(test_db)
