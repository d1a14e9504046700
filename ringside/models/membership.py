"""Membership ORM - a member's stay in a tag team or stable.

Invariants:
    - Same interval rules as StatusPeriod, per (composite_id, member_id)
    - member_kind is copied from the member row so weighted counts need no join
    - At most one current row per pair (uq_memberships_current)
"""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ringside.core.domain_types import EntityKind
from ringside.db.base import Base, value_enum


class Membership(Base):
    __tablename__ = "memberships"
    __table_args__ = (
        Index(
            "uq_memberships_current", "composite_id", "member_id",
            unique=True,
            sqlite_where=text("left_at IS NULL"),
            postgresql_where=text("left_at IS NULL"),
        ),
        Index("ix_memberships_member", "member_id", "left_at"),
        CheckConstraint(
            "left_at IS NULL OR left_at >= joined_at",
            name="ck_memberships_range",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    composite_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("roster_entities.id"), nullable=False, index=True,
    )
    member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("roster_entities.id"), nullable=False,
    )
    member_kind: Mapped[EntityKind] = mapped_column(
        value_enum(EntityKind), nullable=False,
    )
    joined_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    left_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    composite: Mapped["RosterEntity"] = relationship(
        "RosterEntity", foreign_keys=[composite_id],
    )
    member: Mapped["RosterEntity"] = relationship(
        "RosterEntity", foreign_keys=[member_id],
    )
