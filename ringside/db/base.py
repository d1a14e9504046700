"""SQLAlchemy Declarative Base - shared base class for all ORM models.

Invariants:
    - All models inherit from Base
    - Base is the single source of truth for table metadata
    - Enum columns persist the enum value ("tag_team"), never the member name

Design Decisions:
    - Separate file for Base: avoids circular imports between models
"""

from enum import Enum

from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all Ringside ORM models."""
    pass


def value_enum(enum_cls: type[Enum], length: int = 20) -> SAEnum:
    """VARCHAR-backed enum column storing .value (no native DB enum type)."""
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=length,
        validate_strings=True,
        values_callable=lambda members: [m.value for m in members],
    )
