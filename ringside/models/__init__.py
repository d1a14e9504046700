"""ORM Models - SQLAlchemy declarative models for roster persistence.

Invariants:
    - All models inherit from Base (db/base.py)
    - RosterEntity is the aggregate root; periods, memberships and bookings
      are keyed by entity id
    - No status column anywhere: status is derived on read

Design Decisions:
    - One file per table for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from ringside.models.entity import RosterEntity  # noqa: F401
from ringside.models.period import StatusPeriod  # noqa: F401
from ringside.models.membership import Membership  # noqa: F401
from ringside.models.booking import BookingRecord  # noqa: F401
