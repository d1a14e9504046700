"""Roster Query Schemas - filters accepted by RosterQueries.search().

Invariants:
    - DateRange.end >= DateRange.start
    - status must belong to the kind's ladder ("unbookable" only for tag teams,
      activation statuses only for titles and stables)
    - available_on and as_of are mutually exclusive: available_on fixes the
      instant to the start of that day

Design Decisions:
    - status accepted as a plain string and converted to the kind's own enum
      member, since "retired" exists in both status families
"""

from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from ringside.core.domain_types import EntityKind
from ringside.core.status_rules import statuses_for


class DateRange(BaseModel):
    """Inclusive instant range for "active during" listings."""
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def check_order(self) -> "DateRange":
        if self.end < self.start:
            raise ValueError("end must not precede start")
        return self


class RosterListQuery(BaseModel):
    """Listing filter - every given field narrows the result."""
    kind: EntityKind
    status: str | None = None
    as_of: datetime | None = None
    during: DateRange | None = None
    available_on: date | None = None
    limit: int = Field(100, ge=1, le=1000)
    offset: int = Field(0, ge=0)

    @model_validator(mode="after")
    def check_status_for_kind(self) -> "RosterListQuery":
        if self.status is not None:
            allowed = {s.value: s for s in statuses_for(self.kind)}
            if self.status not in allowed:
                raise ValueError(
                    f"status '{self.status}' does not apply to {self.kind.value}",
                )
            self.status = allowed[self.status]
        if self.available_on is not None and self.as_of is not None:
            raise ValueError("available_on and as_of cannot be combined")
        return self
