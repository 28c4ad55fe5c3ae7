"""
Filters value object applied to the accumulated entry set.
"""

from datetime import date, datetime, time

from pydantic import BaseModel, Field, model_validator

from .entry import EntryKind, EntryStatus

END_OF_DAY = time(23, 59, 59, 999000)


class DateRange(BaseModel):
    """
    Inclusive calendar-day range.

    Attributes:
        from_date: First day (starts at 00:00:00.000)
        to_date: Last day (ends at 23:59:59.999)
    """

    from_date: date
    to_date: date

    @model_validator(mode="after")
    def check_order(self) -> "DateRange":
        if self.from_date > self.to_date:
            raise ValueError("from_date must not be after to_date")
        return self

    @property
    def start(self) -> datetime:
        return datetime.combine(self.from_date, time.min)

    @property
    def end(self) -> datetime:
        return datetime.combine(self.to_date, END_OF_DAY)

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    class Config:
        frozen = True


class Filters(BaseModel):
    """
    Selection criteria for the report view.

    An empty set on any axis means no restriction on that axis.

    Attributes:
        date_range: Inclusive day range the entry date must fall in
        users: Allowed user ids
        kinds: Allowed entry kinds
        statuses: Allowed entry statuses
    """

    date_range: DateRange
    users: frozenset[str] = Field(default_factory=frozenset)
    kinds: frozenset[EntryKind] = Field(default_factory=frozenset)
    statuses: frozenset[EntryStatus] = Field(default_factory=frozenset)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "date_range": {"from_date": "2025-11-01", "to_date": "2025-11-30"},
                "users": ["7"],
                "kinds": ["time"],
                "statuses": []
            }
        }
