"""
Entry model: the canonical, kind-tagged time or expense record.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

EntryKind = Literal["time", "expense"]
EntryStatus = Literal["pending", "approved", "rejected"]

ENTRY_KINDS: tuple[str, ...] = ("time", "expense")
ENTRY_STATUSES: tuple[str, ...] = ("pending", "approved", "rejected")


class Entry(BaseModel):
    """
    A normalized time entry or expense (immutable once created).

    Entries are produced by the EntryNormalizer during a load cycle and are
    only ever appended to the accumulated set, never mutated.

    Attributes:
        id: Unique per load cycle ("dispatch-{kind}-{parent_id}-{child_id}")
        user_id: Resolved technician id
        user_name: Resolved technician display name
        service_order_label: Display label of the parent's service order
        parent_id: Id of the dispatch the entry belongs to
        date: Effective timestamp (naive UTC)
        minutes_booked: Booked minutes, time entries only
        amount_spent: Spent amount, expense entries only
        hourly_rate: Rate used for earnings, time entries only
        description: Free-text description
        kind: "time" or "expense"
        status: "pending", "approved" or "rejected"
        created_at: Upstream creation time
        updated_at: Upstream last update time
    """

    id: str = Field(..., min_length=1)
    user_id: str
    user_name: str
    service_order_label: str | None = None
    parent_id: str
    date: datetime
    minutes_booked: float = Field(0.0, ge=0)
    amount_spent: float = Field(0.0, ge=0)
    hourly_rate: float = Field(0.0, ge=0)
    description: str = ""
    kind: EntryKind
    status: EntryStatus = "pending"
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def check_kind_exclusivity(self) -> "Entry":
        """Only the measure that belongs to the entry's kind may be non-zero."""
        if self.kind == "time" and self.amount_spent != 0:
            raise ValueError("time entries cannot carry an amount_spent")
        if self.kind == "expense" and (self.minutes_booked != 0 or self.hourly_rate != 0):
            raise ValueError("expense entries cannot carry minutes_booked or hourly_rate")
        return self

    @property
    def earnings(self) -> float:
        """Earnings of a time entry (minutes / 60 * hourly rate)."""
        if self.kind != "time":
            return 0.0
        return self.minutes_booked / 60 * self.hourly_rate

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "id": "dispatch-time-42-1001",
                "user_id": "7",
                "user_name": "Jane Doe",
                "service_order_label": "SO-310",
                "parent_id": "42",
                "date": "2025-11-17T08:30:00",
                "minutes_booked": 90,
                "amount_spent": 0,
                "hourly_rate": 50,
                "description": "Boiler inspection",
                "kind": "time",
                "status": "approved",
                "created_at": "2025-11-17T08:30:00",
                "updated_at": "2025-11-17T10:00:00"
            }
        }
