"""
ParentRecord model representing one dispatch enumerated by pagination (ephemeral).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ParentRecord(BaseModel):
    """
    A dispatch: the unit of work whose time entries and expenses are loaded.

    Fetched fresh each load cycle and never persisted. Child collections
    may be embedded in the listing payload; when they are absent the
    fan-out stage fetches them per dispatch.

    Attributes:
        id: Dispatch id (None when the upstream payload had none)
        service_order_id: Owning service order id, if any
        dispatch_number: Human-facing dispatch number, if any
        time_entries: Embedded raw time entries, or None if not embedded
        expenses: Embedded raw expenses, or None if not embedded
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = None
    service_order_id: str | None = Field(None, alias="serviceOrderId")
    dispatch_number: str | None = Field(None, alias="dispatchNumber")
    time_entries: list[Any] | None = Field(None, alias="timeEntries")
    expenses: list[Any] | None = None

    @field_validator("id", "service_order_id", "dispatch_number", mode="before")
    @classmethod
    def stringify_identifier(cls, v):
        """Identifiers arrive as ints or strings; empty values mean absent."""
        if v is None or isinstance(v, bool) or v == "":
            return None
        return str(v)

    @field_validator("time_entries", "expenses", mode="before")
    @classmethod
    def drop_non_list(cls, v):
        """Anything that is not a list is treated as not embedded."""
        return v if isinstance(v, list) else None

    @property
    def service_order_label(self) -> str | None:
        """Display label: "SO-{service_order_id}", else the dispatch number."""
        if self.service_order_id is not None:
            return f"SO-{self.service_order_id}"
        return self.dispatch_number


class ParentPage(BaseModel):
    """
    One page of dispatches returned by a ParentRecordSource.

    Attributes:
        items: Dispatches on this page
        total_items: Total reported by the source (may be missing or wrong)
    """

    items: list[ParentRecord] = Field(default_factory=list)
    total_items: int | None = None
