"""
RawChildRecord model: an upstream time entry or expense after alias resolution.
"""

from typing import Any

from pydantic import BaseModel, Field


class RawChildRecord(BaseModel):
    """
    A child record of either kind with every known alias collapsed onto
    one canonical field.

    Built exclusively by ``src.core.normalization.sanitizer.sanitize_child``.
    Values are kept as the upstream sent them; coercion to numbers,
    datetimes and statuses happens in the EntryNormalizer.

    Attributes:
        id: Child record id, if any
        technician_id: First present of technicianId / userId / createdBy
        technician_name: First present of technicianName / userName / createdByName
        status: Explicit status value, if any
        is_approved: Approval flag, if any
        event_time: Start time (time) or expense date (expense)
        created_at: Upstream creation time
        updated_at: Upstream update time
        quantity: Duration in minutes (time) or amount (expense)
        hourly_rate: Hourly rate (time entries only)
        description: Free-text description
        category: Work type (time) or expense type (expense)
    """

    id: Any = None
    technician_id: Any = None
    technician_name: Any = None
    status: Any = None
    is_approved: Any = None
    event_time: Any = None
    created_at: Any = None
    updated_at: Any = None
    quantity: Any = None
    hourly_rate: Any = None
    description: Any = None
    category: Any = None
    extra: dict[str, Any] = Field(default_factory=dict)
