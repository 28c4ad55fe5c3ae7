"""
Alias resolution for raw child records.

Upstream time entries and expenses name the same concept in several ways
(a technician id may arrive as ``technicianId``, ``userId`` or
``createdBy``). This module is the only place those aliases are resolved.

Alias priority table (first non-empty alias wins):

================  ======================================  ========================
canonical field   time entry                              expense
================  ======================================  ========================
id                id                                      id
technician_id     technicianId, userId, createdBy         technicianId, userId, createdBy
technician_name   technicianName, userName, createdByName technicianName, userName, createdByName
status            status                                  status
is_approved       isApproved                              isApproved
event_time        startTime, date                         date
created_at        createdAt                               createdAt
updated_at        updatedAt                               updatedAt
quantity          duration                                amount
hourly_rate       hourlyRate                              (none)
description       description                             description
category          workType                                type
================  ======================================  ========================
"""

from typing import Any

from src.core.models import RawChildRecord

COMMON_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id",),
    "technician_id": ("technicianId", "userId", "createdBy"),
    "technician_name": ("technicianName", "userName", "createdByName"),
    "status": ("status",),
    "is_approved": ("isApproved",),
    "created_at": ("createdAt",),
    "updated_at": ("updatedAt",),
    "description": ("description",),
}

KIND_ALIASES: dict[str, dict[str, tuple[str, ...]]] = {
    "time": {
        "event_time": ("startTime", "date"),
        "quantity": ("duration",),
        "hourly_rate": ("hourlyRate",),
        "category": ("workType",),
    },
    "expense": {
        "event_time": ("date",),
        "quantity": ("amount",),
        "category": ("type",),
    },
}


def alias_table(kind: str) -> dict[str, tuple[str, ...]]:
    """
    Return the alias table for a record kind.

    Raises:
        ValueError: If the kind is not "time" or "expense"
    """
    if kind not in KIND_ALIASES:
        raise ValueError(f"Unsupported record kind: {kind}")
    return {**COMMON_ALIASES, **KIND_ALIASES[kind]}


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def pick_alias(raw: dict[str, Any], aliases: tuple[str, ...]) -> Any:
    """
    Return the value of the first alias present and non-empty in ``raw``.

    Values are not parsed here, so an unparseable value still shadows later
    aliases.
    """
    for alias in aliases:
        value = raw.get(alias)
        if _is_present(value):
            return value
    return None


def sanitize_child(raw: dict[str, Any], kind: str) -> RawChildRecord:
    """
    Collapse a raw upstream record onto the canonical RawChildRecord fields.

    Args:
        raw: Upstream payload of a time entry or expense
        kind: "time" or "expense"

    Returns:
        RawChildRecord; keys not covered by the alias table are kept in ``extra``
    """
    table = alias_table(kind)
    resolved = {field: pick_alias(raw, aliases) for field, aliases in table.items()}

    known = {alias for aliases in table.values() for alias in aliases}
    extra = {key: value for key, value in raw.items() if key not in known}

    return RawChildRecord(**resolved, extra=extra)
