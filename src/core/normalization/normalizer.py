"""
EntryNormalizer - maps raw child records onto canonical Entries.
"""

import hashlib
import re
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any

from src.core.models import ENTRY_STATUSES, Entry, ParentRecord, RawChildRecord
from src.core.models.directory_user import UNKNOWN_USER_NAME
from src.core.normalization.sanitizer import sanitize_child
from src.observability.logger import get_logger
from src.utils.coercion import coerce_number, first_datetime, utc_now

logger = get_logger(__name__)

DEFAULT_HOURLY_RATE = 50.0
UNKNOWN_USER_ID = "unknown"

DEFAULT_DESCRIPTIONS = {
    "time": "Time entry",
    "expense": "Expense",
}

_PLACEHOLDER_NAME = re.compile(r"^User\s+\S+$")


def is_placeholder_name(name: Any) -> bool:
    """True for names that carry no information ("Unknown User", "User 12")."""
    if not isinstance(name, str):
        return False
    name = name.strip()
    return name == UNKNOWN_USER_NAME or bool(_PLACEHOLDER_NAME.match(name))


def resolve_user_name(raw_name: Any, user_id: str, directory_names: Mapping[str, str]) -> str:
    """
    Resolve a display name.

    Order: a real name on the record, then the directory name for the id,
    then the synthesized "User {id}". Placeholder names on the record are
    treated as absent, and placeholder names in the directory are skipped.
    """
    if raw_name is not None and not isinstance(raw_name, str):
        raw_name = str(raw_name)
    if raw_name and raw_name.strip() and not is_placeholder_name(raw_name):
        return raw_name.strip()

    directory_name = directory_names.get(user_id)
    if directory_name and not is_placeholder_name(directory_name):
        return directory_name

    return f"User {user_id}"


def resolve_status(status: Any, is_approved: Any) -> str:
    """
    Resolve an entry status.

    An explicit status wins; otherwise the approval flag decides between
    "approved" and "pending". Unrecognized values become "pending".
    """
    if status is None:
        approved = is_approved is True or str(is_approved).strip().lower() == "true"
        status = "approved" if approved else "pending"

    normalized = str(status).strip().lower()
    if normalized not in ENTRY_STATUSES:
        return "pending"
    return normalized


class EntryNormalizer:
    """
    Maps one raw child record plus its parent context onto an Entry.

    The normalizer never raises on malformed payloads: ids, names, numbers
    and timestamps all fall back to defaults. The only mutable input is the
    directory name map, which is read at normalization time.
    """

    def __init__(
        self,
        directory_names: Mapping[str, str] | None = None,
        default_hourly_rate: float = DEFAULT_HOURLY_RATE,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize normalizer.

        Args:
            directory_names: user id -> display name lookup
            default_hourly_rate: Rate used when a time entry carries none
            clock: Returns "now" for timestamp fallbacks
        """
        self.directory_names = directory_names if directory_names is not None else {}
        self.default_hourly_rate = default_hourly_rate
        self.clock = clock

    def normalize(self, raw: dict[str, Any], parent: ParentRecord, kind: str, index: int = 0) -> Entry:
        """
        Normalize a single raw record.

        Args:
            raw: Upstream payload
            parent: Dispatch the record belongs to (must have an id)
            kind: "time" or "expense"
            index: Position of the record in its collection, used for
                deterministic ids when the record has none

        Returns:
            Canonical Entry
        """
        record = sanitize_child(raw, kind)
        now = self.clock()

        user_id = str(record.technician_id) if record.technician_id is not None else UNKNOWN_USER_ID
        user_name = resolve_user_name(record.technician_name, user_id, self.directory_names)

        created_at = first_datetime(record.created_at) or now
        updated_at = first_datetime(record.updated_at, record.created_at) or now
        date = first_datetime(record.event_time, record.created_at) or now

        quantity = coerce_number(record.quantity)
        if kind == "time":
            minutes_booked, amount_spent = quantity, 0.0
            hourly_rate = coerce_number(record.hourly_rate) or self.default_hourly_rate
        else:
            minutes_booked, amount_spent = 0.0, quantity
            hourly_rate = 0.0

        return Entry(
            id=self._entry_id(record, parent.id, kind, index),
            user_id=user_id,
            user_name=user_name,
            service_order_label=parent.service_order_label,
            parent_id=parent.id,
            date=date,
            minutes_booked=minutes_booked,
            amount_spent=amount_spent,
            hourly_rate=hourly_rate,
            description=self._description(record, kind),
            kind=kind,
            status=resolve_status(record.status, record.is_approved),
            created_at=created_at,
            updated_at=updated_at,
        )

    def normalize_parent(
        self,
        parent: ParentRecord,
        time_records: Iterable[Any],
        expense_records: Iterable[Any],
    ) -> list[Entry]:
        """
        Normalize all children of one dispatch: time entries, then expenses.

        Records that are not mappings are skipped with a warning.
        """
        entries: list[Entry] = []
        for kind, records in (("time", time_records), ("expense", expense_records)):
            for index, raw in enumerate(records):
                if not isinstance(raw, dict):
                    logger.warning(
                        f"Skipping malformed {kind} record on dispatch {parent.id}",
                        extra={"parent_id": parent.id, "kind": kind, "index": index},
                    )
                    continue
                entries.append(self.normalize(raw, parent, kind, index))
        return entries

    @staticmethod
    def _entry_id(record: RawChildRecord, parent_id: str, kind: str, index: int) -> str:
        if record.id is not None:
            return f"dispatch-{kind}-{parent_id}-{record.id}"
        digest = hashlib.sha1(f"{parent_id}|{kind}|{index}".encode()).hexdigest()[:12]
        return f"dispatch-{kind}-{parent_id}-gen{digest}"

    @staticmethod
    def _description(record: RawChildRecord, kind: str) -> str:
        for value in (record.description, record.category):
            if value is not None and str(value).strip():
                return str(value)
        return DEFAULT_DESCRIPTIONS[kind]
