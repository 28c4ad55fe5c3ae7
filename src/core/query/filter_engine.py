"""
FilterEngine - selects entries by date range, user, kind and status.
"""

from collections.abc import Iterable

from src.core.models import Entry, Filters


def entry_matches(entry: Entry, filters: Filters) -> bool:
    """
    Check one entry against every filter axis.

    The date must fall within the inclusive day range; each non-empty
    set axis must contain the entry's value.
    """
    if not filters.date_range.contains(entry.date):
        return False
    if filters.users and entry.user_id not in filters.users:
        return False
    if filters.kinds and entry.kind not in filters.kinds:
        return False
    if filters.statuses and entry.status not in filters.statuses:
        return False
    return True


def filter_entries(entries: Iterable[Entry], filters: Filters) -> list[Entry]:
    """
    Select the entries that pass ``filters``, preserving input order.

    Pure: safe to call repeatedly while the accumulated set is growing.
    """
    return [entry for entry in entries if entry_matches(entry, filters)]
