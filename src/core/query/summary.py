"""
SummaryAggregator - per-user totals over a filtered entry set.
"""

from collections.abc import Iterable

from src.core.models import Entry, SummaryRow


def summarize_by_user(entries: Iterable[Entry]) -> list[SummaryRow]:
    """
    Group entries by user id and total them.

    Earnings only accrue from time entries (minutes / 60 * hourly rate).
    Rows are sorted by total earnings, highest first; ties keep the order
    in which users were first seen.

    Args:
        entries: Entries to aggregate (usually the output of filter_entries)

    Returns:
        One SummaryRow per user id
    """
    rows: dict[str, SummaryRow] = {}

    for entry in entries:
        row = rows.get(entry.user_id)
        if row is None:
            row = SummaryRow(user_id=entry.user_id, user_name=entry.user_name)
            rows[entry.user_id] = row

        row.total_minutes += entry.minutes_booked
        row.total_amount += entry.amount_spent
        row.total_earnings += entry.earnings
        row.entry_count += 1

    return sorted(rows.values(), key=lambda row: row.total_earnings, reverse=True)
