"""
SummaryRow model: per-user totals derived from a filtered entry set.
"""

from pydantic import BaseModel


class SummaryRow(BaseModel):
    """
    Totals for one user (derived, never stored).

    Attributes:
        user_id: Technician id
        user_name: Name taken from the user's first entry
        total_minutes: Sum of minutes booked
        total_amount: Sum of expense amounts
        total_earnings: Sum of minutes / 60 * hourly rate over time entries
        entry_count: Number of entries
    """

    user_id: str
    user_name: str
    total_minutes: float = 0.0
    total_amount: float = 0.0
    total_earnings: float = 0.0
    entry_count: int = 0
