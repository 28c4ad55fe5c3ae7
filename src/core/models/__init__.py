"""
Core data models for the time/expense loader.

All models use Pydantic for runtime validation and type safety.
"""

from .directory_user import DirectoryUser
from .entry import ENTRY_KINDS, ENTRY_STATUSES, Entry, EntryKind, EntryStatus
from .filters import DateRange, Filters
from .parent_record import ParentPage, ParentRecord
from .progress import LoaderState, Progress
from .raw_child_record import RawChildRecord
from .summary_row import SummaryRow

__all__ = [
    "ParentRecord",
    "ParentPage",
    "RawChildRecord",
    "Entry",
    "EntryKind",
    "EntryStatus",
    "ENTRY_KINDS",
    "ENTRY_STATUSES",
    "DirectoryUser",
    "DateRange",
    "Filters",
    "Progress",
    "LoaderState",
    "SummaryRow",
]
