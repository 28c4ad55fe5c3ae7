"""
Pure query functions over the accumulated entry set.
"""

from .filter_engine import entry_matches, filter_entries
from .summary import summarize_by_user

__all__ = ["entry_matches", "filter_entries", "summarize_by_user"]
