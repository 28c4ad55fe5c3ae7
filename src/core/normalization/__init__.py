"""
Normalization of upstream child records into canonical Entries.
"""

from .normalizer import EntryNormalizer, is_placeholder_name, resolve_status, resolve_user_name
from .sanitizer import alias_table, sanitize_child

__all__ = [
    "EntryNormalizer",
    "is_placeholder_name",
    "resolve_status",
    "resolve_user_name",
    "alias_table",
    "sanitize_child",
]
