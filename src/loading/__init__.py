"""
Incremental streaming loader for dispatch time entries and expenses.
"""

from .cancellation import CancellationToken, GenerationCounter
from .directory import UserDirectoryCache
from .fanout import BatchFanoutFetcher
from .orchestrator import LoadEvent, StreamOrchestrator
from .pagination import PageResult, PaginationFetcher
from .store import EntryStore, StaleCycleError

__all__ = [
    "CancellationToken",
    "GenerationCounter",
    "UserDirectoryCache",
    "BatchFanoutFetcher",
    "LoadEvent",
    "StreamOrchestrator",
    "PageResult",
    "PaginationFetcher",
    "EntryStore",
    "StaleCycleError",
]
