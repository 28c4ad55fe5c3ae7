"""
Source interfaces consumed by the loader.

Transport (REST, retries, timeouts) lives behind these interfaces and is
the caller's concern.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from src.core.models import ParentPage


class ParentRecordSource(ABC):
    """Paginated listing of dispatches for a date window."""

    @abstractmethod
    async def query(
        self,
        page_number: int,
        page_size: int,
        date_from: datetime,
        date_to: datetime,
    ) -> ParentPage:
        """
        Fetch one page of dispatches.

        Args:
            page_number: 1-based page number
            page_size: Maximum dispatches per page
            date_from: Window start
            date_to: Window end

        Returns:
            ParentPage; ``total_items`` may be missing or unreliable
        """


class ChildRecordSource(ABC):
    """Per-dispatch detail queries. Either call may raise."""

    @abstractmethod
    async def get_time_entries(self, parent_id: str) -> list[dict[str, Any]]:
        """Raw time entries of one dispatch."""

    @abstractmethod
    async def get_expenses(self, parent_id: str) -> list[dict[str, Any]]:
        """Raw expenses of one dispatch."""


class UserDirectory(ABC):
    """Flat user listing used for name resolution."""

    @abstractmethod
    async def list_users(self) -> list[dict[str, Any]]:
        """Raw user payloads (``{id, displayName}`` or full user shape)."""
