"""
JSON fixture source.

Serves dispatches, child records and users from a JSON document, for the
CLI and for tests. Expected format:

```json
{
  "users": [{"id": 7, "firstName": "Jane", "lastName": "Doe"}],
  "dispatches": [{"id": 42, "serviceOrderId": 310, "scheduledDate": "2025-11-17"}],
  "timeEntries": {"42": [{"id": 1, "technicianId": 7, "duration": 90}]},
  "expenses": {"42": [{"id": 5, "userId": 7, "amount": 42}]}
}
```

Dispatches with a ``scheduledDate`` (or ``date``) outside the requested
window are not listed; dispatches without one are always listed.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from src.core.models import ParentPage, ParentRecord
from src.observability.logger import get_logger
from src.utils.coercion import first_datetime

from .base import ChildRecordSource, ParentRecordSource, UserDirectory

logger = get_logger(__name__)


class JsonFixtureSource(ParentRecordSource, ChildRecordSource, UserDirectory):
    """
    In-memory implementation of all three loader sources.
    """

    def __init__(self, document: dict[str, Any]):
        """
        Initialize from a parsed fixture document.

        Args:
            document: Mapping with optional "users", "dispatches",
                "timeEntries" and "expenses" keys
        """
        if not isinstance(document, dict):
            raise ValueError("Fixture document must be a JSON object")

        self.users: list[dict[str, Any]] = list(document.get("users") or [])
        self.dispatches: list[dict[str, Any]] = list(document.get("dispatches") or [])
        self.time_entries: dict[str, list[dict[str, Any]]] = {
            str(key): value for key, value in (document.get("timeEntries") or {}).items()
        }
        self.expenses: dict[str, list[dict[str, Any]]] = {
            str(key): value for key, value in (document.get("expenses") or {}).items()
        }

    @classmethod
    def from_file(cls, path: str | Path) -> "JsonFixtureSource":
        """
        Load a fixture from disk.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not a JSON object
        """
        fixture_path = Path(path)
        if not fixture_path.exists():
            raise FileNotFoundError(f"Fixture file not found: {path}")

        with open(fixture_path) as f:
            document = json.load(f)

        logger.info(f"Loaded fixture {fixture_path}", extra={"fixture": str(fixture_path)})
        return cls(document)

    def _in_window(self, dispatch: dict[str, Any], date_from: datetime, date_to: datetime) -> bool:
        scheduled = first_datetime(dispatch.get("scheduledDate"), dispatch.get("date"))
        if scheduled is None:
            return True
        return date_from <= scheduled <= date_to

    async def query(
        self,
        page_number: int,
        page_size: int,
        date_from: datetime,
        date_to: datetime,
    ) -> ParentPage:
        matching = [d for d in self.dispatches if self._in_window(d, date_from, date_to)]
        start = (page_number - 1) * page_size
        items = [ParentRecord.model_validate(d) for d in matching[start:start + page_size]]
        return ParentPage(items=items, total_items=len(matching))

    async def get_time_entries(self, parent_id: str) -> list[dict[str, Any]]:
        return list(self.time_entries.get(str(parent_id), []))

    async def get_expenses(self, parent_id: str) -> list[dict[str, Any]]:
        return list(self.expenses.get(str(parent_id), []))

    async def list_users(self) -> list[dict[str, Any]]:
        return list(self.users)
