"""
Pytest configuration and fixtures for the time/expense loader tests

This module provides in-memory fake sources and entry factories shared by
unit, integration and E2E tests.
"""
import asyncio
from datetime import date, datetime
from typing import Any

import pytest

from src.core.models import DateRange, Entry, ParentPage, ParentRecord
from src.loading.sources.base import ChildRecordSource, ParentRecordSource, UserDirectory


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that run full load cycles"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that go through the CLI"
    )


# =======================
# FAKE SOURCES
# =======================

class FakeDispatchSource(ParentRecordSource):
    """
    Serves a fixed list of dispatches in pages.

    Args:
        dispatches: Raw dispatch payloads
        report_total: Whether pages carry total_items
        fail_on_page: Page number that raises ConnectionError
    """

    def __init__(self, dispatches: list[dict[str, Any]], report_total: bool = True, fail_on_page: int | None = None):
        self.dispatches = dispatches
        self.report_total = report_total
        self.fail_on_page = fail_on_page
        self.calls: list[int] = []

    async def query(self, page_number, page_size, date_from, date_to) -> ParentPage:
        self.calls.append(page_number)
        if page_number == self.fail_on_page:
            raise ConnectionError("dispatch listing unavailable")
        start = (page_number - 1) * page_size
        items = [ParentRecord.model_validate(d) for d in self.dispatches[start:start + page_size]]
        return ParentPage(items=items, total_items=len(self.dispatches) if self.report_total else None)


class EndlessDispatchSource(ParentRecordSource):
    """Always returns full pages and claims a huge total."""

    def __init__(self, total_items: int = 1_000_000):
        self.total_items = total_items
        self.calls: list[int] = []

    async def query(self, page_number, page_size, date_from, date_to) -> ParentPage:
        self.calls.append(page_number)
        items = [ParentRecord(id=f"{page_number}-{i}") for i in range(page_size)]
        return ParentPage(items=items, total_items=self.total_items)


class WindowedDispatchSource(ParentRecordSource):
    """
    Serves a different dispatch list per window start day.

    Args:
        by_day: window start day -> raw dispatch payloads
        gates: window start day -> event every query for that day waits on
    """

    def __init__(
        self,
        by_day: dict[date, list[dict[str, Any]]],
        gates: dict[date, asyncio.Event] | None = None,
    ):
        self.by_day = by_day
        self.gates = gates or {}
        self.calls: list[tuple[date, int]] = []

    async def query(self, page_number, page_size, date_from, date_to) -> ParentPage:
        self.calls.append((date_from.date(), page_number))
        gate = self.gates.get(date_from.date())
        if gate is not None:
            await gate.wait()
        dispatches = self.by_day.get(date_from.date(), [])
        start = (page_number - 1) * page_size
        items = [ParentRecord.model_validate(d) for d in dispatches[start:start + page_size]]
        return ParentPage(items=items, total_items=len(dispatches))


class FakeChildSource(ChildRecordSource):
    """
    Serves child records from dictionaries keyed by dispatch id.

    Args:
        time_entries: dispatch id -> raw time entries
        expenses: dispatch id -> raw expenses
        failing: dispatch ids whose fetches raise
        gate: When set, fetches for ``gated`` ids wait on this event
        gated: dispatch ids held back by ``gate``
    """

    def __init__(
        self,
        time_entries: dict[str, list[dict[str, Any]]] | None = None,
        expenses: dict[str, list[dict[str, Any]]] | None = None,
        failing: set[str] | None = None,
        gate: asyncio.Event | None = None,
        gated: set[str] | None = None,
    ):
        self.time_entries = time_entries or {}
        self.expenses = expenses or {}
        self.failing = failing or set()
        self.gate = gate
        self.gated = gated or set()
        self.started: list[str] = []
        self.calls: list[tuple[str, str]] = []

    async def _serve(self, kind: str, parent_id: str, table: dict) -> list[dict[str, Any]]:
        self.calls.append((kind, parent_id))
        self.started.append(parent_id)
        if self.gate is not None and parent_id in self.gated:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        if parent_id in self.failing:
            raise TimeoutError(f"{kind} fetch for {parent_id} timed out")
        return list(table.get(parent_id, []))

    async def get_time_entries(self, parent_id):
        return await self._serve("time", parent_id, self.time_entries)

    async def get_expenses(self, parent_id):
        return await self._serve("expense", parent_id, self.expenses)


class FakeDirectory(UserDirectory):
    """User listing that can be made to fail."""

    def __init__(self, users: list[dict[str, Any]] | None = None, fail: bool = False):
        self.users = users or []
        self.fail = fail
        self.calls = 0

    async def list_users(self):
        self.calls += 1
        if self.fail:
            raise ConnectionError("directory unavailable")
        return self.users


# =======================
# FIXTURES
# =======================

@pytest.fixture(scope="session")
def fakes():
    """Namespace of the fake source classes"""
    class Fakes:
        DispatchSource = FakeDispatchSource
        EndlessDispatchSource = EndlessDispatchSource
        WindowedDispatchSource = WindowedDispatchSource
        ChildSource = FakeChildSource
        Directory = FakeDirectory
    return Fakes


@pytest.fixture(scope="session")
def november() -> DateRange:
    """Load window covering November 2025"""
    return DateRange(from_date=date(2025, 11, 1), to_date=date(2025, 11, 30))


@pytest.fixture(scope="session")
def fixed_clock():
    """Clock that always returns 2025-11-20 12:00 UTC"""
    return lambda: datetime(2025, 11, 20, 12, 0, 0)


@pytest.fixture(scope="session")
def make_entry():
    """Factory for Entry objects with sensible defaults"""
    counter = {"n": 0}

    def factory(**overrides) -> Entry:
        counter["n"] += 1
        kind = overrides.get("kind", "time")
        values = {
            "id": f"entry-{counter['n']}",
            "user_id": "7",
            "user_name": "Jane Doe",
            "parent_id": "42",
            "date": datetime(2025, 11, 17, 9, 0),
            "minutes_booked": 60.0 if kind == "time" else 0.0,
            "amount_spent": 0.0 if kind == "time" else 25.0,
            "hourly_rate": 50.0 if kind == "time" else 0.0,
            "description": "Work",
            "kind": kind,
            "status": "pending",
            "created_at": datetime(2025, 11, 17, 9, 0),
            "updated_at": datetime(2025, 11, 17, 9, 0),
        }
        values.update(overrides)
        return Entry(**values)

    return factory


@pytest.fixture
def sample_users() -> list[dict[str, Any]]:
    """Directory payload with full and compact user shapes"""
    return [
        {"id": 7, "firstName": "Jane", "lastName": "Doe", "email": "jane@example.com",
         "roles": [{"name": "Technician"}], "hourlyRate": 65},
        {"id": "8", "displayName": "Omar Haddad"},
        {"id": 9, "email": "no.name@example.com"},
    ]
