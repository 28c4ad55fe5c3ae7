"""
Unit tests for the filter engine and summary aggregator.

Includes property-based testing with hypothesis.
"""

from datetime import date, datetime, timedelta

import pytest
from hypothesis import given
from hypothesis import strategies as st

from src.core.models import DateRange, Entry, Filters
from src.core.query import entry_matches, filter_entries, summarize_by_user

USER_IDS = ["1", "2", "3", "7"]
KINDS = ["time", "expense"]
STATUSES = ["pending", "approved", "rejected"]
BASE_DAY = date(2025, 11, 1)


def build_entry(index: int, user_id: str, kind: str, status: str, offset_minutes: int, quantity: float) -> Entry:
    moment = datetime.combine(BASE_DAY, datetime.min.time()) + timedelta(minutes=offset_minutes)
    return Entry(
        id=f"entry-{index}",
        user_id=user_id,
        user_name=f"Name {user_id}",
        parent_id="1",
        date=moment,
        minutes_booked=quantity if kind == "time" else 0.0,
        amount_spent=quantity if kind == "expense" else 0.0,
        hourly_rate=50.0 if kind == "time" else 0.0,
        kind=kind,
        status=status,
        created_at=moment,
        updated_at=moment,
    )


entry_fields = st.tuples(
    st.sampled_from(USER_IDS),
    st.sampled_from(KINDS),
    st.sampled_from(STATUSES),
    st.integers(min_value=-2 * 24 * 60, max_value=40 * 24 * 60),
    st.floats(min_value=0, max_value=10_000, allow_nan=False, allow_infinity=False),
)

entry_lists = st.lists(entry_fields, max_size=40).map(
    lambda rows: [build_entry(i, *row) for i, row in enumerate(rows)]
)


@st.composite
def filters_strategy(draw):
    start = BASE_DAY + timedelta(days=draw(st.integers(min_value=-3, max_value=35)))
    end = start + timedelta(days=draw(st.integers(min_value=0, max_value=10)))
    return Filters(
        date_range=DateRange(from_date=start, to_date=end),
        users=frozenset(draw(st.sets(st.sampled_from(USER_IDS)))),
        kinds=frozenset(draw(st.sets(st.sampled_from(KINDS)))),
        statuses=frozenset(draw(st.sets(st.sampled_from(STATUSES)))),
    )


def expected_pass(entry: Entry, filters: Filters) -> bool:
    day_start = datetime.combine(filters.date_range.from_date, datetime.min.time())
    day_end = datetime.combine(filters.date_range.to_date, datetime.min.time()) + timedelta(days=1)
    in_range = day_start <= entry.date < day_end
    return (
        in_range
        and (not filters.users or entry.user_id in filters.users)
        and (not filters.kinds or entry.kind in filters.kinds)
        and (not filters.statuses or entry.status in filters.statuses)
    )


class TestFilterEngine:
    """Tests for filter_entries"""

    @given(entry_lists, filters_strategy())
    def test_property_entry_passes_iff_all_axes_match(self, entries, filters):
        """Property test: filtered set is exactly the entries satisfying every non-empty axis"""
        result = filter_entries(entries, filters)
        assert [e.id for e in result] == [e.id for e in entries if expected_pass(e, filters)]

    def test_range_is_inclusive_to_the_millisecond(self, make_entry):
        window = DateRange(from_date=date(2025, 11, 1), to_date=date(2025, 11, 30))
        filters = Filters(date_range=window)
        first = make_entry(date=datetime(2025, 11, 1, 0, 0, 0))
        last = make_entry(date=datetime(2025, 11, 30, 23, 59, 59, 999000))
        before = make_entry(date=datetime(2025, 10, 31, 23, 59, 59, 999999))
        after = make_entry(date=datetime(2025, 12, 1, 0, 0, 0))
        assert filter_entries([before, first, last, after], filters) == [first, last]

    def test_empty_axes_do_not_restrict(self, make_entry, november):
        entries = [make_entry(user_id="1"), make_entry(kind="expense", status="approved")]
        assert filter_entries(entries, Filters(date_range=november)) == entries

    def test_all_axes_combined(self, make_entry, november):
        match = make_entry(user_id="7", kind="time", status="approved")
        wrong_user = make_entry(user_id="8", kind="time", status="approved")
        wrong_kind = make_entry(user_id="7", kind="expense", status="approved")
        wrong_status = make_entry(user_id="7", kind="time", status="rejected")
        filters = Filters(date_range=november, users={"7"}, kinds={"time"}, statuses={"approved"})
        assert filter_entries([match, wrong_user, wrong_kind, wrong_status], filters) == [match]
        assert entry_matches(match, filters)
        assert not entry_matches(wrong_kind, filters)

    def test_filter_does_not_mutate_input(self, make_entry, november):
        entries = [make_entry(), make_entry(user_id="2")]
        snapshot = list(entries)
        filter_entries(entries, Filters(date_range=november, users={"2"}))
        assert entries == snapshot


class TestSummaryAggregator:
    """Tests for summarize_by_user"""

    @given(entry_lists, filters_strategy())
    def test_property_counts_add_up(self, entries, filters):
        """Property test: summary entry counts sum to the filtered set size"""
        filtered = filter_entries(entries, filters)
        summary = summarize_by_user(filtered)
        assert sum(row.entry_count for row in summary) == len(filtered)
        assert len({row.user_id for row in summary}) == len(summary)

    @given(entry_lists)
    def test_property_sorted_by_earnings(self, entries):
        """Property test: rows are sorted by total earnings, highest first"""
        earnings = [row.total_earnings for row in summarize_by_user(entries)]
        assert earnings == sorted(earnings, reverse=True)

    def test_totals_per_user(self, make_entry):
        entries = [
            make_entry(user_id="7", minutes_booked=90, hourly_rate=40),
            make_entry(user_id="7", kind="expense", amount_spent=12.5),
            make_entry(user_id="8", user_name="Omar Haddad", minutes_booked=30, hourly_rate=50),
        ]
        summary = summarize_by_user(entries)

        assert [row.user_id for row in summary] == ["7", "8"]
        jane = summary[0]
        assert jane.user_name == "Jane Doe"
        assert jane.total_minutes == 90
        assert jane.total_amount == 12.5
        assert jane.total_earnings == pytest.approx(60.0)
        assert jane.entry_count == 2
        assert summary[1].total_earnings == pytest.approx(25.0)

    def test_expenses_never_earn(self, make_entry):
        summary = summarize_by_user([make_entry(kind="expense", amount_spent=500)])
        assert summary[0].total_earnings == 0
        assert summary[0].total_amount == 500

    def test_ties_keep_first_seen_order(self, make_entry):
        entries = [make_entry(user_id="3", kind="expense"), make_entry(user_id="1", kind="expense")]
        assert [row.user_id for row in summarize_by_user(entries)] == ["3", "1"]

    def test_empty(self):
        assert summarize_by_user([]) == []
