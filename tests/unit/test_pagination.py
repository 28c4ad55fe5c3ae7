"""
Unit tests for the PaginationFetcher.
"""

import asyncio

import pytest

from src.loading import GenerationCounter, PaginationFetcher


def dispatches(count: int) -> list[dict]:
    return [{"id": i} for i in range(1, count + 1)]


class TestPaginationFetcher:
    """Tests for page-by-page dispatch collection"""

    def test_stops_at_page_cap_without_error(self, fakes, november):
        """Test a source that always returns full pages stops after exactly MAX_PAGES pages"""
        source = fakes.EndlessDispatchSource(total_items=10 * PaginationFetcher.MAX_PAGES * 50)
        fetcher = PaginationFetcher(source, page_size=10)
        token = GenerationCounter().advance()

        parents = asyncio.run(fetcher.fetch_all(november, token))

        assert source.calls == list(range(1, PaginationFetcher.MAX_PAGES + 1))
        assert len(parents) == 10 * PaginationFetcher.MAX_PAGES

    def test_stops_on_short_page(self, fakes, november):
        """Test a short page ends pagination when no total is reported"""
        source = fakes.DispatchSource(dispatches(25), report_total=False)
        fetcher = PaginationFetcher(source, page_size=10)

        parents = asyncio.run(fetcher.fetch_all(november, GenerationCounter().advance()))

        assert source.calls == [1, 2, 3]
        assert [p.id for p in parents] == [str(i) for i in range(1, 26)]

    def test_stops_when_total_reached(self, fakes, november):
        """Test an exact multiple of the page size does not request an empty page"""
        source = fakes.DispatchSource(dispatches(20))
        fetcher = PaginationFetcher(source, page_size=10)

        parents = asyncio.run(fetcher.fetch_all(november, GenerationCounter().advance()))

        assert source.calls == [1, 2]
        assert len(parents) == 20

    def test_empty_window(self, fakes, november):
        source = fakes.DispatchSource([])
        parents = asyncio.run(PaginationFetcher(source).fetch_all(november, GenerationCounter().advance()))
        assert parents == []
        assert source.calls == [1]

    def test_on_page_reports_running_totals(self, fakes, november):
        source = fakes.DispatchSource(dispatches(25), report_total=False)
        seen = []

        asyncio.run(
            PaginationFetcher(source, page_size=10).fetch_all(
                november, GenerationCounter().advance(), on_page=lambda c, t: seen.append((c, t))
            )
        )

        assert seen == [(10, 10), (20, 20), (25, 25)]

    def test_cancelled_token_requests_nothing(self, fakes, november):
        counter = GenerationCounter()
        token = counter.advance()
        counter.advance()
        source = fakes.DispatchSource(dispatches(5))

        parents = asyncio.run(PaginationFetcher(source).fetch_all(november, token))

        assert parents == []
        assert source.calls == []

    def test_source_errors_propagate(self, fakes, november):
        source = fakes.DispatchSource(dispatches(30), fail_on_page=2)
        with pytest.raises(ConnectionError):
            asyncio.run(PaginationFetcher(source, page_size=10).fetch_all(november, GenerationCounter().advance()))

    def test_invalid_page_size(self, fakes):
        with pytest.raises(ValueError, match="page_size"):
            PaginationFetcher(fakes.DispatchSource([]), page_size=0)
