"""
PaginationFetcher - collects every dispatch of a date window.
"""

from collections.abc import AsyncIterator, Callable
from typing import NamedTuple, Optional

from src.core.models import DateRange, ParentRecord
from src.observability.logger import get_logger
from src.observability.metrics import MetricsCollector

from .cancellation import CancellationToken
from .sources.base import ParentRecordSource

logger = get_logger(__name__)

PageCallback = Callable[[int, int], None]


class PageResult(NamedTuple):
    """One fetched page plus running totals."""

    page_number: int
    items: list[ParentRecord]
    collected: int
    total: int


class PaginationFetcher:
    """
    Drives a ParentRecordSource page by page.

    Stops when the collected count reaches the reported total, when a
    page comes back short, or after MAX_PAGES pages. The page cap guards
    against a source that never stops returning full pages; reaching it is
    logged, not raised.
    """

    MAX_PAGES = 20

    def __init__(
        self,
        source: ParentRecordSource,
        page_size: int = 100,
        metrics: Optional[MetricsCollector] = None,
    ):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.source = source
        self.page_size = page_size
        self.metrics = metrics or MetricsCollector()

    async def iter_pages(self, window: DateRange, token: CancellationToken) -> AsyncIterator[PageResult]:
        """
        Yield pages of ``window`` in page order.

        ``total`` on each result is the total reported by the source, or the
        collected count when the source reports none. Returns early, without
        requesting another page, once the token is cancelled.

        Raises:
            Exception: Whatever the source raises; pagination failures are
                fatal to the cycle
        """
        collected = 0

        for page_number in range(1, self.MAX_PAGES + 1):
            if token.cancelled:
                logger.info(
                    f"Pagination superseded at page {page_number}",
                    extra={"generation": token.generation},
                )
                return

            page = await self.source.query(page_number, self.page_size, window.start, window.end)
            self.metrics.record_page()
            collected += len(page.items)

            total = page.total_items
            yield PageResult(
                page_number=page_number,
                items=list(page.items),
                collected=collected,
                total=total if total is not None else collected,
            )

            if total is not None and collected >= total:
                return
            if len(page.items) < self.page_size:
                return

        self.metrics.record_page_cap()
        logger.warning(
            f"Page cap of {self.MAX_PAGES} reached with {collected} dispatches collected",
            extra={"generation": token.generation, "collected": collected},
        )

    async def fetch_all(
        self,
        window: DateRange,
        token: CancellationToken,
        on_page: Optional[PageCallback] = None,
    ) -> list[ParentRecord]:
        """
        Fetch all dispatches of ``window`` as one ordered list.

        Args:
            window: Day range to list dispatches for
            token: Cancellation token of the calling cycle
            on_page: Called after each page with (collected, total)

        Returns:
            Concatenated dispatches; partial if the token was cancelled
        """
        parents: list[ParentRecord] = []
        async for page in self.iter_pages(window, token):
            parents.extend(page.items)
            if on_page is not None:
                on_page(page.collected, page.total)
        return parents
