"""
Streaming load orchestration for the time/expense report.

Coordinates the flow: directory gate → pagination → batch fan-out →
normalization → accumulated entry store, publishing progress as it goes.
"""

import asyncio
import time
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from src.config.settings import LoaderSettings
from src.core.models import DateRange, Entry, Filters, LoaderState, Progress, SummaryRow
from src.core.normalization import EntryNormalizer
from src.core.query import filter_entries, summarize_by_user
from src.observability.logger import get_logger
from src.observability.metrics import MetricsCollector
from src.utils.coercion import utc_now

from .cancellation import CancellationToken, GenerationCounter
from .directory import UserDirectoryCache
from .fanout import BatchFanoutFetcher
from .pagination import PaginationFetcher
from .sources.base import ChildRecordSource, ParentRecordSource, UserDirectory
from .store import EntryStore

logger = get_logger(__name__)

ProgressListener = Callable[[Progress], None]


class LoadEvent(BaseModel):
    """
    One step of a load cycle as produced by StreamOrchestrator.stream().

    Attributes:
        state: Loader state after this step
        progress: Progress to publish, or None for a pure state transition
        entries: Entries produced by this step (one fan-out batch)
    """

    state: LoaderState
    progress: Progress | None = None
    entries: tuple[Entry, ...] = ()

    class Config:
        frozen = True


class StreamOrchestrator:
    """
    Main load cycle orchestrator.

    Handles the complete flow:
    1. Wait for the user directory load to settle
    2. Page through the dispatches of the date window
    3. Fetch and normalize child records batch by batch
    4. Append each batch to the EntryStore and publish progress

    Starting a new cycle supersedes the running one. The superseded cycle
    finishes the source calls it already issued, but nothing it produces
    afterwards reaches the store or the published progress.
    """

    def __init__(
        self,
        parent_source: ParentRecordSource,
        child_source: ChildRecordSource,
        directory: UserDirectory | UserDirectoryCache,
        settings: Optional[LoaderSettings] = None,
        metrics: Optional[MetricsCollector] = None,
        store: Optional[EntryStore] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize orchestrator.

        Args:
            parent_source: Paginated dispatch listing
            child_source: Per-dispatch time entry / expense queries
            directory: User directory, or an already shared cache of one
            settings: Loader tunables (defaults when omitted)
            metrics: Metrics collector
            store: Accumulated entry store (a fresh one when omitted)
            clock: "Now" used for timestamp fallbacks
        """
        self.settings = settings or LoaderSettings()
        self.metrics = metrics or MetricsCollector()
        self.child_source = child_source
        self.directory = directory if isinstance(directory, UserDirectoryCache) else UserDirectoryCache(directory)
        self.entries = store or EntryStore()
        self.clock = clock

        self.pagination = PaginationFetcher(parent_source, self.settings.page_size, self.metrics)

        self._generations = GenerationCounter()
        self._state = LoaderState.IDLE
        self._progress = Progress()
        self._progress_listeners: list[ProgressListener] = []
        self._task: Optional[asyncio.Task] = None

        logger.info(
            f"Initialized StreamOrchestrator (page size: {self.settings.page_size}, "
            f"batch size: {self.settings.batch_size})"
        )

    # =======================
    # CONSUMER INTERFACE
    # =======================

    @property
    def state(self) -> LoaderState:
        return self._state

    @property
    def progress(self) -> Progress:
        return self._progress

    @property
    def is_loading(self) -> bool:
        return self._state in (LoaderState.PAGINATING, LoaderState.FETCHING_DETAILS)

    @property
    def is_streaming(self) -> bool:
        return self._state == LoaderState.FETCHING_DETAILS

    def subscribe_progress(self, listener: ProgressListener) -> Callable[[], None]:
        """
        Register a progress listener.

        Returns:
            Function that removes the listener
        """
        self._progress_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._progress_listeners:
                self._progress_listeners.remove(listener)

        return unsubscribe

    def filter(self, filters: Filters) -> list[Entry]:
        """Entries of the current accumulated set that pass ``filters``."""
        return filter_entries(self.entries.snapshot(), filters)

    def summarize(self, entries: list[Entry]) -> list[SummaryRow]:
        """Per-user totals of ``entries``."""
        return summarize_by_user(entries)

    def sorted_entries(self) -> list[Entry]:
        """Accumulated entries, most recent first."""
        return self.entries.sorted_by_date()

    # =======================
    # CYCLE CONTROL
    # =======================

    def start(self, window: DateRange) -> asyncio.Task:
        """
        Start a cycle for ``window`` in the running event loop.

        The previous cycle is superseded immediately, before this call
        returns.

        Returns:
            Task resolving to the cycle's final Progress
        """
        token = self._generations.advance()
        self._task = asyncio.ensure_future(self._run(window, token))
        return self._task

    async def load(self, window: DateRange) -> Progress:
        """
        Run a cycle for ``window`` to completion.

        Returns:
            The published Progress when the cycle ends (the newer cycle's
            progress if this one was superseded)
        """
        return await self._run(window, self._generations.advance())

    async def wait(self) -> Optional[Progress]:
        """Wait for the most recently started cycle, if any."""
        if self._task is None:
            return None
        return await self._task

    async def _run(self, window: DateRange, token: CancellationToken) -> Progress:
        started = time.monotonic()
        logger.info(
            f"Load cycle {token.generation} requested for "
            f"{window.from_date.isoformat()}..{window.to_date.isoformat()}",
            extra={"generation": token.generation},
        )

        await self.directory.ensure_loaded()
        if token.cancelled:
            self._finish(token, "superseded", started)
            return self._progress

        self.entries.reset(token.generation)
        self.metrics.record_accumulated(0)

        try:
            async with aclosing(self.stream(window, token)) as events:
                async for event in events:
                    if token.cancelled:
                        break
                    self._apply(token, event)
        except Exception as e:
            logger.error(
                f"Load cycle {token.generation} failed: {e}",
                extra={"generation": token.generation, "error_type": type(e).__name__},
                exc_info=True,
            )
            if not token.cancelled:
                self._apply(token, self._error_event(e))

        if token.cancelled:
            outcome = "superseded"
        elif self._state == LoaderState.ERROR:
            outcome = "error"
        elif self._progress.total == 0:
            outcome = "empty"
        else:
            outcome = "done"
        self._finish(token, outcome, started)
        return self._progress

    def _apply(self, token: CancellationToken, event: LoadEvent) -> None:
        if event.entries:
            self.entries.append(token.generation, event.entries)
            self.metrics.record_accumulated(len(self.entries))
        self._state = event.state
        if event.progress is not None:
            self._publish(event.progress)

    def _publish(self, progress: Progress) -> None:
        self._progress = progress
        for listener in list(self._progress_listeners):
            try:
                listener(progress)
            except Exception as e:
                logger.error(f"Progress listener failed: {e}", exc_info=True)

    def _finish(self, token: CancellationToken, outcome: str, started: float) -> None:
        duration = time.monotonic() - started
        self.metrics.record_cycle(outcome, duration)
        logger.info(
            f"Load cycle {token.generation} finished: {outcome}",
            extra={
                "generation": token.generation,
                "outcome": outcome,
                "duration_seconds": round(duration, 3),
                "entry_count": len(self.entries) if outcome != "superseded" else None,
            },
        )

    # =======================
    # PRODUCER
    # =======================

    async def stream(self, window: DateRange, token: CancellationToken) -> AsyncIterator[LoadEvent]:
        """
        Produce the events of one load cycle.

        Does not touch the store or published progress; ``load``/``start``
        fold these events into the orchestrator's state. Stops producing as
        soon as the token is cancelled.

        Args:
            window: Day range to load
            token: Cancellation token of the cycle
        """
        yield LoadEvent(
            state=LoaderState.PAGINATING,
            progress=Progress(phase="paginating", message="Fetching dispatches..."),
        )

        parents = []
        try:
            async for page in self.pagination.iter_pages(window, token):
                parents.extend(page.items)
                yield LoadEvent(
                    state=LoaderState.PAGINATING,
                    progress=Progress(
                        phase="paginating",
                        current=page.collected,
                        total=page.total,
                        message=f"Found {page.collected} dispatches...",
                    ),
                )
        except Exception as e:
            logger.error(
                f"Pagination failed for cycle {token.generation}: {e}",
                extra={"generation": token.generation, "error_type": type(e).__name__},
                exc_info=True,
            )
            yield self._error_event(e)
            return

        if token.cancelled:
            return

        if not parents:
            yield LoadEvent(
                state=LoaderState.DONE,
                progress=Progress(phase="done", message="No dispatches found"),
            )
            return

        normalizer = EntryNormalizer(
            directory_names=self.directory.names,
            default_hourly_rate=self.settings.default_hourly_rate,
            clock=self.clock,
        )
        fanout = BatchFanoutFetcher(self.child_source, normalizer, self.settings.batch_size, self.metrics)
        total = len(parents)
        batch_progress: list[Progress] = []

        def on_progress(processed: int, total_parents: int) -> None:
            batch_progress.append(Progress(
                phase="fetching",
                current=processed,
                total=total_parents,
                message=f"Loading entries ({processed}/{total_parents})...",
            ))

        yield LoadEvent(state=LoaderState.FETCHING_DETAILS)

        try:
            async with aclosing(fanout.iter_batches(parents, token, on_progress)) as batches:
                async for entries in batches:
                    yield LoadEvent(
                        state=LoaderState.FETCHING_DETAILS,
                        progress=batch_progress[-1],
                        entries=tuple(entries),
                    )
        except Exception as e:
            logger.error(
                f"Fetching entries failed for cycle {token.generation}: {e}",
                extra={"generation": token.generation, "error_type": type(e).__name__},
                exc_info=True,
            )
            yield self._error_event(e)
            return

        if token.cancelled:
            return

        yield LoadEvent(
            state=LoaderState.DONE,
            progress=Progress(phase="done", current=total, total=total, message="Complete"),
        )

    @staticmethod
    def _error_event(error: Exception) -> LoadEvent:
        return LoadEvent(
            state=LoaderState.ERROR,
            progress=Progress(phase="done", message=f"Error loading data: {error}"),
        )
