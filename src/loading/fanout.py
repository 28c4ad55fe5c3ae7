"""
BatchFanoutFetcher - fetches child records for dispatches in bounded batches.
"""

import asyncio
from collections.abc import AsyncIterator, Callable, Sequence
from typing import Any, Optional

from src.core.models import Entry, ParentRecord
from src.core.normalization import EntryNormalizer
from src.observability.logger import get_logger
from src.observability.metrics import MetricsCollector

from .cancellation import CancellationToken
from .sources.base import ChildRecordSource

logger = get_logger(__name__)

BatchProgressCallback = Callable[[int, int], None]


class BatchFanoutFetcher:
    """
    Splits dispatches into consecutive batches and, per batch, fetches the
    time entries and expenses of every dispatch concurrently.

    Batches run strictly one after another. A failed child fetch is
    replaced by an empty collection and never affects sibling fetches or
    later batches.
    """

    def __init__(
        self,
        source: ChildRecordSource,
        normalizer: EntryNormalizer,
        batch_size: int = 5,
        metrics: Optional[MetricsCollector] = None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.source = source
        self.normalizer = normalizer
        self.batch_size = batch_size
        self.metrics = metrics or MetricsCollector()

    def batches(self, parents: Sequence[ParentRecord]) -> list[Sequence[ParentRecord]]:
        """Consecutive slices of at most batch_size dispatches."""
        return [parents[i:i + self.batch_size] for i in range(0, len(parents), self.batch_size)]

    async def iter_batches(
        self,
        parents: Sequence[ParentRecord],
        token: CancellationToken,
        on_progress: Optional[BatchProgressCallback] = None,
    ) -> AsyncIterator[list[Entry]]:
        """
        Yield the normalized entries of each batch, in batch order.

        Within a batch the output follows dispatch order, with time
        entries before expenses for each dispatch.

        Args:
            parents: Dispatches to load, in report order
            token: Cancellation token of the calling cycle
            on_progress: Called after each batch settles with
                (processed dispatch count, total dispatch count)
        """
        total = len(parents)
        processed = 0

        for batch in self.batches(parents):
            if token.cancelled:
                logger.info(
                    f"Fan-out superseded after {processed}/{total} dispatches",
                    extra={"generation": token.generation},
                )
                return

            results = await asyncio.gather(*(self._fetch_parent(parent) for parent in batch))
            entries = [entry for parent_entries in results for entry in parent_entries]

            processed += len(batch)
            self.metrics.record_batch(len(batch), entries)
            if on_progress is not None:
                on_progress(processed, total)

            yield entries

    async def _fetch_parent(self, parent: ParentRecord) -> list[Entry]:
        if parent.id is None:
            logger.warning("Skipping dispatch without id")
            return []

        time_records, expense_records = await asyncio.gather(
            self._fetch_children(parent, "time"),
            self._fetch_children(parent, "expense"),
        )
        return self.normalizer.normalize_parent(parent, time_records, expense_records)

    async def _fetch_children(self, parent: ParentRecord, kind: str) -> list[Any]:
        embedded = parent.time_entries if kind == "time" else parent.expenses
        if embedded is not None:
            return embedded

        fetch = self.source.get_time_entries if kind == "time" else self.source.get_expenses
        try:
            records = await fetch(parent.id)
        except Exception as e:
            self.metrics.record_child_failure(kind)
            logger.warning(
                f"Failed to fetch {kind} records for dispatch {parent.id}: {e}",
                extra={"parent_id": parent.id, "kind": kind, "error_type": type(e).__name__},
            )
            return []

        if not isinstance(records, list):
            logger.warning(
                f"Ignoring non-list {kind} payload for dispatch {parent.id}",
                extra={"parent_id": parent.id, "kind": kind},
            )
            return []
        return records
